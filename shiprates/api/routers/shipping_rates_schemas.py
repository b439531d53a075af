# shiprates/api/routers/shipping_rates_schemas.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ShippingRateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    shipping_method_id: int
    shipping_zone_id: int

    # weight：克；total / rate / free_threshold：便士
    min_weight: int
    max_weight: Optional[int] = None
    min_total: int
    max_total: Optional[int] = None
    rate: int
    free_threshold: Optional[int] = None

    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ShippingRateCreateIn(BaseModel):
    shipping_method_id: int = Field(..., ge=1)
    shipping_zone_id: int = Field(..., ge=1)

    min_weight: int = Field(0, ge=0)
    max_weight: Optional[int] = Field(None, ge=0)  # null = 无上限
    min_total: int = Field(0, ge=0)
    max_total: Optional[int] = Field(None, ge=0)  # null = 无上限

    rate: int = Field(..., ge=0)
    free_threshold: Optional[int] = Field(None, ge=0)
    is_active: bool = True

    @model_validator(mode="after")
    def _validate_range(self):
        if self.max_weight is not None and self.max_weight < self.min_weight:
            raise ValueError("max_weight must be >= min_weight")
        if self.max_total is not None and self.max_total < self.min_total:
            raise ValueError("max_total must be >= min_total")
        return self


class ShippingRateUpdateIn(BaseModel):
    # 合并后的整行区间校验在 service 层做（需要 DB 现值补齐）
    # 改挂 method / zone：目标需存在，并在目标组合下做冲突校验
    shipping_method_id: Optional[int] = Field(None, ge=1)
    shipping_zone_id: Optional[int] = Field(None, ge=1)
    min_weight: Optional[int] = Field(None, ge=0)
    max_weight: Optional[int] = Field(None, ge=0)
    min_total: Optional[int] = Field(None, ge=0)
    max_total: Optional[int] = Field(None, ge=0)
    rate: Optional[int] = Field(None, ge=0)
    free_threshold: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class RateCandidateIn(BaseModel):
    """
    bulk create 的单行：不在 schema 层拦截取值范围，
    由 service 逐行校验并按下标回报（rates[i]）。
    """

    shipping_method_id: int
    shipping_zone_id: int
    min_weight: int = 0
    max_weight: Optional[int] = None
    min_total: int = 0
    max_total: Optional[int] = None
    rate: int
    free_threshold: Optional[int] = None
    is_active: bool = True


class BulkCreateIn(BaseModel):
    rates: List[RateCandidateIn] = Field(..., min_length=1)


class BulkCreateOut(BaseModel):
    ok: bool = True
    created_count: int
    created_ids: List[int] = Field(default_factory=list)


class BulkUpdateChanges(BaseModel):
    rate: Optional[int] = None
    free_threshold: Optional[int] = None
    is_active: Optional[bool] = None


class BulkUpdateIn(BaseModel):
    rate_ids: List[int] = Field(..., min_length=1)
    updates: BulkUpdateChanges


class BulkUpdateOut(BaseModel):
    ok: bool = True
    updated_count: int


class DuplicateIn(BaseModel):
    zone_ids: List[int] = Field(..., min_length=1)


class DuplicateOut(BaseModel):
    ok: bool = True
    source_rate_id: int
    duplicated_count: int
    duplicated_rate_ids: List[int] = Field(default_factory=list)
    skipped: List[Dict[str, Any]] = Field(default_factory=list)


class CalculateIn(BaseModel):
    shipping_method_id: int = Field(..., ge=1)
    shipping_zone_id: int = Field(..., ge=1)

    # 二选一：weight（克）或 weight_kg（由接口换算为克）
    weight: Optional[int] = Field(None, ge=0)
    weight_kg: Optional[Decimal] = Field(None, ge=0)

    total: int = Field(..., ge=0)

    @model_validator(mode="after")
    def _one_weight(self):
        if (self.weight is None) == (self.weight_kg is None):
            raise ValueError("exactly one of weight / weight_kg is required")
        return self


class CalculateOut(BaseModel):
    ok: bool = True
    rate: ShippingRateOut
    weight: int
    total: int
    cost: int
    is_free: bool
    free_threshold_met: bool


class MethodQuoteOut(BaseModel):
    method_id: int
    name: str
    carrier: str
    service_code: Optional[str] = None
    rate_id: int
    cost: int
    is_free: bool
    free_threshold_met: bool
    estimated_days_min: Optional[int] = None
    estimated_days_max: Optional[int] = None


class ZoneQuotesOut(BaseModel):
    ok: bool = True
    zone_id: int
    weight: int
    total: int
    quotes: List[MethodQuoteOut] = Field(default_factory=list)
    cheapest_method_id: Optional[int] = None
    fastest_method_id: Optional[int] = None
