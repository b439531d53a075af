# shiprates/services/shipping_rates/crud.py
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from sqlalchemy.orm import Session

from shiprates.db.locks import rate_pair_locks
from shiprates.models.shipping_rate import ShippingRate

from .catalog import RateCatalog, RateFilters
from .conflicts import ConflictValidator
from .errors import RateValidationError
from .types import RateDraft, _utcnow
from .validators import ensure_valid_draft

logger = logging.getLogger("shiprates.crud")

UPDATABLE_FIELDS = (
    "shipping_method_id",
    "shipping_zone_id",
    "min_weight",
    "max_weight",
    "min_total",
    "max_total",
    "rate",
    "free_threshold",
    "is_active",
)

# 显式 None 不代表清空：视为未传
NON_NULLABLE_FIELDS = ("shipping_method_id", "shipping_zone_id", "min_weight", "min_total", "rate", "is_active")


def _ensure_method_and_zone(catalog: RateCatalog, method_id: int, zone_id: int) -> None:
    details = []
    if catalog.get_method(method_id) is None:
        details.append(
            {"type": "validation", "path": "shipping_method_id", "reason": "Selected shipping method does not exist."}
        )
    if catalog.get_zone(zone_id) is None:
        details.append(
            {"type": "validation", "path": "shipping_zone_id", "reason": "Selected shipping zone does not exist."}
        )
    if details:
        raise RateValidationError(details[0]["reason"], details=details)


def get_rate(db: Session, *, rate_id: int) -> ShippingRate:
    return RateCatalog(db).require(rate_id)


def list_rates(db: Session, filters: Optional[RateFilters] = None) -> List[ShippingRate]:
    rows = RateCatalog(db).list_rates(filters)
    logger.debug("shipping rates listed: count=%d filters=%s", len(rows), filters)
    return rows


def create_rate(db: Session, draft: RateDraft) -> ShippingRate:
    """单条写入：校验区间 → method/zone 存在 → (active 时) 冲突校验 → insert。"""
    catalog = RateCatalog(db)
    ensure_valid_draft(draft)
    _ensure_method_and_zone(catalog, draft.shipping_method_id, draft.shipping_zone_id)

    pair = (int(draft.shipping_method_id), int(draft.shipping_zone_id))
    try:
        with rate_pair_locks(db, [pair]):
            if draft.is_active:
                ConflictValidator(catalog).ensure_no_conflict(*pair, draft.range)
            row = catalog.add(draft)
            db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(row)
    logger.info(
        "shipping rate created: rate_id=%d method_id=%d zone_id=%d rate=%d",
        row.id,
        row.shipping_method_id,
        row.shipping_zone_id,
        row.rate,
    )
    return row


def update_rate(db: Session, *, rate_id: int, changes: Mapping[str, Any]) -> ShippingRate:
    """
    patch 入口：
      - 只改出现在 changes 里的字段（max_* / free_threshold 显式 None = 清空）
      - 不可空字段（NON_NULLABLE_FIELDS）显式 None 视为未传
      - 可改挂到其它 method / zone（需存在）
      - 合并后整行重新校验区间
      - 合并后为 active 时，在目标 (method, zone) 下排除自身做冲突校验
    """
    catalog = RateCatalog(db)
    row = catalog.require(rate_id)

    data = {
        k: v
        for k, v in changes.items()
        if k in UPDATABLE_FIELDS and not (k in NON_NULLABLE_FIELDS and v is None)
    }
    merged = RateDraft(
        shipping_method_id=int(data.get("shipping_method_id", row.shipping_method_id)),
        shipping_zone_id=int(data.get("shipping_zone_id", row.shipping_zone_id)),
        rate=data.get("rate", row.rate),
        min_weight=data.get("min_weight", row.min_weight),
        max_weight=data["max_weight"] if "max_weight" in data else row.max_weight,
        min_total=data.get("min_total", row.min_total),
        max_total=data["max_total"] if "max_total" in data else row.max_total,
        free_threshold=data["free_threshold"] if "free_threshold" in data else row.free_threshold,
        is_active=bool(data.get("is_active", row.is_active)),
    )
    ensure_valid_draft(merged)

    old_pair = (int(row.shipping_method_id), int(row.shipping_zone_id))
    pair = (merged.shipping_method_id, merged.shipping_zone_id)
    if pair != old_pair:
        _ensure_method_and_zone(catalog, *pair)

    old = {
        "shipping_method_id": old_pair[0],
        "shipping_zone_id": old_pair[1],
        "rate": row.rate,
        "is_active": row.is_active,
        "min_weight": row.min_weight,
        "max_weight": row.max_weight,
    }
    try:
        with rate_pair_locks(db, {old_pair, pair}):
            if merged.is_active:
                ConflictValidator(catalog).ensure_no_conflict(*pair, merged.range, exclude_id=int(row.id))

            row.shipping_method_id = merged.shipping_method_id
            row.shipping_zone_id = merged.shipping_zone_id
            row.min_weight = int(merged.min_weight)
            row.max_weight = merged.max_weight
            row.min_total = int(merged.min_total)
            row.max_total = merged.max_total
            row.rate = int(merged.rate)
            row.free_threshold = merged.free_threshold
            row.is_active = merged.is_active
            row.updated_at = _utcnow()
            db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(row)
    logger.info(
        "shipping rate updated: rate_id=%d old_data=%s updated_fields=%s",
        row.id,
        old,
        sorted(data.keys()),
    )
    return row


def activate_rate(db: Session, *, rate_id: int) -> ShippingRate:
    return update_rate(db, rate_id=rate_id, changes={"is_active": True})


def deactivate_rate(db: Session, *, rate_id: int) -> ShippingRate:
    return update_rate(db, rate_id=rate_id, changes={"is_active": False})


def delete_rate(db: Session, *, rate_id: int) -> None:
    """硬删除：引擎层不做额外限制（权限由外层负责）。"""
    catalog = RateCatalog(db)
    row = catalog.require(rate_id)
    method_id, zone_id = int(row.shipping_method_id), int(row.shipping_zone_id)

    catalog.delete(row)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("shipping rate deleted: rate_id=%d method_id=%d zone_id=%d", int(rate_id), method_id, zone_id)
