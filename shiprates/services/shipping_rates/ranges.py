# shiprates/services/shipping_rates/ranges.py
from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional


@dataclass(frozen=True)
class Interval:
    """
    闭区间 [low, high]；high=None 视为 +∞。
    """

    low: int = 0
    high: Optional[int] = None

    def contains(self, value: int) -> bool:
        if value < self.low:
            return False
        return self.high is None or value <= self.high

    def intersects(self, other: "Interval") -> bool:
        if self.high is not None and other.low > self.high:
            return False
        if other.high is not None and self.low > other.high:
            return False
        return True

    @property
    def width(self) -> float:
        if self.high is None:
            return math.inf
        return float(self.high - self.low)

    @property
    def is_valid(self) -> bool:
        return self.low >= 0 and (self.high is None or self.high >= self.low)


@dataclass(frozen=True)
class RateRange:
    weight: Interval
    total: Interval

    @classmethod
    def of(
        cls,
        min_weight: Optional[int],
        max_weight: Optional[int],
        min_total: Optional[int],
        max_total: Optional[int],
    ) -> "RateRange":
        # 下界 NULL 视为 0
        return cls(
            weight=Interval(int(min_weight or 0), None if max_weight is None else int(max_weight)),
            total=Interval(int(min_total or 0), None if max_total is None else int(max_total)),
        )

    @classmethod
    def from_rate(cls, rate: Any) -> "RateRange":
        return cls.of(rate.min_weight, rate.max_weight, rate.min_total, rate.max_total)

    def contains(self, weight: int, total: int) -> bool:
        return self.weight.contains(weight) and self.total.contains(total)

    def overlaps(self, other: "RateRange") -> bool:
        # 两个维度同时相交才算冲突；任一维度不相交即可共存
        return self.weight.intersects(other.weight) and self.total.intersects(other.total)


def kg_to_grams(weight_kg: object) -> int:
    """调用方单位换算：kg → 整数克（四舍五入到克）。"""
    d = Decimal(str(weight_kg))
    return int((d * 1000).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
