# shiprates/services/shipping_rates/pricing.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ShippingCost:
    amount: int
    is_free: bool
    free_threshold_met: bool


def free_threshold_met(rate: Any, total: int) -> bool:
    threshold = rate.free_threshold
    return threshold is not None and int(total) >= int(threshold)


def calc_cost(rate: Any, total: int) -> ShippingCost:
    """
    整段定价（flat per bracket）：
    - free_threshold 非空且 total >= free_threshold → 0
    - 否则原样返回 rate.rate（不按重量折算）
    """
    met = free_threshold_met(rate, total)
    amount = 0 if met else int(rate.rate)
    return ShippingCost(amount=amount, is_free=amount == 0, free_threshold_met=met)
