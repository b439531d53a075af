# tests/unit/test_rate_resolver_select.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import pytest

from shiprates.services.shipping_rates.errors import RateNotFound, RateValidationError
from shiprates.services.shipping_rates.resolver import RateResolver, select_rate


@dataclass
class DummyRate:
    id: int
    min_weight: int = 0
    max_weight: Optional[int] = None
    min_total: int = 0
    max_total: Optional[int] = None
    rate: int = 500
    free_threshold: Optional[int] = None
    is_active: bool = True


class DummyCatalog:
    def __init__(self, rows: Dict[Tuple[int, int], List[DummyRate]]) -> None:
        self.rows = rows
        self.calls: List[Tuple[int, int]] = []

    def find_active_rates_for(self, method_id: int, zone_id: int) -> List[DummyRate]:
        self.calls.append((method_id, zone_id))
        return [r for r in self.rows.get((method_id, zone_id), []) if r.is_active]


def test_resolve_picks_rate_containing_point():
    a = DummyRate(id=1, min_weight=0, max_weight=5000, min_total=0, max_total=5000)
    b = DummyRate(id=2, min_weight=5001, max_weight=10000, min_total=0, max_total=5000, rate=900)
    resolver = RateResolver(DummyCatalog({(1, 2): [a, b]}))

    assert resolver.resolve(1, 2, 2000, 3000).id == 1
    assert resolver.resolve(1, 2, 5001, 3000).id == 2
    # 边界闭合
    assert resolver.resolve(1, 2, 5000, 5000).id == 1


def test_resolve_no_match_raises_not_found():
    a = DummyRate(id=1, min_weight=0, max_weight=5000, min_total=0, max_total=5000)
    resolver = RateResolver(DummyCatalog({(1, 2): [a]}))

    with pytest.raises(RateNotFound):
        resolver.resolve(1, 2, 5001, 100)
    with pytest.raises(RateNotFound):
        resolver.resolve(1, 2, 100, 5001)
    # 其它 (method, zone) 不会串台
    with pytest.raises(RateNotFound):
        resolver.resolve(1, 3, 100, 100)


def test_resolve_rejects_negative_inputs():
    resolver = RateResolver(DummyCatalog({}))
    with pytest.raises(RateValidationError):
        resolver.resolve(1, 2, -1, 0)
    with pytest.raises(RateValidationError):
        resolver.resolve(1, 2, 0, -1)


def test_inactive_rates_never_match():
    a = DummyRate(id=1, is_active=False)
    assert select_rate([a], 100, 100) is None


def test_overlapping_catalog_prefers_narrowest_total_then_weight_then_id():
    # 目录被外部导入破坏：多条同时命中
    wide_total = DummyRate(id=1, min_weight=0, max_weight=1000, min_total=0, max_total=None)
    narrow_total = DummyRate(id=7, min_weight=0, max_weight=None, min_total=0, max_total=100)
    assert select_rate([wide_total, narrow_total], 10, 10).id == 7

    same_total_wide_w = DummyRate(id=2, min_weight=0, max_weight=5000, min_total=0, max_total=100)
    same_total_narrow_w = DummyRate(id=9, min_weight=0, max_weight=50, min_total=0, max_total=100)
    assert select_rate([same_total_wide_w, same_total_narrow_w], 10, 10).id == 9

    twin_a = DummyRate(id=12, min_weight=0, max_weight=50, min_total=0, max_total=100)
    twin_b = DummyRate(id=4, min_weight=0, max_weight=50, min_total=0, max_total=100)
    assert select_rate([twin_a, twin_b], 10, 10).id == 4
    # 与输入顺序无关
    assert select_rate([twin_b, twin_a], 10, 10).id == 4


def test_midpoint_of_each_rate_resolves_to_itself():
    rates = [
        DummyRate(id=1, min_weight=0, max_weight=999, min_total=0, max_total=4999),
        DummyRate(id=2, min_weight=1000, max_weight=1999, min_total=0, max_total=4999),
        DummyRate(id=3, min_weight=0, max_weight=1999, min_total=5000, max_total=9999),
    ]
    for r in rates:
        mid_w = (r.min_weight + r.max_weight) // 2
        mid_t = (r.min_total + r.max_total) // 2
        assert select_rate(rates, mid_w, mid_t).id == r.id
