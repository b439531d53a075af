# tests/services/test_shipping_rates_bulk.py
from __future__ import annotations

from typing import Dict

import pytest

from shiprates.models.shipping_rate import ShippingRate
from shiprates.services.shipping_rates import (
    BulkMutationCoordinator,
    NotApplicable,
    RateConflict,
    RateDraft,
    RateNotFound,
    create_rate,
    get_rate,
)


def _d(seed: Dict[str, int], w, t=(0, 5000), **kw) -> RateDraft:
    return RateDraft(
        shipping_method_id=kw.pop("method", seed["standard"]),
        shipping_zone_id=kw.pop("zone", seed["uk"]),
        rate=kw.pop("rate", 500),
        min_weight=w[0],
        max_weight=w[1],
        min_total=t[0],
        max_total=t[1],
        **kw,
    )


def _count(db) -> int:
    return db.query(ShippingRate).count()


# ------------------------------------------------------------------
# bulk create
# ------------------------------------------------------------------
def test_bulk_create_all_valid(db, seed):
    out = BulkMutationCoordinator(db).bulk_create(
        [
            _d(seed, (0, 1000)),
            _d(seed, (1001, 5000)),
            _d(seed, (0, 1000), zone=seed["eu"]),
        ]
    )
    assert out.ok
    assert out.created_count == 3
    assert len(set(out.created_ids)) == 3
    assert _count(db) == 3


def test_bulk_create_one_invalid_inserts_nothing(db, seed):
    out = BulkMutationCoordinator(db).bulk_create(
        [
            _d(seed, (0, 1000)),
            _d(seed, (1001, 2000)),
            _d(seed, (3000, 100)),  # max < min
            _d(seed, (2001, 3000)),
        ]
    )
    assert not out.ok
    assert out.created_count == 0
    assert [(r.index, r.code) for r in out.rejected] == [(2, "validation_error")]
    assert out.rejected[0].reason.startswith("Rate 2:")
    assert _count(db) == 0


def test_bulk_create_reports_every_bad_row(db, seed):
    existing = create_rate(db, _d(seed, (0, 5000)))

    out = BulkMutationCoordinator(db).bulk_create(
        [
            _d(seed, (2000, 8000)),  # 与目录冲突
            _d(seed, (5001, 10000)),  # ok
            _d(seed, (9000, 12000)),  # 与 #1 冲突
            _d(seed, (0, 100), method=9999),  # method 不存在
            _d(seed, (0, 100), zone=9999),  # zone 不存在
        ]
    )
    assert [(r.index, r.code) for r in out.rejected] == [
        (0, "conflict"),
        (2, "conflict"),
        (3, "validation_error"),
        (4, "validation_error"),
    ]
    assert out.rejected[0].conflicting_ids == [existing.id]
    assert _count(db) == 1


def test_bulk_create_scenario_then_disjoint_batch(db, seed):
    create_rate(db, _d(seed, (0, 5000)))
    out = BulkMutationCoordinator(db).bulk_create([_d(seed, (5001, 10000))])
    assert out.ok
    assert _count(db) == 2


# ------------------------------------------------------------------
# bulk update
# ------------------------------------------------------------------
def test_bulk_update_applies_same_delta(db, seed):
    a = create_rate(db, _d(seed, (0, 1000)))
    b = create_rate(db, _d(seed, (1001, 2000), free_threshold=3000))

    n = BulkMutationCoordinator(db).bulk_update([a.id, b.id, 9999], {"rate": 750})
    assert n == 2

    db.expire_all()
    ra, rb = get_rate(db, rate_id=a.id), get_rate(db, rate_id=b.id)
    assert (ra.rate, rb.rate) == (750, 750)
    # 未出现的字段保持不变
    assert rb.free_threshold == 3000
    assert ra.max_weight == 1000


def test_bulk_update_empty_delta_is_not_applicable(db, seed):
    a = create_rate(db, _d(seed, (0, 1000)))
    with pytest.raises(NotApplicable):
        BulkMutationCoordinator(db).bulk_update([a.id], {})
    with pytest.raises(NotApplicable):
        BulkMutationCoordinator(db).bulk_update([a.id], {"min_weight": 5})


def test_bulk_update_unknown_ids_is_zero_count(db, seed):
    assert BulkMutationCoordinator(db).bulk_update([777, 778], {"is_active": False}) == 0


def test_bulk_update_activation_is_conflict_checked(db, seed):
    create_rate(db, _d(seed, (0, 5000)))
    b = create_rate(db, _d(seed, (0, 5000), is_active=False))
    c = create_rate(db, _d(seed, (6000, 7000), is_active=False))

    with pytest.raises(RateConflict) as ei:
        BulkMutationCoordinator(db).bulk_update([b.id, c.id], {"is_active": True})
    assert ei.value.index == b.id

    # 全有或全无：c 也未被激活
    db.expire_all()
    assert get_rate(db, rate_id=c.id).is_active is False

    assert BulkMutationCoordinator(db).bulk_update([c.id], {"is_active": True}) == 1


def test_bulk_update_deactivate_and_clear_threshold(db, seed):
    a = create_rate(db, _d(seed, (0, 5000), free_threshold=1000))
    n = BulkMutationCoordinator(db).bulk_update([a.id], {"is_active": False, "free_threshold": None})
    assert n == 1

    db.expire_all()
    row = get_rate(db, rate_id=a.id)
    assert row.is_active is False
    assert row.free_threshold is None


# ------------------------------------------------------------------
# duplicate
# ------------------------------------------------------------------
def test_duplicate_skips_source_and_conflicting_zones(db, seed):
    src = create_rate(db, _d(seed, (0, 5000), rate=650, free_threshold=4000))
    # EU 已有重叠费率
    create_rate(db, _d(seed, (1000, 2000), zone=seed["eu"]))

    zones = [seed["uk"], seed["eu"], seed["us"]]
    out = BulkMutationCoordinator(db).duplicate(src.id, zones)

    assert out.duplicated_count == len(zones) - 1 - 1
    assert out.skipped == [
        {"zone_id": seed["uk"], "reason": "source_zone"},
        {"zone_id": seed["eu"], "reason": "conflict"},
    ]

    copy = get_rate(db, rate_id=out.duplicated_rate_ids[0])
    assert copy.shipping_zone_id == seed["us"]
    assert copy.shipping_method_id == src.shipping_method_id
    assert (copy.min_weight, copy.max_weight, copy.min_total, copy.max_total) == (0, 5000, 0, 5000)
    assert (copy.rate, copy.free_threshold, copy.is_active) == (650, 4000, True)


def test_duplicate_dedupes_and_skips_unknown_zones(db, seed):
    src = create_rate(db, _d(seed, (0, 5000)))
    out = BulkMutationCoordinator(db).duplicate(src.id, [seed["eu"], seed["eu"], 9999])

    assert out.duplicated_count == 1
    assert out.skipped == [{"zone_id": 9999, "reason": "zone_not_found"}]


def test_duplicate_inactive_source_is_not_conflict_checked(db, seed):
    src = create_rate(db, _d(seed, (0, 5000), is_active=False))
    create_rate(db, _d(seed, (0, 5000), zone=seed["eu"]))

    out = BulkMutationCoordinator(db).duplicate(src.id, [seed["eu"]])
    assert out.duplicated_count == 1
    assert get_rate(db, rate_id=out.duplicated_rate_ids[0]).is_active is False


def test_duplicate_unknown_source(db, seed):
    with pytest.raises(RateNotFound):
        BulkMutationCoordinator(db).duplicate(4242, [seed["eu"]])
