# shiprates/services/shipping_rates/conflicts.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from .errors import RateConflict
from .ranges import RateRange
from .resolver import ActiveRateSource
from .types import RateDraft, Rejection

PairKey = Tuple[int, int]


def overlapping(rates: Sequence[Any], candidate: RateRange, *, exclude_id: Optional[int] = None) -> List[Any]:
    """
    纯函数：rates 中与 candidate 在 weight 与 total 两个维度都相交的 active 费率。
    """
    out: List[Any] = []
    for r in rates:
        if not bool(r.is_active):
            continue
        if exclude_id is not None and r.id is not None and int(r.id) == int(exclude_id):
            continue
        if RateRange.from_rate(r).overlaps(candidate):
            out.append(r)
    return out


def _describe(rng: RateRange) -> str:
    w, t = rng.weight, rng.total
    return (
        f"weight[{w.low},{'inf' if w.high is None else w.high}] "
        f"total[{t.low},{'inf' if t.high is None else t.high}]"
    )


class ConflictValidator:
    """
    区间冲突校验：只与同一 (method, zone) 下的 active 费率比较。
    停用费率不参与；候选本身为停用时也不校验。
    """

    def __init__(self, catalog: ActiveRateSource) -> None:
        self.catalog = catalog
        self._cache: Dict[PairKey, List[Any]] = {}

    def _active(self, method_id: int, zone_id: int) -> List[Any]:
        key = (int(method_id), int(zone_id))
        rows = self._cache.get(key)
        if rows is None:
            rows = list(self.catalog.find_active_rates_for(*key))
            self._cache[key] = rows
        return rows

    def find_conflicts(
        self,
        method_id: int,
        zone_id: int,
        candidate: RateRange,
        *,
        exclude_id: Optional[int] = None,
    ) -> List[Any]:
        return overlapping(self._active(method_id, zone_id), candidate, exclude_id=exclude_id)

    def has_conflict(
        self,
        method_id: int,
        zone_id: int,
        candidate: RateRange,
        *,
        exclude_id: Optional[int] = None,
    ) -> bool:
        return bool(self.find_conflicts(method_id, zone_id, candidate, exclude_id=exclude_id))

    def ensure_no_conflict(
        self,
        method_id: int,
        zone_id: int,
        candidate: RateRange,
        *,
        exclude_id: Optional[int] = None,
    ) -> None:
        hits = self.find_conflicts(method_id, zone_id, candidate, exclude_id=exclude_id)
        if hits:
            ids = sorted(int(r.id) for r in hits)
            raise RateConflict(
                f"{_describe(candidate)} overlaps active rate(s) {ids} "
                f"for method={int(method_id)} zone={int(zone_id)}",
                conflicting_ids=ids,
            )

    def find_batch_conflicts(self, items: Sequence[Tuple[int, RateDraft]]) -> List[Rejection]:
        """
        批量校验：每个候选同时对照
          1) 目录中的 active 费率
          2) 同批次中先前已接受的候选（防止批次自冲突）
        items = [(原始下标, draft)]；返回被拒绝的候选。
        """
        accepted: Dict[PairKey, List[Tuple[int, RateRange]]] = {}
        rejected: List[Rejection] = []

        for index, draft in items:
            if not draft.is_active:
                continue

            key = (int(draft.shipping_method_id), int(draft.shipping_zone_id))
            rng = draft.range

            hits = self.find_conflicts(*key, rng)
            if hits:
                ids = sorted(int(r.id) for r in hits)
                rejected.append(
                    Rejection(
                        index=index,
                        code="conflict",
                        reason=f"Rate {index}: overlapping rate already exists for this method/zone combination (ids={ids}).",
                        conflicting_ids=ids,
                    )
                )
                continue

            earlier = [i for i, other in accepted.get(key, []) if other.overlaps(rng)]
            if earlier:
                rejected.append(
                    Rejection(
                        index=index,
                        code="conflict",
                        reason=f"Rate {index}: overlaps rate {earlier[0]} in the same batch.",
                    )
                )
                continue

            accepted.setdefault(key, []).append((index, rng))

        return rejected
