# shiprates/services/shipping_rates/resolver.py
from __future__ import annotations

from typing import Any, List, Optional, Protocol, Sequence

from .errors import RateNotFound
from .ranges import RateRange
from .validators import ensure_query_point


class ActiveRateSource(Protocol):
    def find_active_rates_for(self, method_id: int, zone_id: int) -> Sequence[Any]: ...


def _specificity_key(rate: Any):
    r = RateRange.from_rate(rate)
    return (r.total.width, r.weight.width, int(rate.id))


def select_rate(rates: Sequence[Any], weight: int, total: int) -> Optional[Any]:
    """
    命中语义：闭区间 [min, max]，max 为 NULL 视为 +∞；inactive 不参与。

    正常数据下最多一条命中；若多条（目录被外部导入破坏），按以下顺序稳定裁决：
      1) total 区间最窄
      2) weight 区间最窄
      3) id 最小
    """
    candidates: List[Any] = []
    for r in rates:
        if not bool(r.is_active):
            continue
        if RateRange.from_rate(r).contains(int(weight), int(total)):
            candidates.append(r)

    if not candidates:
        return None

    candidates.sort(key=_specificity_key)
    return candidates[0]


class RateResolver:
    def __init__(self, catalog: ActiveRateSource) -> None:
        self.catalog = catalog

    def resolve(self, method_id: int, zone_id: int, weight: int, total: int) -> Any:
        ensure_query_point(weight, total)
        rates = self.catalog.find_active_rates_for(int(method_id), int(zone_id))
        hit = select_rate(rates, weight, total)
        if hit is None:
            raise RateNotFound(
                f"no active rate for method={int(method_id)} zone={int(zone_id)} "
                f"weight={int(weight)} total={int(total)}"
            )
        return hit
