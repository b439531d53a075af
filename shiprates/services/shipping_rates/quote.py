# shiprates/services/shipping_rates/quote.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from shiprates.metrics import QUOTES

from .catalog import RateCatalog
from .errors import RateNotFound, RateValidationError
from .pricing import calc_cost
from .resolver import RateResolver, select_rate
from .validators import ensure_query_point

logger = logging.getLogger("shiprates.quote")


@dataclass
class ShippingQuote:
    rate: Any
    cost: int
    is_free: bool
    free_threshold_met: bool
    weight: int
    total: int


@dataclass
class MethodQuote:
    method: Any
    quote: ShippingQuote


@dataclass
class ZoneQuotes:
    zone_id: int
    quotes: List[MethodQuote] = field(default_factory=list)

    @property
    def cheapest(self) -> Optional[MethodQuote]:
        if not self.quotes:
            return None
        return min(self.quotes, key=lambda q: (q.quote.cost, int(q.method.display_order), int(q.method.id)))

    @property
    def fastest(self) -> Optional[MethodQuote]:
        if not self.quotes:
            return None

        def key(q: MethodQuote):
            days = q.method.estimated_days_min
            # 无时效的 method 排在最后
            return (days is None, days or 0, q.quote.cost, int(q.method.id))

        return min(self.quotes, key=key)


def quote(db: Session, *, method_id: int, zone_id: int, weight: int, total: int) -> ShippingQuote:
    """
    resolve + cost：
      - method / zone 不存在 → RateValidationError
      - 无命中费率 → RateNotFound（引擎不猜默认费率）
    """
    catalog = RateCatalog(db)
    ensure_query_point(weight, total)

    details: List[Dict[str, Any]] = []
    if catalog.get_method(method_id) is None:
        details.append({"type": "validation", "path": "shipping_method_id", "reason": "shipping method not found"})
    if catalog.get_zone(zone_id) is None:
        details.append({"type": "validation", "path": "shipping_zone_id", "reason": "shipping zone not found"})
    if details:
        QUOTES.labels(outcome="invalid").inc()
        raise RateValidationError(details[0]["reason"], details=details)

    try:
        rate = RateResolver(catalog).resolve(method_id, zone_id, weight, total)
    except RateNotFound:
        QUOTES.labels(outcome="not_found").inc()
        logger.info(
            "no shipping rate: method_id=%d zone_id=%d weight=%d total=%d",
            int(method_id),
            int(zone_id),
            int(weight),
            int(total),
        )
        raise

    c = calc_cost(rate, total)
    QUOTES.labels(outcome="ok").inc()
    logger.info(
        "shipping cost calculated: method_id=%d zone_id=%d weight=%d total=%d calculated_cost=%d rate_id=%d",
        int(method_id),
        int(zone_id),
        int(weight),
        int(total),
        c.amount,
        int(rate.id),
    )
    return ShippingQuote(
        rate=rate,
        cost=c.amount,
        is_free=c.is_free,
        free_threshold_met=c.free_threshold_met,
        weight=int(weight),
        total=int(total),
    )


def quote_zone(db: Session, *, zone_id: int, weight: int, total: int) -> ZoneQuotes:
    """
    一个 zone 下所有 active method 的报价（按 display_order, id）；
    没有命中费率的 method 直接略过。
    """
    catalog = RateCatalog(db)
    ensure_query_point(weight, total)
    if catalog.get_zone(zone_id) is None:
        raise RateValidationError(
            "shipping zone not found",
            details=[{"type": "validation", "path": "zone_id", "reason": "shipping zone not found"}],
        )

    out = ZoneQuotes(zone_id=int(zone_id))
    for m in catalog.active_methods():
        rate = select_rate(catalog.find_active_rates_for(int(m.id), int(zone_id)), weight, total)
        if rate is None:
            continue
        c = calc_cost(rate, total)
        out.quotes.append(
            MethodQuote(
                method=m,
                quote=ShippingQuote(
                    rate=rate,
                    cost=c.amount,
                    is_free=c.is_free,
                    free_threshold_met=c.free_threshold_met,
                    weight=int(weight),
                    total=int(total),
                ),
            )
        )

    QUOTES.labels(outcome="zone").inc()
    logger.info(
        "zone quotes calculated: zone_id=%d weight=%d total=%d methods=%d",
        int(zone_id),
        int(weight),
        int(total),
        len(out.quotes),
    )
    return out
