# shiprates/api/routers/shipping_rates_routes_calc.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from shiprates.api.routers.shipping_rates_helpers import raise_for_rate_error
from shiprates.api.routers.shipping_rates_schemas import (
    CalculateIn,
    CalculateOut,
    MethodQuoteOut,
    ShippingRateOut,
    ZoneQuotesOut,
)
from shiprates.db.session import get_db
from shiprates.services.shipping_rates import (
    RateNotFound,
    RateValidationError,
    kg_to_grams,
    quote,
    quote_zone,
)


def register_calc_routes(router: APIRouter) -> None:
    @router.post("/shipping-rates/calculate", response_model=CalculateOut)
    def calculate_shipping_cost(
        payload: CalculateIn,
        db: Session = Depends(get_db),
    ):
        weight = payload.weight if payload.weight is not None else kg_to_grams(payload.weight_kg)
        try:
            q = quote(
                db,
                method_id=payload.shipping_method_id,
                zone_id=payload.shipping_zone_id,
                weight=weight,
                total=payload.total,
            )
        except (RateNotFound, RateValidationError) as e:
            raise_for_rate_error(e)

        return CalculateOut(
            rate=ShippingRateOut.model_validate(q.rate),
            weight=q.weight,
            total=q.total,
            cost=q.cost,
            is_free=q.is_free,
            free_threshold_met=q.free_threshold_met,
        )

    @router.get("/shipping-zones/{zone_id}/quotes", response_model=ZoneQuotesOut)
    def quote_shipping_zone(
        zone_id: int = Path(..., ge=1),
        weight: int = Query(..., ge=0, description="grams"),
        total: int = Query(..., ge=0, description="pence"),
        db: Session = Depends(get_db),
    ):
        try:
            zq = quote_zone(db, zone_id=zone_id, weight=weight, total=total)
        except RateValidationError as e:
            raise_for_rate_error(e)

        cheapest = zq.cheapest
        fastest = zq.fastest
        return ZoneQuotesOut(
            zone_id=zq.zone_id,
            weight=weight,
            total=total,
            quotes=[
                MethodQuoteOut(
                    method_id=int(mq.method.id),
                    name=mq.method.name,
                    carrier=mq.method.carrier,
                    service_code=mq.method.service_code,
                    rate_id=int(mq.quote.rate.id),
                    cost=mq.quote.cost,
                    is_free=mq.quote.is_free,
                    free_threshold_met=mq.quote.free_threshold_met,
                    estimated_days_min=mq.method.estimated_days_min,
                    estimated_days_max=mq.method.estimated_days_max,
                )
                for mq in zq.quotes
            ],
            cheapest_method_id=int(cheapest.method.id) if cheapest else None,
            fastest_method_id=int(fastest.method.id) if fastest else None,
        )
