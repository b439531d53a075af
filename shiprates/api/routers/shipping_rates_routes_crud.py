# shiprates/api/routers/shipping_rates_routes_crud.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from shiprates.api.routers.shipping_rates_helpers import raise_for_rate_error
from shiprates.api.routers.shipping_rates_schemas import (
    ShippingRateCreateIn,
    ShippingRateOut,
    ShippingRateUpdateIn,
)
from shiprates.db.session import get_db
from shiprates.services.shipping_rates import (
    RateConflict,
    RateDraft,
    RateFilters,
    RateNotFound,
    RateValidationError,
    activate_rate,
    create_rate,
    deactivate_rate,
    delete_rate,
    get_rate,
    list_rates,
    update_rate,
)

_RATE_ERRORS = (RateNotFound, RateValidationError, RateConflict)


def register_crud_routes(router: APIRouter) -> None:
    @router.get("/shipping-rates", response_model=List[ShippingRateOut])
    def list_shipping_rates(
        shipping_method_id: Optional[int] = Query(None, ge=1),
        shipping_zone_id: Optional[int] = Query(None, ge=1),
        is_active: Optional[bool] = Query(None),
        min_rate: Optional[int] = Query(None, ge=0),
        max_rate: Optional[int] = Query(None, ge=0),
        weight: Optional[int] = Query(None, ge=0, description="applicable to this weight (grams)"),
        total: Optional[int] = Query(None, ge=0, description="applicable to this order total (pence)"),
        db: Session = Depends(get_db),
    ):
        rows = list_rates(
            db,
            RateFilters(
                shipping_method_id=shipping_method_id,
                shipping_zone_id=shipping_zone_id,
                is_active=is_active,
                min_rate=min_rate,
                max_rate=max_rate,
                weight=weight,
                total=total,
            ),
        )
        return [ShippingRateOut.model_validate(r) for r in rows]

    @router.post(
        "/shipping-rates",
        response_model=ShippingRateOut,
        status_code=status.HTTP_201_CREATED,
    )
    def create_shipping_rate(
        payload: ShippingRateCreateIn,
        db: Session = Depends(get_db),
    ):
        try:
            row = create_rate(db, RateDraft(**payload.model_dump()))
        except _RATE_ERRORS as e:
            raise_for_rate_error(e)
        return ShippingRateOut.model_validate(row)

    @router.get("/shipping-rates/{rate_id}", response_model=ShippingRateOut)
    def get_shipping_rate(
        rate_id: int = Path(..., ge=1),
        db: Session = Depends(get_db),
    ):
        try:
            row = get_rate(db, rate_id=rate_id)
        except RateNotFound as e:
            raise_for_rate_error(e)
        return ShippingRateOut.model_validate(row)

    @router.patch("/shipping-rates/{rate_id}", response_model=ShippingRateOut)
    def update_shipping_rate(
        rate_id: int = Path(..., ge=1),
        payload: ShippingRateUpdateIn = ...,
        db: Session = Depends(get_db),
    ):
        try:
            row = update_rate(db, rate_id=rate_id, changes=payload.model_dump(exclude_unset=True))
        except _RATE_ERRORS as e:
            raise_for_rate_error(e)
        return ShippingRateOut.model_validate(row)

    @router.delete("/shipping-rates/{rate_id}", status_code=status.HTTP_200_OK)
    def delete_shipping_rate(
        rate_id: int = Path(..., ge=1),
        db: Session = Depends(get_db),
    ):
        try:
            delete_rate(db, rate_id=rate_id)
        except RateNotFound as e:
            raise_for_rate_error(e)
        return {"ok": True}

    @router.post("/shipping-rates/{rate_id}/activate", response_model=ShippingRateOut)
    def activate_shipping_rate(
        rate_id: int = Path(..., ge=1),
        db: Session = Depends(get_db),
    ):
        try:
            row = activate_rate(db, rate_id=rate_id)
        except _RATE_ERRORS as e:
            raise_for_rate_error(e)
        return ShippingRateOut.model_validate(row)

    @router.post("/shipping-rates/{rate_id}/deactivate", response_model=ShippingRateOut)
    def deactivate_shipping_rate(
        rate_id: int = Path(..., ge=1),
        db: Session = Depends(get_db),
    ):
        try:
            row = deactivate_rate(db, rate_id=rate_id)
        except _RATE_ERRORS as e:
            raise_for_rate_error(e)
        return ShippingRateOut.model_validate(row)
