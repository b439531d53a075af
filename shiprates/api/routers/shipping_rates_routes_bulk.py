# shiprates/api/routers/shipping_rates_routes_bulk.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from shiprates.api.problem import raise_problem, rejection_detail
from shiprates.api.routers.shipping_rates_helpers import raise_for_rate_error
from shiprates.api.routers.shipping_rates_schemas import (
    BulkCreateIn,
    BulkCreateOut,
    BulkUpdateIn,
    BulkUpdateOut,
    DuplicateIn,
    DuplicateOut,
)
from shiprates.db.session import get_db
from shiprates.services.shipping_rates import (
    BulkMutationCoordinator,
    NotApplicable,
    RateConflict,
    RateDraft,
    RateNotFound,
    RateValidationError,
)


def register_bulk_routes(router: APIRouter) -> None:
    @router.post(
        "/shipping-rates/bulk",
        response_model=BulkCreateOut,
        status_code=status.HTTP_201_CREATED,
    )
    def bulk_create_shipping_rates(
        payload: BulkCreateIn,
        db: Session = Depends(get_db),
    ):
        drafts = [RateDraft(**r.model_dump()) for r in payload.rates]
        outcome = BulkMutationCoordinator(db).bulk_create(drafts)

        if not outcome.ok:
            # 全有或全无：任何一行被拒 → 整批不写入，回报完整的拒绝列表
            raise_problem(
                status_code=422,
                error_code="shipping_rates_bulk_rejected",
                message="Some rates could not be created; nothing was saved.",
                details=[rejection_detail(r) for r in outcome.rejected],
                context={"total_submitted": len(drafts), "rejected_count": len(outcome.rejected)},
            )

        return BulkCreateOut(created_count=outcome.created_count, created_ids=outcome.created_ids)

    @router.patch("/shipping-rates/bulk", response_model=BulkUpdateOut)
    def bulk_update_shipping_rates(
        payload: BulkUpdateIn,
        db: Session = Depends(get_db),
    ):
        try:
            n = BulkMutationCoordinator(db).bulk_update(
                payload.rate_ids, payload.updates.model_dump(exclude_unset=True)
            )
        except (RateValidationError, RateConflict, NotApplicable) as e:
            raise_for_rate_error(e)
        return BulkUpdateOut(updated_count=n)

    @router.post("/shipping-rates/{rate_id}/duplicate", response_model=DuplicateOut)
    def duplicate_shipping_rate(
        rate_id: int = Path(..., ge=1),
        payload: DuplicateIn = ...,
        db: Session = Depends(get_db),
    ):
        try:
            outcome = BulkMutationCoordinator(db).duplicate(rate_id, payload.zone_ids)
        except RateNotFound as e:
            raise_for_rate_error(e)
        return DuplicateOut(
            source_rate_id=outcome.source_rate_id,
            duplicated_count=outcome.duplicated_count,
            duplicated_rate_ids=outcome.duplicated_rate_ids,
            skipped=outcome.skipped,
        )
