# shiprates/api/routers/shipping_rates_helpers.py
from __future__ import annotations

from typing import NoReturn

from shiprates.api.problem import raise_problem
from shiprates.services.shipping_rates import (
    NotApplicable,
    RateConflict,
    RateNotFound,
    RateValidationError,
)


def raise_for_rate_error(e: Exception) -> NoReturn:
    """
    领域错误 → Problem（HTTPException）：
      - RateNotFound        → 404
      - RateValidationError → 422
      - RateConflict        → 409
      - NotApplicable       → 422
    其它异常原样抛出（交给全局 500 handler）。
    """
    if isinstance(e, RateNotFound):
        raise_problem(status_code=404, error_code="shipping_rate_not_found", message=str(e))

    if isinstance(e, RateValidationError):
        raise_problem(
            status_code=422,
            error_code="shipping_rate_invalid",
            message=str(e),
            details=e.details,
        )

    if isinstance(e, RateConflict):
        detail = {"type": "conflict", "reason": str(e), "conflicting_ids": list(e.conflicting_ids)}
        if e.index is not None:
            detail["index"] = int(e.index)
        raise_problem(
            status_code=409,
            error_code="shipping_rate_range_conflict",
            message=str(e),
            details=[detail],
        )

    if isinstance(e, NotApplicable):
        raise_problem(status_code=422, error_code="shipping_rate_no_changes", message=str(e))

    raise e
