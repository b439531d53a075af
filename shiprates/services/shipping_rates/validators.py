# shiprates/services/shipping_rates/validators.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .errors import RateValidationError
from .types import RateDraft

Detail = Dict[str, Any]


def _non_negative_int(v: object, path: str, details: List[Detail], *, nullable: bool = False) -> Optional[int]:
    if v is None:
        if nullable:
            return None
        details.append({"type": "validation", "path": path, "reason": f"{path} is required"})
        return None
    if isinstance(v, bool) or not isinstance(v, int):
        details.append({"type": "validation", "path": path, "reason": f"{path} must be an integer"})
        return None
    if v < 0:
        details.append({"type": "validation", "path": path, "reason": f"{path} must be >= 0"})
        return None
    return int(v)


def check_draft(draft: RateDraft) -> List[Detail]:
    """
    返回 draft 的校验错误（空列表 = 合法）：
    - min_* / rate >= 0；free_threshold / max_* 可空但 >= 0
    - max_weight >= min_weight，max_total >= min_total
    """
    details: List[Detail] = []

    min_w = _non_negative_int(draft.min_weight, "min_weight", details)
    max_w = _non_negative_int(draft.max_weight, "max_weight", details, nullable=True)
    min_t = _non_negative_int(draft.min_total, "min_total", details)
    max_t = _non_negative_int(draft.max_total, "max_total", details, nullable=True)
    _non_negative_int(draft.rate, "rate", details)
    _non_negative_int(draft.free_threshold, "free_threshold", details, nullable=True)

    if min_w is not None and max_w is not None and max_w < min_w:
        details.append(
            {"type": "validation", "path": "max_weight", "reason": "max_weight must be >= min_weight"}
        )
    if min_t is not None and max_t is not None and max_t < min_t:
        details.append(
            {"type": "validation", "path": "max_total", "reason": "max_total must be >= min_total"}
        )
    return details


def ensure_valid_draft(draft: RateDraft) -> None:
    details = check_draft(draft)
    if details:
        raise RateValidationError(details[0]["reason"], details=details)


def ensure_query_point(weight: object, total: object) -> None:
    details: List[Detail] = []
    _non_negative_int(weight, "weight", details)
    _non_negative_int(total, "total", details)
    if details:
        raise RateValidationError(details[0]["reason"], details=details)
