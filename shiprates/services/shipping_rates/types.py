# shiprates/services/shipping_rates/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .ranges import RateRange


@dataclass
class RateDraft:
    """一条待写入的费率（金额已是最小货币单位，weight 已是克）。"""

    shipping_method_id: int
    shipping_zone_id: int
    rate: int
    min_weight: int = 0
    max_weight: Optional[int] = None
    min_total: int = 0
    max_total: Optional[int] = None
    free_threshold: Optional[int] = None
    is_active: bool = True

    @property
    def range(self) -> RateRange:
        return RateRange.of(self.min_weight, self.max_weight, self.min_total, self.max_total)


@dataclass(frozen=True)
class Rejection:
    index: int
    code: str  # validation_error / conflict
    reason: str
    conflicting_ids: List[int] = field(default_factory=list)


@dataclass
class BulkCreateOutcome:
    created_ids: List[int] = field(default_factory=list)
    rejected: List[Rejection] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.rejected

    @property
    def created_count(self) -> int:
        return len(self.created_ids)


@dataclass
class DuplicateOutcome:
    source_rate_id: int
    duplicated_rate_ids: List[int] = field(default_factory=list)
    skipped: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def duplicated_count(self) -> int:
        return len(self.duplicated_rate_ids)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
