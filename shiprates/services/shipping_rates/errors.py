# shiprates/services/shipping_rates/errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional


class RateNotFound(Exception):
    pass


@dataclass
class RateValidationError(Exception):
    message: str
    details: List[dict[str, Any]] = field(default_factory=list)

    def __str__(self) -> str:
        return self.message


@dataclass
class RateConflict(Exception):
    """
    区间冲突：与 active 费率或同批次候选重叠。
    - conflicting_ids：目录中与之重叠的 rate id
    - index：批次内的候选下标（单条写入时为 None）
    """

    message: str
    conflicting_ids: List[int] = field(default_factory=list)
    index: Optional[int] = None

    def __str__(self) -> str:
        return self.message


class NotApplicable(Exception):
    pass
