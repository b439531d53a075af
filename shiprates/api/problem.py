# shiprates/api/problem.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, NoReturn, Optional, Sequence, TypedDict

from fastapi import HTTPException

from shiprates.services.shipping_rates.types import Rejection


class ProblemDetail(TypedDict, total=False):
    type: str  # validation|conflict|state
    path: str  # e.g. rates[2] / max_weight
    reason: str
    index: int
    zone_id: int
    conflicting_ids: List[int]


@dataclass(frozen=True)
class Problem:
    """
    统一错误体（顶层 JSON）：
      error_code / message / http_status 必有；
      context / details / trace_id 为空时省略。
    """

    error_code: str
    message: str
    http_status: int
    context: Dict[str, Any] = field(default_factory=dict)
    details: List[ProblemDetail] = field(default_factory=list)
    trace_id: Optional[str] = None

    def with_request(self, *, path: str, method: str, trace_id: str) -> "Problem":
        # 请求上下文在前，业务 context 覆盖同名键
        ctx = {"path": path, "method": method}
        ctx.update(self.context)
        return replace(self, context=ctx, trace_id=self.trace_id or trace_id)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "error_code": self.error_code,
            "message": self.message,
            "http_status": int(self.http_status),
        }
        optional = {"context": self.context, "details": list(self.details), "trace_id": self.trace_id}
        out.update({k: v for k, v in optional.items() if v})
        return out

    @classmethod
    def from_dict(cls, d: Dict[str, Any], *, status_code: int) -> "Problem":
        return cls(
            error_code=str(d["error_code"]),
            message=str(d["message"]),
            http_status=int(d.get("http_status") or status_code),
            context=dict(d.get("context") or {}),
            details=list(d.get("details") or []),
            trace_id=d.get("trace_id"),
        )


def make_problem(
    *,
    status_code: int,
    error_code: str,
    message: str,
    context: Optional[Dict[str, Any]] = None,
    details: Optional[Sequence[ProblemDetail]] = None,
    trace_id: Optional[str] = None,
) -> Dict[str, Any]:
    return Problem(
        error_code=str(error_code),
        message=str(message),
        http_status=int(status_code),
        context=dict(context or {}),
        details=list(details or []),
        trace_id=trace_id,
    ).to_dict()


def raise_problem(
    *,
    status_code: int,
    error_code: str,
    message: str,
    context: Optional[Dict[str, Any]] = None,
    details: Optional[Sequence[ProblemDetail]] = None,
) -> NoReturn:
    raise HTTPException(
        status_code=int(status_code),
        detail=make_problem(
            status_code=status_code,
            error_code=error_code,
            message=message,
            context=context,
            details=details,
        ),
    )


def rejection_detail(r: Rejection, *, collection: str = "rates") -> ProblemDetail:
    """bulk 行级拒绝 → detail（path 指回请求体下标）。"""
    d: ProblemDetail = {
        "type": "conflict" if r.code == "conflict" else "validation",
        "path": f"{collection}[{r.index}]",
        "index": int(r.index),
        "reason": r.reason,
    }
    if r.conflicting_ids:
        d["conflicting_ids"] = list(r.conflicting_ids)
    return d
