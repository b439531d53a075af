# shiprates/http_problem_handlers.py
from __future__ import annotations

import logging
import uuid
from typing import Any, Iterable, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shiprates.api.problem import Problem, ProblemDetail

logger = logging.getLogger("shiprates.http")


def _trace_id() -> str:
    return f"t_{uuid.uuid4().hex[:12]}"


def _respond(req: Request, problem: Problem) -> JSONResponse:
    p = problem.with_request(path=req.url.path, method=req.method, trace_id=_trace_id())
    return JSONResponse(status_code=int(p.http_status), content=p.to_dict())


def _validation_details(errors: Iterable[Any]) -> List[ProblemDetail]:
    out: List[ProblemDetail] = []
    for e in errors:
        if not isinstance(e, dict):
            continue
        # body.rates.0.max_weight → rates.0.max_weight；model 级错误只剩 body
        parts = [str(x) for x in (e.get("loc") or ()) if x != "body"]
        out.append(
            {
                "type": "validation",
                "path": ".".join(parts) or "body",
                "reason": str(e.get("msg") or e.get("type") or "invalid"),
            }
        )
    return out


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_exc(req: Request, exc: StarletteHTTPException):
        d = exc.detail
        if isinstance(d, dict) and "error_code" in d and "message" in d:
            problem = Problem.from_dict(d, status_code=exc.status_code)
        else:
            # 路由 404 / 405 等框架级错误
            msg = str(d) if d is not None else "request rejected"
            problem = Problem(
                error_code="http_error",
                message=msg,
                http_status=int(exc.status_code),
                details=[{"type": "state", "reason": msg}],
            )
        return _respond(req, problem)

    @app.exception_handler(RequestValidationError)
    async def _validation_exc(req: Request, exc: RequestValidationError):
        problem = Problem(
            error_code="request_validation_error",
            message="invalid request parameters",
            http_status=422,
            details=_validation_details(exc.errors()),
        )
        return _respond(req, problem)

    @app.exception_handler(Exception)
    async def _unhandled_exc(req: Request, exc: Exception):
        tid = _trace_id()
        logger.exception("UNHANDLED_EXC[%s] %s %s: %s", tid, req.method, req.url.path, exc)
        problem = Problem(
            error_code="internal_error",
            message="internal error, please retry later",
            http_status=500,
            trace_id=tid,
        )
        return _respond(req, problem)
