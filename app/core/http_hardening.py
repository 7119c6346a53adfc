from __future__ import annotations

import logging
import re
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.services.cosmos_store import QueryExecutionError
from app.services.query_builder import CriterionError

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,128}$")
_LOG = logging.getLogger("app.http")

API_RESPONSE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "no-referrer",
    "Cache-Control": "no-store",
}


def _request_id_from_header(raw: str | None) -> str:
    value = str(raw or "").strip()
    if not value or not _REQUEST_ID_RE.fullmatch(value):
        return uuid4().hex
    return value


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "") or "-"


def install_http_hardening(app: FastAPI) -> None:
    @app.middleware("http")
    async def _request_context_middleware(request: Request, call_next):
        request_id = _request_id_from_header(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        started_at = perf_counter()

        response = await call_next(request)

        for key, value in API_RESPONSE_HEADERS.items():
            response.headers[key] = value
        response.headers[REQUEST_ID_HEADER] = request_id

        _LOG.info(
            "%s %s status=%s duration_ms=%.2f request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            (perf_counter() - started_at) * 1000.0,
            request_id,
        )
        return response

    @app.exception_handler(CriterionError)
    async def _criterion_error_handler(request: Request, exc: CriterionError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(QueryExecutionError)
    async def _query_execution_error_handler(request: Request, exc: QueryExecutionError):
        _LOG.error("store query failed request_id=%s cause=%r", _request_id(request), exc.__cause__)
        return JSONResponse(status_code=502, content={"detail": "Document store query failed"})
