"""Middleware for the local dashboard shell."""

from __future__ import annotations

import time
from typing import Callable

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)

_QUIET_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One ``http.request`` event per request; 5xx responses log as errors.

    Only the path is recorded.  ``/auth/deeplink`` carries the token in its
    query string.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        if request.url.path in _QUIET_PATHS:
            return response

        log = logger.error if response.status_code >= 500 else logger.info
        log(
            "http.request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return response


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turn an escaped exception into a JSON 500."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("http.unhandled_error", path=request.url.path, error_type=type(exc).__name__)
            return JSONResponse(status_code=500, content={"detail": f"{type(exc).__name__}: {exc}"})


def setup_middleware(app: FastAPI) -> None:
    # Last added runs outermost.
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)
