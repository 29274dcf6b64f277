"""Error taxonomy and centralized FastAPI error handlers."""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

log = logging.getLogger("errors")


class BinCollectorError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


# ── Fetch-attempt errors (transient, retried by the scheduler) ────────────────

class FetchError(BinCollectorError):
    """One fetch attempt failed. Never reaches readers."""

    def __init__(self, message: str):
        super().__init__(message, status_code=502)


class FetchTimeout(FetchError):
    def __init__(self, timeout_s: float):
        super().__init__(f"upstream did not answer within {timeout_s:g}s")
        self.timeout_s = timeout_s


class UpstreamUnreachable(FetchError):
    pass


class UpstreamError(FetchError):
    def __init__(self, status: int):
        super().__init__(f"received non-OK HTTP status: {status}")
        self.status = status


class ParseError(FetchError):
    pass


class EmptyResult(FetchError):
    def __init__(self):
        super().__init__("no data received in the response")


# ── Handler errors (per request) ──────────────────────────────────────────────

class RenderError(BinCollectorError):
    def __init__(self, message: str = "Failed to render template", cause: Optional[Exception] = None):
        super().__init__(message, status_code=500)
        self.cause = cause


class EncodeError(BinCollectorError):
    def __init__(self, message: str = "Failed to encode data to JSON", cause: Optional[Exception] = None):
        super().__init__(message, status_code=500)
        self.cause = cause


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(BinCollectorError)
    async def handle_bin_collector_error(request: Request, exc: BinCollectorError):
        cause = getattr(exc, "cause", None)
        log.error(f"{request.url.path}: {exc}" + (f" ({cause})" if cause else ""))
        return PlainTextResponse(str(exc), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        log.exception("Unhandled error: %s", exc)
        return PlainTextResponse("Internal server error", status_code=500)
