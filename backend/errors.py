"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class WeatherProxyError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class InvalidUnitsError(WeatherProxyError):
    def __init__(self, units: str):
        super().__init__("Invalid temperature parameter.", status_code=400)
        self.units = units


class UnknownLocationError(WeatherProxyError):
    def __init__(self, query: str):
        super().__init__(f"No valid city found for query '{query}'", status_code=404)
        self.query = query


class UpstreamError(WeatherProxyError):
    """Failure talking to the weather provider.

    ``str(exc)`` is the client-safe category message. The provider's own
    detail is kept in ``detail`` and only ever logged.
    """

    category = "Weather provider request failed"
    status = 502

    def __init__(self, detail: str = ""):
        super().__init__(self.category, status_code=self.status)
        self.detail = detail


class UpstreamTimeout(UpstreamError):
    category = "Weather provider timed out"
    status = 504


class UpstreamTransportError(UpstreamError):
    category = "Weather provider unreachable"
    status = 502


class UpstreamRateLimited(UpstreamError):
    category = "Weather provider rate limit reached, retry later"
    status = 503


class UpstreamUnexpected(UpstreamError):
    category = "Weather provider returned an unexpected response"
    status = 502


def _failure(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"success": False, "msg": message}, status_code=status_code)


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(UpstreamError)
    async def handle_upstream_error(request: Request, exc: UpstreamError):
        logger.warning(
            "%s on %s: %s", type(exc).__name__, request.url.path, exc.detail or "no detail"
        )
        return _failure(str(exc), exc.status_code)

    @app.exception_handler(WeatherProxyError)
    async def handle_proxy_error(_request: Request, exc: WeatherProxyError):
        return _failure(str(exc), exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_request: Request, exc: RequestValidationError):
        missing = sorted({str(err["loc"][-1]) for err in exc.errors()})
        return _failure(f"Invalid request parameters: {', '.join(missing)}", 422)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return _failure("Internal server error", 500)
