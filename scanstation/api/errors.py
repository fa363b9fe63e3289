"""
Error envelope for the proxy API.

Routes raise ProxyError with the exact JSON body the frontend expects;
the handlers below render it and translate the remaining failure modes
(bad request bodies, upstream network errors, unexpected exceptions).
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from scanstation.clients.http import UpstreamRequestError, UpstreamStatusError

logger = logging.getLogger(__name__)


class ProxyError(Exception):
    """An error response with a fixed status code and JSON body."""

    def __init__(self, status_code: int, body: dict[str, Any]):
        super().__init__(body.get("message") or body.get("error"))
        self.status_code = status_code
        self.body = body


def bad_request(message: str, detail: Any = None) -> ProxyError:
    body: dict[str, Any] = {"error": "BAD_REQUEST", "message": message}
    if detail is not None:
        body["detail"] = detail
    return ProxyError(status.HTTP_400_BAD_REQUEST, body)


def config_error(message: str, error: str = "CONFIG_ERROR", status_code: int = 500) -> ProxyError:
    return ProxyError(status_code, {"error": error, "message": message})


def upstream_status_error(
    error: str, exc: UpstreamStatusError, body: Any
) -> ProxyError:
    """Forward a non-2xx vendor response with its status and body."""
    return ProxyError(
        exc.status_code,
        {
            "error": error,
            "status": exc.status_code,
            "statusText": exc.reason,
            "body": body,
        },
    )


async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.body))


async def upstream_request_error_handler(
    request: Request, exc: UpstreamRequestError
) -> JSONResponse:
    logger.error(
        f"Upstream request failed: {exc.message}",
        extra={"json_fields": {"path": request.url.path, "upstream_url": exc.url}},
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"error": "UPSTREAM_ERROR", "message": exc.message},
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "BAD_REQUEST",
            "message": "Invalid request",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


def server_error_response() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "SERVER_ERROR", "message": "Internal server error"},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled exception: {exc}", exc_info=exc)
    return server_error_response()


def register_error_handlers(app: FastAPI):
    """Attach the envelope handlers to an application."""
    app.add_exception_handler(ProxyError, proxy_error_handler)
    app.add_exception_handler(UpstreamRequestError, upstream_request_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
