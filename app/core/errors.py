import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

class UpstreamServiceError(Exception):
    """
    An outbound call to a third-party service (Stripe, identity provider) failed.
    Rendered as 502 with the message in the error body.
    """

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

def error_response(message: str, status_code: int = 400, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)

async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return error_response(str(exc.detail), exc.status_code, getattr(exc, "headers", None))

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return error_response(f"{field}: {message}" if field else message, 400)

async def upstream_exception_handler(request: Request, exc: UpstreamServiceError) -> JSONResponse:
    logger.error(f"Upstream failure on {request.method} {request.url.path}: {exc.message}")
    return error_response(exc.message, exc.status_code)

async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response("Internal server error", 500)

def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(UpstreamServiceError, upstream_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
