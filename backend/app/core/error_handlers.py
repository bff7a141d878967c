# app/core/error_handlers.py
"""
Central translation of exceptions into the response envelope.
Routes only raise; everything that leaves the API as an error passes through here.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import AppError, UpstreamError

logger = logging.getLogger("uvicorn.error")


def error_body(message: str, code: str) -> dict:
    return {"success": False, "message": message, "code": code}


def _describe_validation_errors(exc: RequestValidationError) -> str:
    """Turn pydantic's error list into one readable line, e.g. 'body.promptText: Field required'."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg', 'invalid')}" if loc else err.get("msg", "invalid"))
    return "; ".join(parts) or "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    """
    Register exception handlers on the application.

    Mapping:
        AppError               -> exc.status_code
        RequestValidationError -> 400
        HTTPException          -> exc.status_code (unknown routes, wrong methods)
        Exception              -> 500, generic message, traceback logged only
    """

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if isinstance(exc, UpstreamError):
            logger.error("[upstream] %s %s: %s | %s", request.method, request.url.path, exc.message, exc.context)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.code))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=error_body(_describe_validation_errors(exc), "VALIDATION_ERROR"),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(message, f"HTTP_{exc.status_code}"),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.error("[error] Unhandled %s on %s %s", type(exc).__name__, request.method, request.url.path,
                     exc_info=exc)
        return JSONResponse(status_code=500, content=error_body("Internal server error", "INTERNAL_ERROR"))
