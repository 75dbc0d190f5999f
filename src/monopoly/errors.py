from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Internal server error"


class NotFoundError(Exception):
    """A lookup or delete matched no row."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # The detail goes to the log only, never to the caller
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return error_response(500, INTERNAL_ERROR)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unexpected error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return error_response(500, INTERNAL_ERROR)


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return error_response(404, exc.message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = [
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    ]
    return error_response(422, "; ".join(problems) or "Invalid request")


def register_error_handlers(app: FastAPI) -> None:
    """Render every handled failure as ``{"error": <message>}``."""
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    # Starlette hands this one to ServerErrorMiddleware, so it still answers in JSON
    app.add_exception_handler(Exception, unexpected_error_handler)
