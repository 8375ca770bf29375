"""API errors and exception handlers for linkfolio."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth.session import SessionCarrier

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """An error rendered to the client as {"error": message}."""

    def __init__(self, status_code: int, message: str, clear_session: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        # Set when the session token is known to be dead
        self.clear_session = clear_session


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_exception_handlers(app: FastAPI, carrier: SessionCarrier) -> None:
    """Render every error as {"error": ...}."""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        response = error_response(exc.status_code, exc.message)
        if exc.clear_session:
            carrier.clear(response)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
        return error_response(400, "Invalid request body")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return error_response(500, "Internal server error")
