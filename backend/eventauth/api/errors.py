"""Map authentication errors to stable HTTP responses."""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from eventauth.errors import AuthError, AuthErrorCode

logger = logging.getLogger(__name__)


def auth_error_response(exc: AuthError) -> JSONResponse:
    """JSON envelope for an auth error."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach handlers so every error kind maps to its own code and status."""

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError) -> JSONResponse:
        logger.warning(
            "Auth error %s on %s %s",
            exc.code,
            request.method,
            request.url.path,
        )
        return auth_error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "error_code": str(AuthErrorCode.VALIDATION_ERROR),
                "message": "Request validation failed",
                "errors": [error.get("msg", "") for error in exc.errors()],
            },
        )
