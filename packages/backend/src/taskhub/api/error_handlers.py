"""Error handlers — map the error taxonomy onto HTTP responses.

Invariants:
    - TaskhubError → its status_code with {"message", "code"}
    - 401 responses carry WWW-Authenticate: Bearer
    - RequestValidationError → 400 with field-level details
    - Exception (catch-all) → 500, never leaks internal details
"""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from taskhub.errors import TaskhubError

logger = structlog.get_logger()


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_taskhub_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_taskhub_error_handler(app: FastAPI) -> None:

    @app.exception_handler(TaskhubError)
    async def taskhub_error_handler(request: Request, exc: TaskhubError):
        logger.info(
            "request.rejected",
            path=request.url.path,
            status=exc.status_code,
            code=exc.code,
        )
        headers = None
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_response(),
            headers=headers,
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.info("request.invalid", path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.exception("request.failed", path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "An unexpected error occurred", "code": "internal_error"},
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    return {
        "message": "Invalid request data",
        "code": "validation_error",
        "details": [
            {
                "field": ".".join(str(loc) for loc in e["loc"]),
                "message": e["msg"],
                "type": e["type"],
            }
            for e in exc.errors()
        ],
    }
