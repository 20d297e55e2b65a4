"""
Error taxonomy and the JSON error envelope.

Every failure the API reports carries a stable machine-readable code:

    {"success": false, "error": {"message": "...", "code": "MISSING_DOMAIN"}}

Layers:
  1. ValidationError       — bad request field or enum value (400)
  2. NotFoundError         — referenced record doesn't exist (404)
  3. ExternalServiceError  — LLM / extraction / browser failure (502)
  4. PersistenceError      — background step write failed (logged only)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base for errors that map onto a stable error code."""

    status_code: int = 500

    def __init__(self, message: str, code: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"message": self.message, "code": self.code}


class ValidationError(AppError):
    status_code = 400


class NotFoundError(AppError):
    status_code = 404


class ExternalServiceError(AppError):
    status_code = 502


class PersistenceError(AppError):
    """Never sent to a user; raised by background writers and logged."""


def error_response(message: str, code: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": {"message": message, "code": code}},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Render AppError and malformed bodies into the error envelope."""

    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: [%s] %s", request.method, request.url.path, exc.code, exc.message)
        return error_response(exc.message, exc.code, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"Invalid request: {where} {first.get('msg', '')}".strip()
        return error_response(message, "INVALID_REQUEST", 400)
