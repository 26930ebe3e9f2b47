"""
Error taxonomy for the API and the handlers that render it.

Every failure leaves the service as the JSON envelope
``{"success": false, "error": ..., "message"?: ..., "details"?: [...]}``.
"""

from __future__ import annotations

import logging
import traceback
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from firebase_admin import exceptions as firebase_exceptions
from google.api_core import exceptions as google_exceptions
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        error: str,
        *,
        message: Optional[str] = None,
        details: Optional[list[str]] = None,
    ):
        super().__init__(error)
        self.error = error
        self.message = message
        self.details = details

    def to_response(self) -> dict:
        body: dict = {"success": False, "error": self.error}
        if self.message is not None:
            body["message"] = self.message
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationFailed(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthenticated(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, error: str = "Unauthorized", **kwargs):
        super().__init__(error, **kwargs)


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(ApiError):
    status_code = status.HTTP_409_CONFLICT


class Unexpected(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def missing_fields_error(missing: list[str]) -> ValidationFailed:
    return ValidationFailed(
        "Validation failed",
        details=[f"{field} is required" for field in missing],
    )


def register_error_handlers(app: FastAPI, *, include_stack_traces: bool) -> None:
    """Register all global error handlers on the FastAPI app."""

    def _with_stack(body: dict, exc: BaseException) -> dict:
        if include_stack_traces:
            body["stack"] = "".join(traceback.format_exception(exc))
        return body

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.error)
        else:
            logger.info(
                "%s %s rejected (%s): %s",
                request.method,
                request.url.path,
                exc.status_code,
                exc.error,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=_with_stack(exc.to_response(), exc),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info("Validation error on %s: %s", request.url.path, exc.errors())
        details = [
            f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}"
            for e in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": "Validation failed", "details": details},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            logger.info("404 - Route not found: %s %s", request.method, request.url.path)
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "success": False,
                    "error": "Route not found",
                    "method": request.method,
                    "path": request.url.path,
                },
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(google_exceptions.GoogleAPICallError)
    async def store_error_handler(
        request: Request, exc: google_exceptions.GoogleAPICallError
    ):
        logger.error(
            "Store call failed on %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_with_stack(
                {"success": False, "error": "Store request failed", "message": exc.message},
                exc,
            ),
        )

    @app.exception_handler(firebase_exceptions.FirebaseError)
    async def firebase_error_handler(
        request: Request, exc: firebase_exceptions.FirebaseError
    ):
        logger.error(
            "Firebase call failed on %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_with_stack(
                {"success": False, "error": "Identity provider request failed", "message": str(exc)},
                exc,
            ),
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception on %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_with_stack(
                {"success": False, "error": "Internal server error", "message": str(exc)},
                exc,
            ),
        )
