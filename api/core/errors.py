"""
Error types and the centralized JSON responder.

Every failure that reaches a client is rendered as `{"message": ...}` with
the status code carried by the error. Handlers are registered on the app by
`register_exception_handlers` (see `api/main.py`).
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from . import uploads

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "An unknown error occurred!"
INVALID_INPUTS_MESSAGE = "Invalid inputs passed, please check your data."


class HttpError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message or DEFAULT_ERROR_MESSAGE}


class ValidationError(HttpError):
    status_code = 400


class NotFoundError(HttpError):
    status_code = 404


# Requester is authenticated but does not own the resource.
class UnauthorizedError(HttpError):
    status_code = 401


# Missing/invalid token, or login credentials that do not match.
class AuthenticationError(HttpError):
    status_code = 403


class ConflictError(HttpError):
    status_code = 400


class InternalError(HttpError):
    status_code = 500


class GeocodingError(HttpError):
    status_code = 422


def _discard_upload(request: Request) -> None:
    path = getattr(request.state, "upload_path", None)
    if path:
        uploads.remove_file(path)
        request.state.upload_path = None


def _error_response(request: Request, status_code: int, message: str) -> JSONResponse:
    _discard_upload(request)
    return JSONResponse(status_code=status_code, content={"message": message or DEFAULT_ERROR_MESSAGE})


async def http_error_handler(request: Request, exc: HttpError) -> JSONResponse:
    return _error_response(request, exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Rejected request to %s: %s", request.url.path, exc.errors())
    return _error_response(request, 400, INVALID_INPUTS_MESSAGE)


async def starlette_http_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return _error_response(request, 404, "Could not find this route.")
    return _error_response(request, exc.status_code, str(exc.detail))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(request, 500, DEFAULT_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HttpError, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, starlette_http_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """
    Render unexpected errors as a JSON 500 inside the CORS layer.

    The `Exception` handler above runs in Starlette's outermost middleware,
    so its responses would miss CORS headers. This middleware is added
    before CORSMiddleware, which places it inside.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            return await unhandled_error_handler(request, exc)
