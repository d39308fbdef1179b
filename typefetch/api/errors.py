"""Unified error handling — every failure becomes a ``status: error`` body."""

from __future__ import annotations

import traceback

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from typefetch.api.schemas.typings import ErrorResponse
from typefetch.exceptions import InputError, InstallError, TypefetchError

log = structlog.get_logger("typefetch.api")

_STATUS_MAP: dict[type[TypefetchError], int] = {
    InputError: 422,
    InstallError: 422,
}


def error_body(exc: BaseException, message: str | None = None) -> dict:
    stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return ErrorResponse(error=message or str(exc), stack=stack).model_dump()


async def _typefetch_error_handler(_request: Request, exc: TypefetchError) -> JSONResponse:
    status = 500
    for cls in type(exc).__mro__:
        if cls in _STATUS_MAP:
            status = _STATUS_MAP[cls]
            break
    log.warning("typings.request_failed", error=str(exc), error_type=type(exc).__name__)
    return JSONResponse(status_code=status, content=error_body(exc))


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = []
    for err in exc.errors():
        loc = " → ".join(str(part) for part in err["loc"])
        messages.append(f"{loc}: {err['msg']}")
    return JSONResponse(status_code=422, content=error_body(exc, "; ".join(messages)))


async def _unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    log.error("typings.unhandled_error", exc_info=exc)
    return JSONResponse(status_code=500, content=error_body(exc))


def register_error_handlers(app: FastAPI) -> None:
    """Register exception handlers on the app."""
    app.add_exception_handler(TypefetchError, _typefetch_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)
