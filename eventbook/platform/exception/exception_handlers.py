from typing import Any, Callable, Coroutine

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.responses import Response

from eventbook.platform.exception.exceptions import CustomBaseError
from eventbook.platform.logging.loguru_io import Logger


ExceptionHandler = Callable[[Request, Exception], Coroutine[Any, Any, Response]]


def _error_body(status_code: int, detail: Any, code: str) -> JSONResponse:
    """Every error response is `{"detail": ..., "code": ...}`."""
    return JSONResponse(status_code=status_code, content={'detail': detail, 'code': code})


async def handle_ledger_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, CustomBaseError)
    return _error_body(exc.status_code, exc.message, exc.code)


async def handle_request_validation(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    return _error_body(status.HTTP_400_BAD_REQUEST, exc.errors(), 'validation_error')


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    Logger.base.opt(exception=exc).error(f'Unhandled {type(exc).__name__} on {request.url.path}')
    return _error_body(
        status.HTTP_500_INTERNAL_SERVER_ERROR, 'Internal server error', 'internal_error'
    )


EXCEPTION_HANDLERS: dict[type[Exception], ExceptionHandler] = {
    CustomBaseError: handle_ledger_error,
    RequestValidationError: handle_request_validation,
    Exception: handle_unexpected,
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
