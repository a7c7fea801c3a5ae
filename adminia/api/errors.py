from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from adminia.exceptions import (
    AdminiaError,
    ConflictActiveAnalysisError,
    InvalidInputError,
    NotFoundError,
    StorageError,
)
from adminia.logging.logger import Log
from adminia.storage.exceptions import ObjectAlreadyExistsError, UploadSignatureError

# Starlette picks the handler of the closest class in the exception's MRO.
ERROR_STATUS_CODES: dict[type[AdminiaError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
    ConflictActiveAnalysisError: status.HTTP_409_CONFLICT,
    UploadSignatureError: status.HTTP_403_FORBIDDEN,
    ObjectAlreadyExistsError: status.HTTP_409_CONFLICT,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    AdminiaError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain exceptions onto `{"error": message}` responses."""
    for exc_cls, status_code in ERROR_STATUS_CODES.items():
        app.add_exception_handler(exc_cls, _make_handler(status_code))
    app.add_exception_handler(RequestValidationError, _handle_validation_error)


def _make_handler(status_code: int) -> Callable[[Request, Exception], Awaitable[JSONResponse]]:
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        if status_code >= 500:
            Log.error(f"{request.method} {request.url.path} failed: {exc}")
        return error_response(status_code, str(exc) or type(exc).__name__)

    return handler


async def _handle_validation_error(request: Request, exc: Exception) -> JSONResponse:
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    details = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": str(error.get("msg", ""))}
        for error in errors
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request data", "details": details},
    )
