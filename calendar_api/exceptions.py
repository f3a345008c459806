"""
Application error taxonomy and the HTTP boundary that renders it.

Data-access functions raise the errors below. The handlers registered by
:func:`register_exception_handlers` turn every failure into the uniform
``{"success": false, "message": ...}`` body.
"""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger()

# Error type used by schema validators whose message is shown verbatim.
FIELD_ERROR = "invalid_field"


class AppError(Exception):
    """Base exception for all application errors."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InputValidationError(AppError):
    """Raised when input is malformed or incomplete."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(AppError):
    """Raised when a username or email is already registered."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "Username or email already exists"):
        super().__init__(message)


class AuthError(AppError):
    """Raised for bad credentials. The message never says which part was wrong."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class NotFoundOrForbiddenError(AppError):
    """Raised when a record is missing or owned by someone else."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(
        self, message: str = "Event not found or you do not have permission"
    ):
        super().__init__(message)


class TransientError(AppError):
    """Raised when the storage layer fails."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = "Storage temporarily unavailable"):
        super().__init__(message)


def failure(message: str, status_code: int) -> JSONResponse:
    """Build the uniform failure response."""
    return JSONResponse(
        status_code=status_code, content={"success": False, "message": message}
    )


def first_error_message(exc: RequestValidationError) -> str:
    """
    Return a readable message for the first validation error.

    Messages raised by our own validators are used as is; generic pydantic
    messages are prefixed with the offending field name.
    """
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    error = errors[0]
    if error.get("type") == FIELD_ERROR:
        return error["msg"]
    field = ".".join(str(part) for part in error.get("loc", ())[1:])
    if not field:
        if error.get("type") == "missing":
            return "Request body is required"
        return error["msg"]
    return f"{field}: {error['msg']}"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.info(
        "request_failed",
        path=request.url.path,
        error=type(exc).__name__,
        message=exc.message,
    )
    return failure(exc.message, exc.status_code)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    message = first_error_message(exc)
    logger.info("request_invalid", path=request.url.path, message=message)
    return failure(message, InputValidationError.status_code)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request_crashed", path=request.url.path)
    return failure("Server error", status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the failure handlers to the application."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
