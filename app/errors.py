from contextlib import contextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session


GENERIC_ERROR_MESSAGE = "Une erreur interne est survenue. Veuillez réessayer plus tard."


# =========================
# Error variants
# =========================
class ServiceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error = error


class InvalidArgument(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(ServiceError):
    # Duplicate business keys are reported as bad input
    status_code = status.HTTP_400_BAD_REQUEST


class Internal(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = GENERIC_ERROR_MESSAGE, error: Optional[str] = None):
        super().__init__(message, error)


# =========================
# Mapping to HTTP
# =========================
def error_response(exc: ServiceError, envelope: bool = False) -> JSONResponse:
    """
    Map a service error to its JSON response.

    ``envelope=True`` produces ``{"success": false, "message": ...}`` for the
    endpoints that wrap their payloads; otherwise the body is the bare
    ``{"message": ...}`` (plus ``error`` when the failure carries one).
    """
    if envelope:
        body = {"success": False, "message": exc.message}
    else:
        body = {"message": exc.message}
        if exc.error is not None:
            body["error"] = exc.error
    return JSONResponse(status_code=exc.status_code, content=body)


@contextmanager
def storage_errors(db: Session, action: str, message: str = GENERIC_ERROR_MESSAGE):
    """Turn database failures raised inside the block into ``Internal``."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Storage failure while {action}")
        raise Internal(message, error=type(e).__name__) from e


# =========================
# Handlers
# =========================
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"Paramètre invalide : {location}" if location else "Requête invalide."
    logger.warning(f"Rejected request {request.method} {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": message},
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": GENERIC_ERROR_MESSAGE},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
