"""
Custom exception classes and error handlers
Provides consistent error responses across the application
"""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class RewardBinException(HTTPException):
    """Base exception class for RewardBin application"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.details = details


class BadRequestException(RewardBinException):
    """400 Bad Request"""

    def __init__(self, detail: str, error_code: str = "BAD_REQUEST", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code,
            details=details,
        )


class UnauthorizedException(RewardBinException):
    """401 Unauthorized"""

    def __init__(self, detail: str = "Unauthorized", error_code: str = "UNAUTHORIZED"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code=error_code,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenException(RewardBinException):
    """403 Forbidden"""

    def __init__(self, detail: str = "Forbidden", error_code: str = "FORBIDDEN"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code=error_code,
        )


class NotFoundException(RewardBinException):
    """404 Not Found"""

    def __init__(self, detail: str = "Not found", error_code: str = "NOT_FOUND"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=error_code,
        )


class ConflictException(RewardBinException):
    """409 Conflict"""

    def __init__(self, detail: str, error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code,
        )


class ValidationException(RewardBinException):
    """422 Unprocessable Entity"""

    def __init__(
        self,
        detail: str = "Validation Error",
        details: Optional[Dict[str, List[str]]] = None,
        error_code: str = "VALIDATION_ERROR",
    ):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code=error_code,
            details=details,
        )


# Business logic exceptions
class InvalidStateException(BadRequestException):
    """Business rule violation on an existing entity"""

    def __init__(self, detail: str, error_code: str = "INVALID_STATE"):
        super().__init__(detail=detail, error_code=error_code)


class InsufficientPointsException(BadRequestException):
    """Point balance too low for the requested debit"""

    def __init__(self, required: int, available: int):
        shortfall = max(required - available, 0)
        if available <= 0:
            detail = "You have no points to redeem"
        else:
            detail = f"You need {shortfall} points to redeem this coupon"
        super().__init__(
            detail=detail,
            error_code="INSUFFICIENT_POINTS",
            details={"required": required, "available": available, "shortfall": shortfall},
        )
        self.required = required
        self.available = available
        self.shortfall = shortfall


class DuplicateResourceException(ConflictException):
    """Resource already exists"""

    def __init__(self, resource: str, field: str, value: str):
        super().__init__(
            detail=f"{resource} with {field} '{value}' already exists",
            error_code="DUPLICATE_RESOURCE"
        )


def _error_body(message: str, details: Optional[Any] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": message}
    if details is not None:
        body["details"] = details
    return body


def validation_details(errors: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    """Group pydantic errors by field, like a flattened form error map"""
    details: Dict[str, List[str]] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = loc[-1] if loc else "_root"
        details.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return details


async def rewardbin_exception_handler(request: Request, exc: RewardBinException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.detail, exc.details),
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body("Validation Error", validation_details(exc.errors())),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal Server Error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on the application"""
    app.add_exception_handler(RewardBinException, rewardbin_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
