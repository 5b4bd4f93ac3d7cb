from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import logging

from privatediary.services.exceptions import (
    InvalidCredentials,
    AccountLocked,
    LocationRequired,
    AccessBlocked,
    StoreUnavailable
)

logger = logging.getLogger(__name__)


def _error_body(request: Request, status_code: int, message: str, **extra):
    content = {
        "success": False,
        "message": message,
        "status_code": status_code,
        "path": str(request.url.path)
    }
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with structured error response"""
    logger.warning(f"HTTP {exc.status_code}: {exc.detail} - {request.url.path}")
    response = _error_body(request, exc.status_code, exc.detail)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with detailed error information"""
    logger.warning(f"Validation error: {exc.errors()} - {request.url.path}")
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "message": "Validation error",
            "status_code": 422,
            "errors": jsonable_errors(exc),
            "path": str(request.url.path)
        }
    )


def jsonable_errors(exc: RequestValidationError):
    # ctx may carry exception instances that are not JSON serializable
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


async def invalid_credentials_handler(request: Request, exc: InvalidCredentials):
    return _error_body(request, status.HTTP_401_UNAUTHORIZED, str(exc))


async def account_locked_handler(request: Request, exc: AccountLocked):
    return _error_body(
        request, status.HTTP_403_FORBIDDEN, str(exc),
        locked_until=exc.until.isoformat()
    )


async def location_required_handler(request: Request, exc: LocationRequired):
    return _error_body(
        request, status.HTTP_403_FORBIDDEN, str(exc),
        locked_until=exc.until.isoformat()
    )


async def access_blocked_handler(request: Request, exc: AccessBlocked):
    return _error_body(request, status.HTTP_403_FORBIDDEN, "Access blocked")


async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.error(f"Store unavailable: {exc} - {request.url.path}")
    return _error_body(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions"""
    logger.error(f"Unexpected error: {str(exc)} - {request.url.path}", exc_info=True)
    return _error_body(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


EXCEPTION_HANDLERS = {
    HTTPException: http_exception_handler,
    RequestValidationError: validation_exception_handler,
    InvalidCredentials: invalid_credentials_handler,
    AccountLocked: account_locked_handler,
    LocationRequired: location_required_handler,
    AccessBlocked: access_blocked_handler,
    StoreUnavailable: store_unavailable_handler,
    Exception: general_exception_handler,
}
