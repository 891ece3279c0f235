from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger(__name__)


class AuditError(Exception):
    """Base class for errors surfaced to callers of the audit pipeline."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidURLError(AuditError):
    """The caller supplied a malformed or non-http(s) URL."""

    status_code = status.HTTP_400_BAD_REQUEST


class NavigationError(AuditError):
    """The browser could not load the target page (DNS, TLS, timeout, HTTP error)."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to load {url}: {reason}")
        self.url = url
        self.reason = reason


class BrowserUnavailableError(AuditError):
    """The shared browser could not be launched or could not open a page."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, reason: str):
        super().__init__(f"Browser unavailable: {reason}")
        self.reason = reason


class AuditNotFoundError(AuditError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, audit_id: str):
        super().__init__(f"Audit not found: {audit_id}")
        self.audit_id = audit_id


def add_exception_handlers(app):
    @app.exception_handler(AuditError)
    async def audit_error_handler(request: Request, exc: AuditError):
        logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
        return api_response(message=exc.message, status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return api_response(message=str(exc.detail) or "Error", status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return api_response(
            message="Validation failed",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            data={"errors": exc.errors()},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return api_response(
            message="Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
