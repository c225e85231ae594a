from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .application.results import AuthErrorKind, Err

ERROR_STATUS_CODES = {
    AuthErrorKind.INVALID_FORMAT: 400,
    AuthErrorKind.NOT_FOUND: 401,
    AuthErrorKind.EXPIRED: 401,
    AuthErrorKind.MISMATCH: 401,
    AuthErrorKind.TOO_MANY_ATTEMPTS: 401,
    AuthErrorKind.UNAUTHORIZED: 401,
    AuthErrorKind.RATE_LIMITED: 429,
    AuthErrorKind.DELIVERY_FAILED: 500,
}


class APIException(HTTPException):
    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)

    @classmethod
    def from_error(cls, error: Err) -> "APIException":
        return cls(status_code=ERROR_STATUS_CODES.get(error.kind, 500), detail=error.message)


def create_error_response(error_message: str) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "error": error_message
    }


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors, reported as 400 with the first problem"""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        message = str(first.get("msg", message)).removeprefix("Value error, ")
    return JSONResponse(status_code=400, content=create_error_response(message))
