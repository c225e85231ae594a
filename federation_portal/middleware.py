import time
import logging
from typing import Iterable, Optional
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from .config import settings
from .exceptions import create_error_response

logger = logging.getLogger(__name__)

GLOBAL_FEDERATION = "global"


def extract_subdomain(hostname: str) -> Optional[str]:
    host = hostname.split(":")[0]
    if host in ("localhost", "127.0.0.1"):
        return None
    parts = host.split(".")
    if len(parts) >= 3 and parts[0] != "www":
        return parts[0]
    return None


def resolve_federation_code(hostname: str, path: str, codes: Iterable[str]) -> Optional[str]:
    """Federation code from the path prefix (/kg/...) or else the sub-domain (kg.example.org)."""
    codes = set(codes)
    first_segment = next((p for p in path.split("/") if p), None)
    if first_segment and first_segment.lower() in codes:
        return first_segment.lower()
    subdomain = extract_subdomain(hostname)
    if subdomain and subdomain.lower() in codes:
        return subdomain.lower()
    return None


def resolve_locale(cookie_locale: Optional[str], accept_language: Optional[str], locales: Iterable[str], default: str) -> str:
    locales = list(locales)
    if cookie_locale and cookie_locale in locales:
        return cookie_locale
    if accept_language:
        preferred = accept_language.split(",")[0].split("-")[0].strip().lower()
        if preferred in locales:
            return preferred
    return default


class FederationContextMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.codes = settings.federation_codes
        self.locales = settings.locales
        self.default_locale = settings.DEFAULT_LOCALE

    async def dispatch(self, request: Request, call_next):
        hostname = request.headers.get("host", "")
        federation_code = resolve_federation_code(hostname, request.url.path, self.codes)
        locale = resolve_locale(
            request.cookies.get("locale"),
            request.headers.get("accept-language"),
            self.locales,
            self.default_locale,
        )
        request.state.federation_code = federation_code
        request.state.locale = locale

        response = await call_next(request)
        response.headers["x-federation-code"] = federation_code or GLOBAL_FEDERATION
        response.headers["x-locale"] = locale
        return response


class SecurityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        # Add security headers
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        # Log request (guard against missing client info)
        client_host = request.client.host if request.client else "unknown"
        logger.info(f"Request: {request.method} {request.url.path} from {client_host}")

        response = await call_next(request)

        duration = time.time() - start_time
        logger.info(f"Response: {response.status_code} in {duration:.3f}s")

        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except Exception as e:
            logger.error(f"Unhandled error: {str(e)}", exc_info=True)

            if settings.DEBUG:
                return JSONResponse(
                    status_code=500,
                    content=create_error_response(f"Internal server error: {str(e)}")
                )
            return JSONResponse(
                status_code=500,
                content=create_error_response("Internal server error")
            )
