# Wiring of services for the routers
import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from .config import settings
from .database import engine, get_session
from .application.ports.rate_limiter import RateLimiter
from .application.ports.user_repo import UserRepository
from .application.services.activity_service import ActivityRecorder
from .application.services.auth_service import AuthService
from .application.services.delivery_service import DeliveryDispatcher
from .application.services.pin_service import PinService
from .application.services.session_service import SessionClaims, SessionIssuer
from .application.services.sms_settings_service import SmsSettingsService
from .application.services.user_service import UserResolver
from .infrastructure.messaging.sms.gateway import TenantSmsGateway, default_sms_settings
from .infrastructure.messaging.telegram_bot import TelegramBotSender
from .infrastructure.persistence.sqlalchemy.repositories.activity_repository_sql import SqlActivityRepository
from .infrastructure.persistence.sqlalchemy.repositories.chat_directory_sql import SqlChatDirectory
from .infrastructure.persistence.sqlalchemy.repositories.pin_repository_sql import SqlPinRepository
from .infrastructure.persistence.sqlalchemy.repositories.sms_settings_repository_sql import SqlSmsSettingsRepository
from .infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from .infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter
from .infrastructure.rate_limit.redis_rate_limiter import RedisRateLimiter

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache()
def get_rate_limiter() -> RateLimiter:
    if settings.REDIS_URL:
        logger.info("Using Redis rate limiter")
        return RedisRateLimiter(url=settings.REDIS_URL)
    logger.info("Using memory-based rate limiting")
    return InMemoryRateLimiter()


@lru_cache()
def get_session_issuer() -> SessionIssuer:
    return SessionIssuer(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        ttl_days=settings.SESSION_TTL_DAYS,
    )


def get_user_repository(session: Session = Depends(get_session)) -> UserRepository:
    return SqlUserRepository(session)


def get_sms_settings_service(session: Session = Depends(get_session)) -> SmsSettingsService:
    return SmsSettingsService(repo=SqlSmsSettingsRepository(session))


def get_auth_service(
    session: Session = Depends(get_session),
    limiter: RateLimiter = Depends(get_rate_limiter),
    sessions: SessionIssuer = Depends(get_session_issuer),
) -> AuthService:
    user_repo = SqlUserRepository(session)
    sms_settings = SmsSettingsService(repo=SqlSmsSettingsRepository(session))
    dispatcher = DeliveryDispatcher(
        chat_directory=SqlChatDirectory(session),
        telegram=TelegramBotSender(settings.TELEGRAM_BOT_TOKEN, settings.TELEGRAM_API_URL, timeout=settings.SMS_TIMEOUT_SEC),
        sms=TenantSmsGateway(sms_settings.for_phone, default_sms_settings(settings), timeout=settings.SMS_TIMEOUT_SEC),
        pin_ttl_minutes=settings.PIN_TTL_MINUTES,
    )
    return AuthService(
        user_repo=user_repo,
        users=UserResolver(user_repo),
        pins=PinService(
            SqlPinRepository(session),
            length=settings.PIN_LENGTH,
            ttl_minutes=settings.PIN_TTL_MINUTES,
            max_attempts=settings.PIN_MAX_ATTEMPTS,
        ),
        dispatcher=dispatcher,
        sessions=sessions,
        rate_limiter=limiter,
        phone_prefixes=settings.phone_prefixes,
        send_limit=settings.PIN_SEND_MAX_PER_WINDOW,
        send_window_seconds=settings.PIN_SEND_WINDOW_SEC,
    )


def _new_session() -> Session:
    return Session(engine)


@lru_cache()
def get_activity_recorder() -> ActivityRecorder:
    return ActivityRecorder(SqlActivityRepository(_new_session))


def get_client_ip(request: Request) -> str:
    peer = request.client.host if request.client else "unknown"
    # Only a trusted proxy may speak for the original client
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded and peer in settings.trusted_proxies:
        return forwarded.split(",")[0].strip()
    return peer


def verify_rate_limit(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> None:
    key = f"verify-pin:{get_client_ip(request)}"
    if not limiter.allow(key, settings.PIN_VERIFY_MAX_PER_WINDOW, settings.PIN_VERIFY_WINDOW_SEC):
        logger.warning(f"Verify rate limit exceeded for {key}")
        raise HTTPException(status_code=429, detail="Too many attempts. Please try again later.")


def get_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    # Fallback to cookie
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_optional_user(
    token: Optional[str] = Depends(get_token),
    sessions: SessionIssuer = Depends(get_session_issuer),
) -> Optional[SessionClaims]:
    return sessions.decode(token)


def get_current_user(claims: Optional[SessionClaims] = Depends(get_optional_user)) -> SessionClaims:
    if claims is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return claims


def require_admin(claims: SessionClaims = Depends(get_current_user)) -> SessionClaims:
    if claims.type != "ADMIN":
        raise HTTPException(status_code=403, detail="Admin access required")
    return claims
