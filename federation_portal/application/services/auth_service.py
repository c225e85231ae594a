import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from ..ports.rate_limiter import RateLimiter
from ..ports.user_repo import UserRepository, UserDto
from ..results import AuthErrorKind, Err, Ok, Result
from ...utils import utcnow
from .delivery_service import DeliveryDispatcher, METHOD_AUTO, METHOD_TELEGRAM, DELIVERY_FAILED
from .phone_service import DEFAULT_PREFIXES, InvalidPhoneError, hash_phone, mask_phone, normalize_phone
from .pin_service import PinService, INVALID_PIN_MESSAGE
from .session_service import IssuedSession, SessionIssuer
from .user_service import UserResolver

logger = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = "Too many PIN requests. Please try again later."


@dataclass(frozen=True)
class PinDispatch:
    phone: str
    method: str
    message: str
    expires_at: datetime


@dataclass(frozen=True)
class LoginResult:
    user: UserDto
    is_new: bool
    session: IssuedSession


@dataclass
class AuthService:
    user_repo: UserRepository
    users: UserResolver
    pins: PinService
    dispatcher: DeliveryDispatcher
    sessions: SessionIssuer
    rate_limiter: Optional[RateLimiter] = None
    phone_prefixes: Sequence[str] = field(default=DEFAULT_PREFIXES)
    send_limit: int = 5
    send_window_seconds: int = 3600

    async def send_pin(self, raw_phone: Optional[str], method: str = METHOD_AUTO, locale: Optional[str] = None) -> Result[PinDispatch]:
        try:
            phone = normalize_phone(raw_phone, self.phone_prefixes)
        except InvalidPhoneError as e:
            return Err(AuthErrorKind.INVALID_FORMAT, str(e))

        if self.rate_limiter and not self.rate_limiter.allow(f"send-pin:{hash_phone(phone)}", self.send_limit, self.send_window_seconds):
            logger.warning(f"PIN send rate limit exceeded for {mask_phone(phone)}")
            return Err(AuthErrorKind.RATE_LIMITED, RATE_LIMITED_MESSAGE)

        user, _ = self.users.resolve_or_create(phone)
        issued = self.pins.issue(phone, user.id)

        delivery = await self.dispatcher.deliver(phone, issued.code, locale, method)
        if not delivery.success:
            logger.warning(f"PIN delivery via {delivery.method} failed for {mask_phone(phone)}: {delivery.error}")
            return Err(AuthErrorKind.DELIVERY_FAILED, delivery.error or DELIVERY_FAILED)

        message = "PIN sent to your Telegram" if delivery.method == METHOD_TELEGRAM else "PIN sent via SMS"
        return Ok(PinDispatch(phone=phone, method=delivery.method, message=message, expires_at=issued.expires_at))

    def verify_pin(self, raw_phone: Optional[str], code: Optional[str]) -> Result[LoginResult]:
        try:
            phone = normalize_phone(raw_phone, self.phone_prefixes)
        except InvalidPhoneError:
            return Err(AuthErrorKind.MISMATCH, INVALID_PIN_MESSAGE)

        verified = self.pins.verify(phone, code or "")
        if isinstance(verified, Err):
            logger.info(f"PIN verification failed for {mask_phone(phone)}: {verified.kind.value}")
            return verified

        user, created = self.users.resolve_or_create(phone)
        is_new = created or user.last_login_at is None
        self.user_repo.mark_logged_in(user.id, utcnow())

        # Re-read so the session carries the federation binding
        user = self.user_repo.get_by_id(user.id) or user
        session = self.sessions.issue(user)
        logger.info(f"User {user.id} logged in via PIN")
        return Ok(LoginResult(user=user, is_new=is_new, session=session))
