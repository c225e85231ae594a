import hmac
import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..ports.pin_repo import PinRepository
from ..results import AuthErrorKind, Err, Ok, Result
from ...utils import utcnow
from .phone_service import mask_phone

logger = logging.getLogger(__name__)

PIN_LENGTH = 6
PIN_TTL_MINUTES = 5
PIN_MAX_ATTEMPTS = 5

INVALID_PIN_MESSAGE = "Invalid PIN. Please check the code and try again."
EXPIRED_PIN_MESSAGE = "PIN has expired. Please request a new one."
TOO_MANY_ATTEMPTS_MESSAGE = "Too many attempts. Please request a new PIN."


@dataclass(frozen=True)
class IssuedPin:
    code: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class VerifiedPin:
    pin_id: int
    user_id: Optional[int]


def generate_pin(length: int = PIN_LENGTH) -> str:
    return f"{secrets.randbelow(10 ** length):0{length}d}"


@dataclass
class PinService:
    pin_repo: PinRepository
    length: int = PIN_LENGTH
    ttl_minutes: int = PIN_TTL_MINUTES
    max_attempts: int = PIN_MAX_ATTEMPTS
    clock: Callable[[], datetime] = field(default=utcnow)

    def issue(self, phone: str, user_id: Optional[int]) -> IssuedPin:
        """Create a fresh PIN for the phone; earlier PINs of the phone stop being valid."""
        now = self.clock()
        code = generate_pin(self.length)
        expires_at = now + timedelta(minutes=self.ttl_minutes)

        purged = self.pin_repo.purge_expired(now)
        if purged:
            logger.debug(f"Purged {purged} expired PINs")
        self.pin_repo.delete_for_phone(phone)
        self.pin_repo.create(phone=phone, user_id=user_id, code=code, expires_at=expires_at, created_at=now)

        logger.info(f"Issued PIN for {mask_phone(phone)}, expires at {expires_at.isoformat()}")
        return IssuedPin(code=code, issued_at=now, expires_at=expires_at)

    def verify(self, phone: str, code: str) -> Result[VerifiedPin]:
        record = self.pin_repo.latest_for_phone(phone)
        if record is None or record.used_at is not None:
            # Reported like a wrong code so callers cannot probe which phones have PINs
            return Err(AuthErrorKind.NOT_FOUND, INVALID_PIN_MESSAGE)

        if self.clock() > record.expires_at:
            self.pin_repo.delete(record.id)
            return Err(AuthErrorKind.EXPIRED, EXPIRED_PIN_MESSAGE)

        # Counted before comparing; the claim fails once the cap is reached
        if not self.pin_repo.claim_attempt(record.id, self.max_attempts):
            self.pin_repo.delete(record.id)
            logger.warning(f"PIN attempts exhausted for {mask_phone(phone)}")
            return Err(AuthErrorKind.TOO_MANY_ATTEMPTS, TOO_MANY_ATTEMPTS_MESSAGE)

        if not hmac.compare_digest(record.code.encode(), (code or "").strip().encode()):
            return Err(AuthErrorKind.MISMATCH, INVALID_PIN_MESSAGE)

        if not self.pin_repo.consume(record.id, self.clock()):
            return Err(AuthErrorKind.MISMATCH, INVALID_PIN_MESSAGE)

        return Ok(VerifiedPin(pin_id=record.id, user_id=record.user_id))
