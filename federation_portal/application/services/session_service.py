import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

import jwt

from ..ports.user_repo import UserDto
from ...utils import utcnow

logger = logging.getLogger(__name__)

SESSION_TTL_DAYS = 7

MEMBER_TYPES = ("SPORTSMAN", "TRAINER", "JUDGE", "REPRESENTATIVE")


@dataclass(frozen=True)
class SessionClaims:
    user_id: int
    name: str
    phone: Optional[str]
    type: str
    federation_id: Optional[int]
    federation_code: Optional[str] = None


@dataclass(frozen=True)
class IssuedSession:
    token: str
    expires_at: datetime
    redirect_url: str
    max_age: int


def redirect_url_for(user_type: str, federation_id: Optional[int]) -> str:
    """Landing page after login: federation admins, superadmins and members each have their own area."""
    if user_type == "ADMIN":
        return "/admin" if federation_id else "/superadmin"
    if user_type in MEMBER_TYPES:
        return "/cabinet"
    return "/"


@dataclass
class SessionIssuer:
    secret_key: str
    algorithm: str = "HS256"
    ttl_days: int = SESSION_TTL_DAYS
    clock: Callable[[], datetime] = field(default=utcnow)

    def issue(self, user: UserDto) -> IssuedSession:
        issued_at = self.clock()
        expires_at = issued_at + timedelta(days=self.ttl_days)
        payload: Dict[str, Any] = {
            "userId": user.id,
            "name": user.name,
            "phone": user.phone,
            "type": user.type,
            "federationId": user.federation_id,
            "federationCode": user.federation.code if user.federation else None,
            "iat": issued_at,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return IssuedSession(
            token=token,
            expires_at=expires_at,
            redirect_url=redirect_url_for(user.type, user.federation_id),
            max_age=self.ttl_days * 24 * 60 * 60,
        )

    def decode(self, token: Optional[str]) -> Optional[SessionClaims]:
        if not token:
            return None
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            logger.info("Session token has expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid session token: {e}")
            return None

        user_id = payload.get("userId")
        if user_id is None:
            return None
        return SessionClaims(
            user_id=int(user_id),
            name=payload.get("name") or "",
            phone=payload.get("phone"),
            type=payload.get("type") or "",
            federation_id=payload.get("federationId"),
            federation_code=payload.get("federationCode"),
        )
