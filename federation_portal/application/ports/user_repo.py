from typing import Protocol, Optional
from dataclasses import dataclass
from datetime import datetime


@dataclass
class FederationDto:
    id: int
    code: str
    name: str
    domain: Optional[str] = None


@dataclass
class UserDto:
    id: int
    name: str
    phone: str
    type: str
    federation_id: Optional[int]
    entity_id: Optional[int]
    email: Optional[str]
    last_login_at: Optional[datetime]
    created_at: datetime
    federation: Optional[FederationDto] = None


@dataclass
class MemberProfile:
    """A sportsman, trainer or representative row matched by phone."""
    type: str
    entity_id: int
    name: str
    federation_id: Optional[int]


class UserRepository(Protocol):
    def get_by_phone(self, phone: str) -> Optional[UserDto]:
        ...

    def get_by_id(self, user_id: int) -> Optional[UserDto]:
        ...

    def create(self, name: str, phone: str, type: str, federation_id: Optional[int] = None, entity_id: Optional[int] = None) -> UserDto:
        ...

    def find_member_profile(self, phone: str) -> Optional[MemberProfile]:
        ...

    def mark_logged_in(self, user_id: int, at: datetime) -> None:
        ...
