import logging
from typing import Tuple
from dataclasses import dataclass

from ..ports.user_repo import UserRepository, UserDto
from .phone_service import mask_phone

logger = logging.getLogger(__name__)

DEFAULT_USER_TYPE = "REPRESENTATIVE"
DEFAULT_USER_NAME = "New User"


class DuplicatePhoneError(Exception):
    """Raised by a repository when another request created the same phone first."""


@dataclass
class UserResolver:
    user_repo: UserRepository

    def resolve_or_create(self, phone: str) -> Tuple[UserDto, bool]:
        """Find the user owning a canonical phone number, creating one on first contact.

        A new user is linked to the first sportsman, trainer or representative
        profile registered with the same phone. Returns ``(user, created)``.
        """
        user = self.user_repo.get_by_phone(phone)
        if user:
            return user, False

        profile = self.user_repo.find_member_profile(phone)
        try:
            if profile:
                user = self.user_repo.create(
                    name=profile.name,
                    phone=phone,
                    type=profile.type,
                    federation_id=profile.federation_id,
                    entity_id=profile.entity_id,
                )
            else:
                user = self.user_repo.create(name=DEFAULT_USER_NAME, phone=phone, type=DEFAULT_USER_TYPE)
        except DuplicatePhoneError:
            existing = self.user_repo.get_by_phone(phone)
            if existing is None:
                raise
            return existing, False

        logger.info(f"Created {user.type} user {user.id} for {mask_phone(phone)}")
        return user, True
