from datetime import datetime
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....models import Federation, User, UserType, Sportsman, Trainer, Representative
from .....application.ports.user_repo import UserRepository, UserDto, FederationDto, MemberProfile
from .....application.services.user_service import DuplicatePhoneError
from .....utils import as_utc


def _full_name(last_name: Optional[str], first_name: Optional[str], fallback: str) -> str:
    return f"{last_name or ''} {first_name or ''}".strip() or fallback


class SqlUserRepository(UserRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, user: User) -> UserDto:
        federation = None
        if user.federation_id is not None:
            fed = self.session.get(Federation, user.federation_id)
            if fed:
                federation = FederationDto(id=fed.id, code=fed.code, name=fed.name, domain=fed.domain)
        return UserDto(
            id=user.id,
            name=user.name,
            phone=user.phone,
            type=user.type.value if hasattr(user.type, "value") else str(user.type),
            federation_id=user.federation_id,
            entity_id=user.entity_id,
            email=user.email,
            last_login_at=as_utc(user.last_login_at),
            created_at=as_utc(user.created_at),
            federation=federation,
        )

    def get_by_phone(self, phone: str) -> Optional[UserDto]:
        user = self.session.exec(select(User).where(User.phone == phone)).first()
        return self._to_dto(user) if user else None

    def get_by_id(self, user_id: int) -> Optional[UserDto]:
        user = self.session.get(User, user_id)
        return self._to_dto(user) if user else None

    def create(self, name: str, phone: str, type: str, federation_id: Optional[int] = None, entity_id: Optional[int] = None) -> UserDto:
        user = User(name=name, phone=phone, type=UserType(type), federation_id=federation_id, entity_id=entity_id)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicatePhoneError(phone) from e
        self.session.refresh(user)
        return self._to_dto(user)

    def find_member_profile(self, phone: str) -> Optional[MemberProfile]:
        sportsman = self.session.exec(select(Sportsman).where(Sportsman.phone == phone)).first()
        if sportsman:
            return MemberProfile(
                type="SPORTSMAN",
                entity_id=sportsman.id,
                name=_full_name(sportsman.last_name, sportsman.first_name, "User"),
                federation_id=sportsman.federation_id,
            )
        trainer = self.session.exec(select(Trainer).where(Trainer.phone == phone)).first()
        if trainer:
            return MemberProfile(
                type="TRAINER",
                entity_id=trainer.id,
                name=_full_name(trainer.last_name, trainer.first_name, "Trainer"),
                federation_id=trainer.federation_id,
            )
        representative = self.session.exec(select(Representative).where(Representative.phone == phone)).first()
        if representative:
            return MemberProfile(
                type="REPRESENTATIVE",
                entity_id=representative.id,
                name=_full_name(representative.last_name, representative.first_name, "Representative"),
                federation_id=None,
            )
        return None

    def mark_logged_in(self, user_id: int, at: datetime) -> None:
        user = self.session.get(User, user_id)
        if not user:
            return
        user.last_login_at = at
        user.updated_at = at
        self.session.add(user)
        self.session.commit()
