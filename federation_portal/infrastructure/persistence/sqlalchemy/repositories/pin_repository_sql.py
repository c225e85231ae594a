from datetime import datetime
from typing import Optional
from sqlalchemy import delete, update
from sqlmodel import Session, select

from .....models import LoginPin
from .....application.ports.pin_repo import PinRepository, PinRecord
from .....utils import as_utc


class SqlPinRepository(PinRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_record(self, pin: LoginPin) -> PinRecord:
        return PinRecord(
            id=pin.id,
            phone=pin.phone,
            user_id=pin.user_id,
            code=pin.code,
            attempt_count=pin.attempt_count,
            expires_at=as_utc(pin.expires_at),
            used_at=as_utc(pin.used_at),
            created_at=as_utc(pin.created_at),
        )

    def create(self, phone: str, user_id: Optional[int], code: str, expires_at: datetime, created_at: datetime) -> PinRecord:
        pin = LoginPin(phone=phone, user_id=user_id, code=code, expires_at=expires_at, created_at=created_at)
        self.session.add(pin)
        self.session.commit()
        self.session.refresh(pin)
        return self._to_record(pin)

    def delete_for_phone(self, phone: str) -> int:
        result = self.session.exec(delete(LoginPin).where(LoginPin.phone == phone))
        self.session.commit()
        return result.rowcount or 0

    def latest_for_phone(self, phone: str) -> Optional[PinRecord]:
        pin = self.session.exec(
            select(LoginPin)
            .where(LoginPin.phone == phone)
            .order_by(LoginPin.created_at.desc(), LoginPin.id.desc())
        ).first()
        return self._to_record(pin) if pin else None

    def claim_attempt(self, pin_id: int, max_attempts: int) -> bool:
        result = self.session.exec(
            update(LoginPin)
            .where(LoginPin.id == pin_id, LoginPin.attempt_count < max_attempts)
            .values(attempt_count=LoginPin.attempt_count + 1)
        )
        self.session.commit()
        return result.rowcount == 1

    def consume(self, pin_id: int, at: datetime) -> bool:
        # Single conditional UPDATE so two concurrent verifications cannot both succeed
        result = self.session.exec(
            update(LoginPin)
            .where(LoginPin.id == pin_id, LoginPin.used_at.is_(None))
            .values(used_at=at)
        )
        self.session.commit()
        return result.rowcount == 1

    def delete(self, pin_id: int) -> None:
        self.session.exec(delete(LoginPin).where(LoginPin.id == pin_id))
        self.session.commit()

    def purge_expired(self, before: datetime) -> int:
        result = self.session.exec(delete(LoginPin).where(LoginPin.expires_at < before))
        self.session.commit()
        return result.rowcount or 0
