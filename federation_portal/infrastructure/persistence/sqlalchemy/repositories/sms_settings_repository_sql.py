from typing import Optional
from sqlmodel import Session, select

from .....models import Federation, Setting
from .....application.ports.sms_settings_repo import SmsSettings, SmsSettingsRepository, SmsSettingsUpdate
from .....utils import utcnow

SMS_KEYS = ("sms_provider", "sms_api_key", "sms_api_url", "sms_sender", "sms_enabled")


class SqlSmsSettingsRepository(SmsSettingsRepository):
    def __init__(self, session: Session):
        self.session = session

    def get(self, federation_id: int) -> SmsSettings:
        rows = self.session.exec(
            select(Setting).where(Setting.federation_id == federation_id, Setting.key.in_(SMS_KEYS))
        ).all()
        values = {row.key: row.value for row in rows}
        return SmsSettings(
            provider=values.get("sms_provider") or None,
            api_key=values.get("sms_api_key") or None,
            api_url=values.get("sms_api_url") or None,
            sender=values.get("sms_sender") or None,
            enabled=values.get("sms_enabled") == "true",
        )

    def save(self, federation_id: int, update: SmsSettingsUpdate) -> None:
        updates = {}
        if update.provider is not None:
            updates["sms_provider"] = update.provider
        if update.api_key is not None:
            updates["sms_api_key"] = update.api_key
        if update.api_url is not None:
            updates["sms_api_url"] = update.api_url
        if update.sender is not None:
            updates["sms_sender"] = update.sender
        if update.enabled is not None:
            updates["sms_enabled"] = "true" if update.enabled else "false"

        now = utcnow()
        for key, value in updates.items():
            row = self.session.exec(
                select(Setting).where(Setting.federation_id == federation_id, Setting.key == key)
            ).first()
            if row is None:
                row = Setting(federation_id=federation_id, key=key, value=value, group="sms", updated_at=now)
            else:
                row.value = value
                row.updated_at = now
            self.session.add(row)
        self.session.commit()

    def federation_exists(self, federation_id: int) -> bool:
        return self.session.get(Federation, federation_id) is not None

    def federation_id_for_code(self, code: str) -> Optional[int]:
        fed = self.session.exec(
            select(Federation).where(Federation.code == code.lower(), Federation.status == "ACTIVE")
        ).first()
        return fed.id if fed else None
