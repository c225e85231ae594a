import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..ports.sms_settings_repo import SmsSettings, SmsSettingsRepository, SmsSettingsUpdate
from .phone_service import federation_code_for_phone

logger = logging.getLogger(__name__)

MASK_PREFIX = "••••"

SMS_PROVIDERS: Dict[str, Dict[str, Any]] = {
    "nikita": {
        "name": "SMS Nikita",
        "description": "SMS provider for Kyrgyzstan (+996)",
        "countries": ["996"],
        "apiUrl": "https://smspro.nikita.kg/api/message",
    },
    "twilio": {
        "name": "Twilio",
        "description": "Twilio Programmable Messaging",
        "countries": [],
        "apiUrl": None,
    },
}


def mask_api_key(api_key: Optional[str]) -> Optional[str]:
    if not api_key:
        return None
    return "••••••••" + api_key[-4:]


@dataclass
class SmsSettingsService:
    repo: SmsSettingsRepository

    def get(self, federation_id: int) -> SmsSettings:
        return self.repo.get(federation_id)

    def get_masked(self, federation_id: int) -> Dict[str, Any]:
        s = self.repo.get(federation_id)
        return {
            "provider": s.provider,
            "apiKey": mask_api_key(s.api_key),
            "apiUrl": s.api_url,
            "sender": s.sender,
            "enabled": s.enabled,
            "hasApiKey": bool(s.api_key),
        }

    def save(self, federation_id: int, update: SmsSettingsUpdate) -> None:
        if update.api_key is not None and update.api_key.startswith(MASK_PREFIX):
            # The client echoed back the masked value; keep the stored key
            update.api_key = None
        if update.provider is not None and update.provider and update.provider not in SMS_PROVIDERS:
            raise ValueError(f"Unknown SMS provider: {update.provider}")
        self.repo.save(federation_id, update)
        logger.info(f"SMS settings updated for federation {federation_id}")

    def clear(self, federation_id: int) -> None:
        self.repo.save(federation_id, SmsSettingsUpdate(api_key="", enabled=False))

    def for_phone(self, phone: str) -> Optional[SmsSettings]:
        """Settings of the federation serving the phone's country, if that federation has SMS enabled."""
        code = federation_code_for_phone(phone)
        if not code:
            return None
        federation_id = self.repo.federation_id_for_code(code)
        if federation_id is None:
            return None
        s = self.repo.get(federation_id)
        if not s.enabled or not s.api_key:
            return None
        return s
