import logging
from typing import Callable, Optional

from ....application.ports.message_channel import SmsSender
from ....application.ports.sms_settings_repo import SmsSettings
from ....application.services.phone_service import mask_phone
from ....config import Settings
from .nikita_provider import NikitaSmsProvider
from .twilio_provider import TwilioSmsProvider

logger = logging.getLogger(__name__)


def default_sms_settings(settings: Settings) -> SmsSettings:
    """Process-wide SMS gateway taken from the environment."""
    if settings.SMS_PROVIDER == "twilio":
        api_key = f"{settings.TWILIO_ACCOUNT_SID}:{settings.TWILIO_AUTH_TOKEN}"
        sender = settings.TWILIO_PHONE_NUMBER
    else:
        api_key = settings.SMS_API_KEY
        sender = settings.SMS_SENDER_ID
    return SmsSettings(
        provider=settings.SMS_PROVIDER,
        api_key=api_key,
        api_url=settings.SMS_API_URL,
        sender=sender,
        enabled=True,
    )


def build_provider(sms: SmsSettings, timeout: int = 15) -> SmsSender:
    if sms.provider == "twilio":
        # Twilio credentials are stored as "ACCOUNT_SID:AUTH_TOKEN"
        account_sid, _, auth_token = (sms.api_key or "").partition(":")
        return TwilioSmsProvider(account_sid=account_sid, auth_token=auth_token, from_number=sms.sender or "")
    return NikitaSmsProvider(api_key=sms.api_key or "", sender=sms.sender or "GTF", api_url=sms.api_url or "", timeout=timeout)


class TenantSmsGateway(SmsSender):
    """Sends through the gateway of the federation serving the phone, else the default one."""

    def __init__(self, resolve_settings: Callable[[str], Optional[SmsSettings]], defaults: SmsSettings, timeout: int = 15,
                 provider_factory: Callable[[SmsSettings, int], SmsSender] = build_provider):
        self.resolve_settings = resolve_settings
        self.defaults = defaults
        self.timeout = timeout
        self.provider_factory = provider_factory

    async def send(self, phone: str, text: str) -> None:
        sms = self.resolve_settings(phone)
        if sms is None:
            sms = self.defaults
        else:
            logger.debug(f"Using federation SMS gateway '{sms.provider}' for {mask_phone(phone)}")
        provider = self.provider_factory(sms, self.timeout)
        await provider.send(phone, text)
