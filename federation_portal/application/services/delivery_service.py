import logging
from dataclasses import dataclass
from typing import Optional

from ..ports.message_channel import ChatDirectory, DeliveryError, SmsSender, TelegramSender
from .phone_service import mask_phone

logger = logging.getLogger(__name__)

METHOD_AUTO = "auto"
METHOD_TELEGRAM = "telegram"
METHOD_SMS = "sms"
DELIVERY_METHODS = (METHOD_AUTO, METHOD_TELEGRAM, METHOD_SMS)

DEFAULT_LOCALE = "ru"

TELEGRAM_MESSAGES = {
    "ru": "Ваш код для входа в GTF: {pin}\n\nКод действителен {minutes} минут.",
    "en": "Your GTF login code: {pin}\n\nCode is valid for {minutes} minutes.",
    "kg": "GTF'ге кирүү кодуңуз: {pin}\n\nКод {minutes} мүнөт жарактуу.",
    "kz": "GTF'ке кіру кодыңыз: {pin}\n\nКод {minutes} минут жарамды.",
    "uz": "GTF ga kirish kodingiz: {pin}\n\nKod {minutes} daqiqa amal qiladi.",
}

SMS_MESSAGES = {
    "ru": "GTF: Ваш код: {pin}",
    "en": "GTF: Your code: {pin}",
    "kg": "GTF: Кодуңуз: {pin}",
    "kz": "GTF: Кодыңыз: {pin}",
    "uz": "GTF: Kodingiz: {pin}",
}

NO_TELEGRAM_BINDING = "Telegram is not linked to this phone number"
DELIVERY_FAILED = "Failed to send PIN. Please try again."


@dataclass(frozen=True)
class DeliveryResult:
    success: bool
    method: str
    error: Optional[str] = None


def render_message(templates: dict, locale: Optional[str], pin: str, minutes: int) -> str:
    template = templates.get(locale or DEFAULT_LOCALE) or templates[DEFAULT_LOCALE]
    return template.format(pin=pin, minutes=minutes)


@dataclass
class DeliveryDispatcher:
    chat_directory: ChatDirectory
    telegram: TelegramSender
    sms: SmsSender
    pin_ttl_minutes: int = 5

    async def deliver(self, phone: str, code: str, locale: Optional[str] = None, method: str = METHOD_AUTO) -> DeliveryResult:
        """Send a PIN over Telegram or SMS.

        ``auto`` tries Telegram when the phone has a linked chat and falls back to
        SMS; ``telegram`` and ``sms`` use only that channel.
        """
        if method not in DELIVERY_METHODS:
            raise ValueError(f"Unknown delivery method: {method}")

        telegram_result: Optional[DeliveryResult] = None
        if method in (METHOD_AUTO, METHOD_TELEGRAM):
            telegram_result = await self._via_telegram(phone, code, locale)
            if telegram_result.success or method == METHOD_TELEGRAM:
                return telegram_result
            logger.info(f"Falling back to SMS for {mask_phone(phone)}: {telegram_result.error}")

        return await self._via_sms(phone, code, locale)

    async def _via_telegram(self, phone: str, code: str, locale: Optional[str]) -> DeliveryResult:
        chat_id = self.chat_directory.find_chat_id(phone)
        if not chat_id:
            return DeliveryResult(success=False, method=METHOD_TELEGRAM, error=NO_TELEGRAM_BINDING)
        text = render_message(TELEGRAM_MESSAGES, locale, code, self.pin_ttl_minutes)
        try:
            await self.telegram.send(chat_id, text)
        except DeliveryError as e:
            return DeliveryResult(success=False, method=METHOD_TELEGRAM, error=str(e) or DELIVERY_FAILED)
        return DeliveryResult(success=True, method=METHOD_TELEGRAM)

    async def _via_sms(self, phone: str, code: str, locale: Optional[str]) -> DeliveryResult:
        text = render_message(SMS_MESSAGES, locale, code, self.pin_ttl_minutes)
        try:
            await self.sms.send(phone, text)
        except DeliveryError as e:
            return DeliveryResult(success=False, method=METHOD_SMS, error=str(e) or DELIVERY_FAILED)
        return DeliveryResult(success=True, method=METHOD_SMS)
