import logging
from typing import Optional

import aiohttp

from ...application.ports.message_channel import DeliveryError, TelegramSender

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


class TelegramBotSender(TelegramSender):
    def __init__(self, bot_token: str, api_url: str = TELEGRAM_API_URL, timeout: int = 15, session: Optional[aiohttp.ClientSession] = None):
        self.bot_token = bot_token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._session = session

    async def send(self, chat_id: str, text: str) -> None:
        if not self.bot_token:
            logger.error("TELEGRAM_BOT_TOKEN not configured")
            raise DeliveryError("Telegram bot not configured")

        url = f"{self.api_url}/bot{self.bot_token}/sendMessage"
        payload = {"chat_id": chat_id, "text": text, "parse_mode": "HTML"}
        try:
            if self._session is not None:
                data = await self._post(self._session, url, payload)
            else:
                async with aiohttp.ClientSession() as session:
                    data = await self._post(session, url, payload)
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.error(f"Telegram send error: {e}")
            raise DeliveryError("Failed to connect to Telegram") from e

        if not data.get("ok"):
            logger.error(f"Telegram API error: {data.get('description')}")
            raise DeliveryError("Failed to send message to Telegram")

    async def _post(self, session: aiohttp.ClientSession, url: str, payload: dict) -> dict:
        async with session.post(url, json=payload, timeout=aiohttp.ClientTimeout(total=self.timeout)) as response:
            return await response.json(content_type=None)
