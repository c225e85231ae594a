import logging

import aiohttp

from ....application.ports.message_channel import DeliveryError, SmsSender

logger = logging.getLogger(__name__)

NIKITA_API_URL = "https://smspro.nikita.kg/api/message"


class NikitaSmsProvider(SmsSender):
    """JSON gateway with bearer authentication (smspro.nikita.kg and compatible APIs)."""

    def __init__(self, api_key: str, sender: str, api_url: str = NIKITA_API_URL, timeout: int = 15):
        self.api_key = api_key
        self.sender = sender
        self.api_url = api_url or NIKITA_API_URL
        self.timeout = timeout

    async def send(self, phone: str, text: str) -> None:
        if not self.api_key:
            logger.error("SMS API key not configured")
            raise DeliveryError("SMS service not configured")

        headers = {"Authorization": f"Bearer {self.api_key}"}
        payload = {"sender": self.sender, "recipient": phone, "message": text}
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.api_url,
                    json=payload,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status >= 400:
                        body = await response.text()
                        logger.error(f"SMS API error {response.status}: {body[:200]}")
                        raise DeliveryError("Failed to send SMS")
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.error(f"SMS send error: {e}")
            raise DeliveryError("Failed to connect to SMS service") from e
