import asyncio
import logging
from typing import Optional

from twilio.base.exceptions import TwilioException
from twilio.rest import Client

from ....application.ports.message_channel import DeliveryError, SmsSender

logger = logging.getLogger(__name__)


class TwilioSmsProvider(SmsSender):
    def __init__(self, account_sid: str, auth_token: str, from_number: str, client: Optional[Client] = None):
        self.from_number = from_number
        self.client = client
        if self.client is None and account_sid and auth_token:
            self.client = Client(account_sid, auth_token)

    async def send(self, phone: str, text: str) -> None:
        if self.client is None or not self.from_number:
            logger.error("Twilio credentials or sender number not configured")
            raise DeliveryError("SMS service not configured")
        try:
            message = await asyncio.to_thread(
                self.client.messages.create, to=phone, from_=self.from_number, body=text
            )
        except TwilioException as e:
            logger.error(f"Twilio error: {e}")
            raise DeliveryError("Failed to send SMS") from e
        logger.info(f"Twilio message queued, SID: {message.sid}")
