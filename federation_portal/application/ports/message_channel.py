from typing import Protocol, Optional


class DeliveryError(Exception):
    """Raised by a channel when a message could not be sent.

    The message is safe to show to the end user; provider details are logged by the channel.
    """


class ChatDirectory(Protocol):
    def find_chat_id(self, phone: str) -> Optional[str]:
        ...


class TelegramSender(Protocol):
    async def send(self, chat_id: str, text: str) -> None:
        ...


class SmsSender(Protocol):
    async def send(self, phone: str, text: str) -> None:
        ...
