from typing import Optional
from sqlmodel import Session, select

from .....models import User, Sportsman, Representative, TelegramBotUser
from .....application.ports.message_channel import ChatDirectory


class SqlChatDirectory(ChatDirectory):
    def __init__(self, session: Session):
        self.session = session

    def find_chat_id(self, phone: str) -> Optional[str]:
        # Users first, then member profiles that linked the bot themselves
        for model in (User, Sportsman, Representative):
            chat_id = self.session.exec(
                select(model.telegram_chat_id).where(
                    model.phone == phone,
                    model.telegram_chat_id.is_not(None),
                )
            ).first()
            if chat_id:
                return chat_id

        # Finally a bot account bound to the user owning the phone
        return self.session.exec(
            select(TelegramBotUser.telegram_chat_id)
            .join(User, TelegramBotUser.user_id == User.id)
            .where(User.phone == phone)
        ).first()
