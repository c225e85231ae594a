# federation_portal/db/models/users/telegram_bot_user.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
from sqlalchemy import DateTime

from ....utils import utcnow


class TelegramBotUser(SQLModel, table=True):
    """A Telegram account that started the bot, optionally linked to a portal user."""
    __tablename__ = "telegram_bot_users"
    id: Optional[int] = Field(default=None, primary_key=True)
    telegram_user_id: str = Field(max_length=64, unique=True, index=True)
    telegram_chat_id: str = Field(max_length=64)
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    first_name: Optional[str] = Field(max_length=100, default=None)
    last_name: Optional[str] = Field(max_length=100, default=None)
    telegram_username: Optional[str] = Field(max_length=100, default=None)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
