# federation_portal/db/models/users/user.py
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
from sqlalchemy import DateTime

from ....utils import utcnow


class UserType(str, Enum):
    ADMIN = "ADMIN"
    JUDGE = "JUDGE"
    ARBITER = "ARBITER"
    SPORTSMAN = "SPORTSMAN"
    REPRESENTATIVE = "REPRESENTATIVE"
    TRAINER = "TRAINER"


class User(SQLModel, table=True):
    __tablename__ = "users"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    phone: str = Field(max_length=20, unique=True, index=True)
    email: Optional[str] = Field(max_length=255, default=None)
    type: UserType = Field(default=UserType.REPRESENTATIVE)
    federation_id: Optional[int] = Field(default=None, foreign_key="federations.id", index=True)
    entity_id: Optional[int] = Field(default=None)
    telegram_chat_id: Optional[str] = Field(max_length=64, default=None, index=True)
    last_login_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    # Relationships
    federation: Optional["Federation"] = Relationship(back_populates="users")
