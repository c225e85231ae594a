# federation_portal/db/models/auth/login_pin.py
from sqlmodel import SQLModel, Field
from datetime import datetime
from sqlalchemy import DateTime
from typing import Optional

from ....utils import utcnow


class LoginPin(SQLModel, table=True):
    __tablename__ = "login_pins"
    id: Optional[int] = Field(default=None, primary_key=True)
    phone: str = Field(max_length=20, index=True)
    user_id: Optional[int] = Field(default=None, foreign_key="users.id")
    code: str = Field(max_length=12)
    attempt_count: int = Field(default=0)
    expires_at: datetime = Field(index=True, sa_type=DateTime(timezone=True))
    used_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
