# federation_portal/db/models/federation/federation.py
from typing import Optional, List
from sqlmodel import SQLModel, Field, Relationship, UniqueConstraint
from datetime import datetime
from sqlalchemy import DateTime

from ....utils import utcnow


class Federation(SQLModel, table=True):
    __tablename__ = "federations"
    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(max_length=10, unique=True, index=True)
    name: str = Field(max_length=255)
    domain: Optional[str] = Field(max_length=255, default=None)
    status: str = Field(max_length=20, default="ACTIVE")
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    # Relationships
    users: List["User"] = Relationship(back_populates="federation")


class Setting(SQLModel, table=True):
    """Key/value setting, scoped to a federation or global when federation_id is null."""
    __tablename__ = "settings"
    __table_args__ = (UniqueConstraint("federation_id", "key", name="uq_settings_federation_key"),)
    id: Optional[int] = Field(default=None, primary_key=True)
    federation_id: Optional[int] = Field(default=None, foreign_key="federations.id", index=True)
    key: str = Field(max_length=100)
    value: str = Field(default="")
    group: str = Field(max_length=50, default="general")
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
