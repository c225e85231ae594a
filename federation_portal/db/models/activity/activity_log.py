# federation_portal/db/models/activity/activity_log.py
from typing import Optional, Dict, Any
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, JSON
from datetime import datetime

from ....utils import utcnow


class ActivityLog(SQLModel, table=True):
    __tablename__ = "activity_log"
    id: Optional[int] = Field(default=None, primary_key=True)
    log_name: str = Field(max_length=50, index=True)
    description: str
    causer_type: Optional[str] = Field(max_length=50, default=None)
    causer_id: Optional[int] = Field(default=None, index=True)
    properties: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
