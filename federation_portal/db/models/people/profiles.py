# federation_portal/db/models/people/profiles.py
from typing import Optional
from sqlmodel import SQLModel, Field


class Sportsman(SQLModel, table=True):
    __tablename__ = "sportsmen"
    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: Optional[str] = Field(max_length=100, default=None)
    last_name: Optional[str] = Field(max_length=100, default=None)
    phone: Optional[str] = Field(max_length=20, default=None, index=True)
    federation_id: Optional[int] = Field(default=None, foreign_key="federations.id")
    telegram_chat_id: Optional[str] = Field(max_length=64, default=None)


class Trainer(SQLModel, table=True):
    __tablename__ = "trainers"
    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: Optional[str] = Field(max_length=100, default=None)
    last_name: Optional[str] = Field(max_length=100, default=None)
    phone: Optional[str] = Field(max_length=20, default=None, index=True)
    federation_id: Optional[int] = Field(default=None, foreign_key="federations.id")


class Representative(SQLModel, table=True):
    __tablename__ = "representatives"
    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: Optional[str] = Field(max_length=100, default=None)
    last_name: Optional[str] = Field(max_length=100, default=None)
    phone: Optional[str] = Field(max_length=20, default=None, index=True)
    telegram_chat_id: Optional[str] = Field(max_length=64, default=None)
