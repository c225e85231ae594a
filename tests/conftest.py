from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from federation_portal import models  # noqa: F401  (registers tables)
from federation_portal.application.ports.message_channel import DeliveryError
from federation_portal.application.services.auth_service import AuthService
from federation_portal.application.services.delivery_service import DeliveryDispatcher
from federation_portal.application.services.pin_service import PinService
from federation_portal.application.services.session_service import SessionIssuer
from federation_portal.application.services.user_service import UserResolver
from federation_portal.infrastructure.persistence.sqlalchemy.repositories.pin_repository_sql import SqlPinRepository
from federation_portal.infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository

TEST_SECRET = "test-secret"


class FakeClock:
    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeTelegram:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[Tuple[str, str]] = []

    async def send(self, chat_id: str, text: str) -> None:
        if self.fail:
            raise DeliveryError("Failed to connect to Telegram")
        self.sent.append((chat_id, text))


class FakeSms:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[Tuple[str, str]] = []

    async def send(self, phone: str, text: str) -> None:
        if self.fail:
            raise DeliveryError("Failed to send SMS")
        self.sent.append((phone, text))


class FakeChatDirectory:
    def __init__(self, bindings: Optional[dict] = None):
        self.bindings = bindings or {}

    def find_chat_id(self, phone: str) -> Optional[str]:
        return self.bindings.get(phone)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def clock():
    return FakeClock()


def build_auth_service(session, sms=None, telegram=None, bindings=None, rate_limiter=None):
    user_repo = SqlUserRepository(session)
    return AuthService(
        user_repo=user_repo,
        users=UserResolver(user_repo),
        pins=PinService(SqlPinRepository(session)),
        dispatcher=DeliveryDispatcher(FakeChatDirectory(bindings), telegram or FakeTelegram(), sms or FakeSms()),
        sessions=SessionIssuer(secret_key=TEST_SECRET),
        rate_limiter=rate_limiter,
    )
