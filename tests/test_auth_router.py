import inspect
import re
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from federation_portal.application.ports.user_repo import FederationDto, UserDto
from federation_portal.application.services.activity_service import ActivityRecorder
from federation_portal.application.services.session_service import SessionIssuer
from federation_portal.config import settings
from federation_portal.database import get_session
from federation_portal.dependencies import (
    get_activity_recorder,
    get_auth_service,
    get_rate_limiter,
    get_session_issuer,
)
from federation_portal.infrastructure.persistence.sqlalchemy.repositories.activity_repository_sql import SqlActivityRepository
from federation_portal.infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter
from federation_portal.main import app
from federation_portal.models import ActivityLog, Federation
from federation_portal.routers import auth_router, sms_settings_router
from conftest import TEST_SECRET, FakeSms, build_auth_service

PHONE = "+996700123456"


@pytest.fixture
def sms():
    return FakeSms()


@pytest.fixture
def client(engine, session, sms):
    limiter = InMemoryRateLimiter()
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    app.dependency_overrides[get_session_issuer] = lambda: SessionIssuer(secret_key=TEST_SECRET)
    app.dependency_overrides[get_activity_recorder] = lambda: ActivityRecorder(SqlActivityRepository(lambda: Session(engine)))
    app.dependency_overrides[get_auth_service] = lambda: build_auth_service(session, sms=sms, rate_limiter=limiter)
    yield TestClient(app)
    app.dependency_overrides.clear()


def sent_code(sms: FakeSms) -> str:
    return re.search(r"\d{6}", sms.sent[-1][1]).group(0)


def admin_token(federation=None) -> str:
    user = UserDto(
        id=1,
        name="Admin",
        phone="+996700000001",
        type="ADMIN",
        federation_id=federation.id if federation else None,
        entity_id=None,
        email=None,
        last_login_at=None,
        created_at=datetime.now(timezone.utc),
        federation=FederationDto(id=federation.id, code=federation.code, name=federation.name) if federation else None,
    )
    return SessionIssuer(secret_key=TEST_SECRET).issue(user).token


def test_send_pin_requires_phone(client):
    response = client.post("/auth/send-pin", json={})
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Phone number is required"}


def test_send_pin_rejects_invalid_phone(client, sms):
    response = client.post("/auth/send-pin", json={"phone": "12ab"})
    assert response.status_code == 400
    assert response.json()["success"] is False
    assert sms.sent == []


def test_send_pin_rejects_unknown_method(client):
    response = client.post("/auth/send-pin", json={"phone": PHONE, "method": "fax"})
    assert response.status_code == 400
    assert "Method must be one of" in response.json()["error"]


def test_send_pin_success(client, sms):
    response = client.post("/auth/send-pin", json={"phone": PHONE, "method": "auto"}, headers={"x-locale": "en"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["method"] == "sms"
    assert body["expiresAt"].endswith("Z")
    assert "+00:00" not in body["expiresAt"]
    assert sms.sent[0][1].startswith("GTF: Your code:")
    assert response.headers["x-federation-code"] == "global"


def test_send_pin_delivery_failure_is_500(engine, session):
    failing = FakeSms(fail=True)
    app.dependency_overrides[get_rate_limiter] = lambda: InMemoryRateLimiter()
    app.dependency_overrides[get_auth_service] = lambda: build_auth_service(session, sms=failing)
    try:
        response = TestClient(app).post("/auth/send-pin", json={"phone": PHONE, "method": "sms"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Failed to send SMS"}


def test_send_pin_rate_limited(client):
    for _ in range(5):
        assert client.post("/auth/send-pin", json={"phone": PHONE}).status_code == 200
    response = client.post("/auth/send-pin", json={"phone": PHONE})
    assert response.status_code == 429


def test_verify_pin_requires_fields(client):
    response = client.post("/auth/verify-pin", json={"phone": PHONE})
    assert response.status_code == 400
    assert response.json()["error"] == "Phone and code are required"


def test_verify_rate_limit_ignores_untrusted_forwarded_for(client):
    statuses = [
        client.post(
            "/auth/verify-pin",
            json={"phone": PHONE, "code": "123456"},
            headers={"x-forwarded-for": f"10.0.0.{i}"},
        ).status_code
        for i in range(settings.PIN_VERIFY_MAX_PER_WINDOW + 1)
    ]
    assert statuses[:-1] == [401] * settings.PIN_VERIFY_MAX_PER_WINDOW
    assert statuses[-1] == 429


def test_verify_rate_limit_uses_forwarded_for_from_trusted_proxy(client, monkeypatch):
    monkeypatch.setattr(settings, "TRUSTED_PROXIES", "testclient")
    for _ in range(settings.PIN_VERIFY_MAX_PER_WINDOW):
        client.post("/auth/verify-pin", json={"phone": PHONE, "code": "123456"}, headers={"x-forwarded-for": "10.0.0.1"})

    blocked = client.post("/auth/verify-pin", json={"phone": PHONE, "code": "123456"}, headers={"x-forwarded-for": "10.0.0.1"})
    other = client.post("/auth/verify-pin", json={"phone": PHONE, "code": "123456"}, headers={"x-forwarded-for": "10.0.0.2"})
    assert blocked.status_code == 429
    assert other.status_code == 401


def test_verify_pin_wrong_code_is_401(client, sms):
    client.post("/auth/send-pin", json={"phone": PHONE})
    code = sent_code(sms)
    wrong = "000000" if code != "000000" else "111111"

    response = client.post("/auth/verify-pin", json={"phone": PHONE, "code": wrong})
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_verify_pin_sets_cookie_and_records_login(client, sms, engine):
    client.post("/auth/send-pin", json={"phone": PHONE})

    response = client.post("/auth/verify-pin", json={"phone": PHONE, "code": sent_code(sms)})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["isNew"] is True
    assert body["redirectUrl"] == "/cabinet"
    assert body["user"]["phone"] == PHONE
    assert body["user"]["type"] == "REPRESENTATIVE"

    cookie = response.headers["set-cookie"].lower()
    assert cookie.startswith("auth-token=")
    assert "httponly" in cookie
    assert "samesite=lax" in cookie
    assert "max-age=604800" in cookie
    assert "path=/" in cookie
    assert "; secure" not in cookie

    with Session(engine) as s:
        logs = s.exec(select(ActivityLog)).all()
    assert [log.description for log in logs] == ["User logged in via PIN"]

    # the same code cannot be used twice
    again = client.post("/auth/verify-pin", json={"phone": PHONE, "code": sent_code(sms)})
    assert again.status_code == 401


def test_me_and_logout(client, sms, engine):
    assert client.get("/auth/me").status_code == 401

    client.post("/auth/send-pin", json={"phone": PHONE})
    client.post("/auth/verify-pin", json={"phone": PHONE, "code": sent_code(sms)})

    me = client.get("/auth/me")
    assert me.status_code == 200
    assert me.json()["user"]["phone"] == PHONE
    assert me.json()["user"]["lastLoginAt"] is not None

    out = client.post("/auth/logout")
    assert out.status_code == 200
    assert out.json()["success"] is True
    assert client.get("/auth/me").status_code == 401

    with Session(engine) as s:
        descriptions = [log.description for log in s.exec(select(ActivityLog)).all()]
    assert "User logged out" in descriptions


def test_logout_without_session_is_ok(client):
    response = client.post("/auth/logout")
    assert response.status_code == 200


def test_sms_settings_requires_admin(client, session):
    assert client.get("/admin/settings/sms?federationId=1").status_code == 401


def test_sms_settings_admin_flow(client, session):
    kg = Federation(code="kg", name="Kyrgyz Federation")
    kz = Federation(code="kz", name="Kazakh Federation")
    session.add(kg)
    session.add(kz)
    session.commit()
    session.refresh(kg)
    session.refresh(kz)

    headers = {"Authorization": f"Bearer {admin_token(kg)}"}

    saved = client.post("/admin/settings/sms", json={
        "federationId": kg.id, "provider": "nikita", "apiKey": "secret-key-1234", "enabled": True,
    }, headers=headers)
    assert saved.status_code == 200

    read = client.get(f"/admin/settings/sms?federationId={kg.id}", headers=headers)
    assert read.status_code == 200
    assert read.json()["settings"]["apiKey"] == "••••••••1234"
    assert "twilio" in read.json()["providers"]

    foreign = client.get(f"/admin/settings/sms?federationId={kz.id}", headers=headers)
    assert foreign.status_code == 403

    cleared = client.delete(f"/admin/settings/sms?federationId={kg.id}", headers=headers)
    assert cleared.status_code == 200
    after = client.get(f"/admin/settings/sms?federationId={kg.id}", headers=headers).json()["settings"]
    assert after["hasApiKey"] is False
    assert after["enabled"] is False


def test_superadmin_gets_404_for_missing_federation(client):
    headers = {"Authorization": f"Bearer {admin_token()}"}
    assert client.get("/admin/settings/sms?federationId=999", headers=headers).status_code == 404
    assert client.get("/admin/settings/sms", headers=headers).status_code == 400


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["auth"]["pin_ttl_minutes"] == 5


@pytest.mark.parametrize("handler", [
    auth_router.verify_pin,
    auth_router.me,
    sms_settings_router.get_sms_settings,
    sms_settings_router.save_sms_settings,
    sms_settings_router.clear_sms_settings,
])
def test_blocking_handlers_run_in_threadpool(handler):
    assert not inspect.iscoroutinefunction(handler)
