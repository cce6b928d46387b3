"""
API Tests

Drives the HTTP routes through TestClient against a SQLite database.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.api.deps import get_otp_manager, get_telegram_sender, include_debug_code
from app.core.database import get_db
from app.main import app
from app.middleware.rate_limit import otp_request_limiter
from app.models.enums import TelegramIntegrationErrorKind
from app.services.telegram_service import TelegramIntegrationError


PHONE = "+7 (999) 123-45-67"


class RecordingSender:
    """Telegram sender stand-in that records calls or fails on demand."""

    def __init__(self):
        self.calls = []
        self.error = None

    async def send_qr_code(self, chat_id, qr_image_base64, caption):
        if self.error is not None:
            raise self.error
        self.calls.append((chat_id, qr_image_base64, caption))


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def client(session_maker, sender):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[include_debug_code] = lambda: True
    app.dependency_overrides[get_telegram_sender] = lambda: sender
    otp_request_limiter.reset()

    yield TestClient(app)

    app.dependency_overrides.clear()
    otp_request_limiter.reset()


def login(client) -> dict:
    requested = client.post("/api/v1/auth/request-otp", json={"phone_number": PHONE})
    code = requested.json()["debug_code"]
    confirmed = client.post("/api/v1/auth/confirm-otp", json={"phone_number": PHONE, "code": code})
    return confirmed.json()


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def booking_body(**overrides) -> dict:
    check_in = datetime.now(timezone.utc) + timedelta(days=1)
    body = {
        "check_in_at": check_in.isoformat(),
        "check_out_at": (check_in + timedelta(days=2)).isoformat(),
        "guests_count": 2,
        "door_password": "4821",
    }
    body.update(overrides)
    return body


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestAuthRoutes:
    """Tests for /auth routes."""

    def test_login_flow(self, client):
        requested = client.post("/api/v1/auth/request-otp", json={"phone_number": PHONE})
        assert requested.status_code == 200
        body = requested.json()
        assert body["phone_number"] == "79991234567"
        assert body["max_verify_attempts"] == 5
        code = body["debug_code"]
        assert len(code) == 6

        wrong = "111111" if code != "111111" else "222222"
        rejected = client.post("/api/v1/auth/confirm-otp", json={"phone_number": PHONE, "code": wrong})
        assert rejected.status_code == 400
        assert rejected.json() == {
            "error_code": "invalid_otp",
            "remaining_attempts": 4,
            "message": "Invalid OTP code.",
        }

        confirmed = client.post("/api/v1/auth/confirm-otp", json={"phone_number": PHONE, "code": code})
        assert confirmed.status_code == 200
        token = confirmed.json()
        assert token["token_type"] == "Bearer"
        assert token["phone_number"] == "79991234567"

        me = client.get("/api/v1/users/me", headers=auth_headers(token["access_token"]))
        assert me.status_code == 200
        assert me.json()["id"] == token["user_id"]
        assert me.json()["phone_number"] == "79991234567"

    def test_invalid_phone(self, client):
        response = client.post("/api/v1/auth/request-otp", json={"phone_number": "123"})

        assert response.status_code == 400
        assert "phone_number" in response.json()["detail"]["errors"]

    def test_invalid_code_format(self, client):
        response = client.post("/api/v1/auth/confirm-otp", json={"phone_number": PHONE, "code": "12"})

        assert response.status_code == 400
        assert "code" in response.json()["detail"]["errors"]

    def test_no_active_code(self, client):
        response = client.post("/api/v1/auth/confirm-otp", json={"phone_number": PHONE, "code": "123456"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "otp_not_found"

    def test_blocked_after_five_wrong_codes(self, client):
        code = client.post("/api/v1/auth/request-otp", json={"phone_number": PHONE}).json()["debug_code"]
        wrong = "111111" if code != "111111" else "222222"

        statuses = [
            client.post("/api/v1/auth/confirm-otp", json={"phone_number": PHONE, "code": wrong}).status_code
            for _ in range(5)
        ]
        after = client.post("/api/v1/auth/confirm-otp", json={"phone_number": PHONE, "code": code})

        assert statuses == [400, 400, 400, 400, 429]
        assert after.status_code == 429
        assert after.json()["error_code"] == "otp_blocked"

    def test_request_rate_limited(self, client):
        responses = [
            client.post("/api/v1/auth/request-otp", json={"phone_number": PHONE})
            for _ in range(4)
        ]

        assert [r.status_code for r in responses[:3]] == [200, 200, 200]
        assert responses[3].status_code == 429
        assert "Retry-After" in responses[3].headers

    def test_forged_forwarded_for_still_rate_limited(self, client):
        responses = [
            client.post(
                "/api/v1/auth/request-otp",
                json={"phone_number": PHONE},
                headers={"X-Forwarded-For": f"198.51.100.{i}"},
            )
            for i in range(6)
        ]

        assert [r.status_code for r in responses] == [200, 200, 200, 429, 429, 429]
        assert len(otp_request_limiter._buckets) == 1

    def test_oversize_input_gets_field_errors(self, client):
        phone = client.post("/api/v1/auth/request-otp", json={"phone_number": "1" * 200})
        code = client.post("/api/v1/auth/confirm-otp", json={"phone_number": PHONE, "code": "1" * 200})

        assert phone.status_code == 400
        assert "phone_number" in phone.json()["detail"]["errors"]
        assert code.status_code == 400
        assert "code" in code.json()["detail"]["errors"]

    def test_me_requires_token(self, client):
        assert client.get("/api/v1/users/me").status_code == 401
        assert client.get("/api/v1/users/me", headers=auth_headers("garbage")).status_code == 401


class TestQrRoutes:
    """Tests for /qr and /telegram routes."""

    def test_create_list_get_send(self, client, sender):
        headers = auth_headers(login(client)["access_token"])

        created = client.post("/api/v1/qr", json=booking_body(), headers=headers)
        assert created.status_code == 200
        qr = created.json()
        assert qr["data_type"] == "booking_access"
        assert qr["qr_image_base64"]

        history = client.get("/api/v1/qr", params={"take": 500}, headers=headers).json()
        assert history["total"] == 1
        assert history["take"] == 100
        assert history["items"][0]["id"] == qr["id"]
        assert "door_password" not in history["items"][0]

        details = client.get(f"/api/v1/qr/{qr['id']}", headers=headers)
        assert details.status_code == 200
        assert details.json()["door_password"] == "4821"

        not_bound = client.post(f"/api/v1/qr/{qr['id']}/send-telegram", headers=headers)
        assert not_bound.status_code == 400
        assert not_bound.json()["error_code"] == "telegram_not_bound"

        bound = client.post("/api/v1/telegram/bind-chat", json={"chat_id": 555}, headers=headers)
        assert bound.status_code == 200
        assert bound.json()["chat_id"] == 555

        sent = client.post(f"/api/v1/qr/{qr['id']}/send-telegram", headers=headers)
        assert sent.status_code == 200
        assert sent.json()["status"] == "sent"
        assert sender.calls[0][0] == 555

    def test_unknown_qr(self, client):
        headers = auth_headers(login(client)["access_token"])

        response = client.get(f"/api/v1/qr/{uuid.uuid4()}", headers=headers)

        assert response.status_code == 404
        assert response.json()["error_code"] == "qr_not_found"

    def test_booking_window_validated(self, client):
        headers = auth_headers(login(client)["access_token"])
        check_in = datetime.now(timezone.utc) + timedelta(days=2)

        response = client.post(
            "/api/v1/qr",
            json=booking_body(
                check_in_at=check_in.isoformat(),
                check_out_at=(check_in - timedelta(hours=1)).isoformat(),
            ),
            headers=headers,
        )

        assert response.status_code == 422

    def test_invalid_chat_id(self, client):
        headers = auth_headers(login(client)["access_token"])

        response = client.post("/api/v1/telegram/bind-chat", json={"chat_id": 0}, headers=headers)

        assert response.status_code == 400

    @pytest.mark.parametrize(
        "kind, status_code",
        [
            (TelegramIntegrationErrorKind.CONFIGURATION, 503),
            (TelegramIntegrationErrorKind.INVALID_CHAT, 400),
            (TelegramIntegrationErrorKind.FORBIDDEN, 403),
            (TelegramIntegrationErrorKind.TIMEOUT, 504),
            (TelegramIntegrationErrorKind.NETWORK, 503),
            (TelegramIntegrationErrorKind.INVALID_PAYLOAD, 500),
            (TelegramIntegrationErrorKind.REMOTE_API, 502),
        ],
    )
    def test_telegram_failures(self, client, sender, kind, status_code):
        headers = auth_headers(login(client)["access_token"])
        qr_id = client.post("/api/v1/qr", json=booking_body(), headers=headers).json()["id"]
        client.post("/api/v1/telegram/bind-chat", json={"chat_id": 555}, headers=headers)
        sender.error = TelegramIntegrationError(kind, "boom")

        response = client.post(f"/api/v1/qr/{qr_id}/send-telegram", headers=headers)

        assert response.status_code == status_code


class TestDatabaseErrors:

    def test_database_error_returns_500(self, client):
        class BrokenManager:
            async def request_code(self, raw_phone_number, include_debug_code=False):
                raise OperationalError("SELECT 1", {}, Exception("database is down"))

        app.dependency_overrides[get_otp_manager] = lambda: BrokenManager()

        response = client.post("/api/v1/auth/request-otp", json={"phone_number": PHONE})

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}
