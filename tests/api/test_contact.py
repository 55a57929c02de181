import pytest
import httpx
from httpx import AsyncClient

from tutor_sessions.services.email_service import EmailService
from tests.helpers import RecordingTransport, auth_headers_for_user


@pytest.mark.anyio
class TestContactAPI:

    async def test_send_email(self, client: AsyncClient, approved_user, fake_resend: RecordingTransport):
        response = await client.post(
            "/contact/email",
            json={"to": "parent@example.com", "subject": "Invoice", "html": "<p>Attached</p>"},
            headers=auth_headers_for_user(approved_user)
        )

        assert response.status_code == 200, response.json()
        assert response.json() == {"success": True, "message": "Email sent successfully", "id": "email_123"}

    async def test_send_email_without_relay_is_503(self, client: AsyncClient, approved_user, no_email_relay):
        response = await client.post(
            "/contact/email",
            json={"to": "parent@example.com", "subject": "Invoice", "html": "<p>Attached</p>"},
            headers=auth_headers_for_user(approved_user)
        )

        assert response.status_code == 503
        assert "RESEND_API_KEY" in response.json()["detail"]

    async def test_relay_failure_is_502(self, client: AsyncClient, approved_user, fake_resend: RecordingTransport, monkeypatch):
        failing = RecordingTransport([httpx.Response(500, text="upstream down")])
        monkeypatch.setattr(EmailService, "transport", httpx.MockTransport(failing))

        response = await client.post(
            "/contact/email",
            json={"to": "parent@example.com", "subject": "Invoice", "html": "<p>Attached</p>"},
            headers=auth_headers_for_user(approved_user)
        )

        assert response.status_code == 502

    async def test_support_request(self, client: AsyncClient, approved_user, fake_resend: RecordingTransport):
        email = approved_user.email

        response = await client.post(
            "/contact/support",
            json={"type": "issue", "subject": "Balance looks wrong", "message": "Layla shows -37.50"},
            headers=auth_headers_for_user(approved_user)
        )

        assert response.status_code == 200, response.json()
        payload = fake_resend.payloads[0]
        assert payload["subject"] == "[Issue report] Balance looks wrong"
        assert payload["reply_to"] == email

    async def test_support_request_bad_type(self, client: AsyncClient, approved_user, fake_resend):
        response = await client.post(
            "/contact/support",
            json={"type": "praise", "subject": "Nice", "message": "Thanks"},
            headers=auth_headers_for_user(approved_user)
        )
        assert response.status_code == 422
