import pytest
import httpx
from httpx import AsyncClient

from tests.helpers import RecordingTransport, auth_headers_for_user

MEETING_BODY = {"start_time": "2030-03-10T15:00:00Z", "duration": 45, "topic": "Physics revision"}


@pytest.mark.anyio
class TestZoomAPI:

    async def test_create_meeting(self, client: AsyncClient, zoom_user, fake_zoom: RecordingTransport):
        response = await client.post("/zoom/meetings", json=MEETING_BODY, headers=auth_headers_for_user(zoom_user))

        assert response.status_code == 200, response.json()
        assert response.json() == {
            "id": "8123456789",
            "join_url": "https://zoom.us/j/8123456789",
            "start_url": "https://zoom.us/s/8123456789?zak=abc",
        }

    async def test_missing_credentials_is_400(self, client: AsyncClient, approved_user, fake_zoom):
        response = await client.post("/zoom/meetings", json=MEETING_BODY, headers=auth_headers_for_user(approved_user))

        assert response.status_code == 400
        assert "Zoom credentials not found" in response.json()["detail"]

    async def test_provider_status_passes_through(self, client: AsyncClient, zoom_user, fake_zoom: RecordingTransport):
        fake_zoom.responses = [httpx.Response(401, json={"reason": "Invalid client_id or client_secret"})]

        response = await client.post("/zoom/meetings", json=MEETING_BODY, headers=auth_headers_for_user(zoom_user))

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid client_id or client_secret"

    async def test_zero_duration_is_422(self, client: AsyncClient, zoom_user, fake_zoom):
        response = await client.post(
            "/zoom/meetings", json={**MEETING_BODY, "duration": 0}, headers=auth_headers_for_user(zoom_user)
        )
        assert response.status_code == 422
