'''

'''
from typing import Optional

import httpx

from ..common.config import settings
from ..common.exceptions import ZoomIntegrationError
from ..common.logger import log
from ..database import models as db_models
from ..models import meetings as meeting_models


class ZoomMeetingManager:
    """
    Creates Zoom meetings with an account's Server-to-Server OAuth app
    (account id, client id and client secret stored on the profile).
    """
    # Tests swap this for an httpx.MockTransport.
    transport: Optional[httpx.AsyncBaseTransport] = None

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport, timeout=settings.HTTP_TIMEOUT_SECONDS)

    @staticmethod
    def _error_details(response: httpx.Response) -> dict:
        try:
            data = response.json()
            return data if isinstance(data, dict) else {"message": str(data)}
        except ValueError:
            return {"message": response.text or "Unknown error"}

    async def _get_access_token(self, client: httpx.AsyncClient, profile: db_models.Profiles) -> str:
        """
        Gets an access token from the Zoom OAuth endpoint.
        """
        params = {
            "grant_type": "account_credentials",
            "account_id": profile.zoom_account_id,
        }
        response = await client.post(
            settings.ZOOM_OAUTH_URL,
            params=params,
            auth=(profile.zoom_client_id, profile.zoom_client_secret),
        )
        if response.is_error:
            details = self._error_details(response)
            log.error(f"Zoom OAuth failed for profile {profile.id}: {response.status_code} - {details}")
            raise ZoomIntegrationError(
                details.get("reason") or details.get("message") or f"Zoom OAuth error: {response.status_code}",
                status_code=response.status_code,
                details=details,
            )
        return response.json()["access_token"]

    async def create_meeting(
        self,
        profile: db_models.Profiles,
        data: meeting_models.ZoomMeetingCreate
    ) -> meeting_models.ZoomMeetingRead:
        if not profile.has_zoom_credentials:
            raise ZoomIntegrationError(
                "Zoom credentials not found. Please connect Zoom in Settings.",
                status_code=400,
            )

        payload = {
            "topic": data.topic,
            "type": 2,  # 2 for a scheduled meeting
            "start_time": data.start_time.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "duration": data.duration,
            "timezone": settings.ZOOM_DEFAULT_TIMEZONE,
            "settings": {
                "host_video": True,
                "participant_video": True,
                "join_before_host": False,
                "mute_upon_entry": False,
                "watermark": False,
                "use_pmi": False,
            },
        }

        try:
            async with self._client() as client:
                token = await self._get_access_token(client, profile)
                response = await client.post(
                    f"{settings.ZOOM_API_URL}/users/me/meetings",
                    json=payload,
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.RequestError as e:
            log.error(f"Zoom request failed for profile {profile.id}: {e}", exc_info=True)
            raise ZoomIntegrationError(f"Could not reach Zoom: {e}", status_code=503)

        if response.is_error:
            details = self._error_details(response)
            log.error(f"Zoom API error for profile {profile.id}: {response.status_code} - {details}")
            raise ZoomIntegrationError(
                details.get("message") or f"Zoom API error: {response.status_code}",
                status_code=response.status_code,
                details=details,
            )

        meeting = response.json()
        log.info(f"Zoom meeting {meeting.get('id')} created: '{data.topic}'")
        return meeting_models.ZoomMeetingRead(
            id=str(meeting["id"]),
            join_url=meeting["join_url"],
            start_url=meeting["start_url"],
        )
