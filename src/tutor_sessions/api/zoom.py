'''
API endpoint for creating Zoom meetings with the caller's own Zoom app.
'''
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException

from ..database import models as db_models
from ..models import meetings as meeting_models
from ..services.security import get_approved_user
from ..services.zoom_service import ZoomMeetingManager
from ..common.exceptions import ZoomIntegrationError


class ZoomAPI:
    def __init__(self):
        self.router = APIRouter(
            prefix="/zoom",
            tags=["Zoom"]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
                "/meetings",
                self.create_meeting,
                methods=["POST"],
                response_model=meeting_models.ZoomMeetingRead)

    async def create_meeting(
        self,
        meeting_data: meeting_models.ZoomMeetingCreate,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        zoom_manager: Annotated[ZoomMeetingManager, Depends(ZoomMeetingManager)]
    ):
        """
        Creates a scheduled meeting. Zoom's own status code is passed through
        when Zoom rejects the request.
        """
        try:
            return await zoom_manager.create_meeting(current_user, meeting_data)
        except ZoomIntegrationError as e:
            raise HTTPException(status_code=e.status_code, detail=e.message)

# Instantiate the class and export its router
zoom_api = ZoomAPI()
router = zoom_api.router
