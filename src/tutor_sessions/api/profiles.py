'''
API endpoints for the caller's own profile and integration settings.
'''
from typing import Annotated
from fastapi import APIRouter, Depends

from ..database import models as db_models
from ..models import profile as profile_models
from ..services.security import verify_token_and_get_user, get_approved_user
from ..services.profile_service import ProfileService


class ProfilesAPI:
    def __init__(self):
        self.router = APIRouter(
            prefix="/profiles",
            tags=["Profiles"]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route("/me", self.read_me, methods=["GET"], response_model=profile_models.ProfileRead)
        self.router.add_api_route("/me", self.update_me, methods=["PATCH"], response_model=profile_models.ProfileRead)
        self.router.add_api_route("/me/zoom", self.connect_zoom, methods=["PUT"], response_model=profile_models.ProfileRead)
        self.router.add_api_route("/me/zoom", self.disconnect_zoom, methods=["DELETE"], response_model=profile_models.ProfileRead)
        self.router.add_api_route("/me/whatsapp", self.connect_whatsapp, methods=["PUT"], response_model=profile_models.ProfileRead)
        self.router.add_api_route("/me/whatsapp", self.disconnect_whatsapp, methods=["DELETE"], response_model=profile_models.ProfileRead)

    async def read_me(
        self,
        current_user: Annotated[db_models.Profiles, Depends(verify_token_and_get_user)]
    ):
        """
        Returns the profile of the authenticated user. Pending accounts may
        read it too. Stored credentials are never included.
        """
        return current_user

    async def update_me(
        self,
        update_data: profile_models.ProfileUpdate,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        profile_service: Annotated[ProfileService, Depends(ProfileService)]
    ):
        return await profile_service.update_profile(current_user, update_data)

    async def connect_zoom(
        self,
        credentials: profile_models.ZoomCredentialsUpdate,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        profile_service: Annotated[ProfileService, Depends(ProfileService)]
    ):
        return await profile_service.set_zoom_credentials(current_user, credentials)

    async def disconnect_zoom(
        self,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        profile_service: Annotated[ProfileService, Depends(ProfileService)]
    ):
        return await profile_service.set_zoom_credentials(current_user, None)

    async def connect_whatsapp(
        self,
        credentials: profile_models.WhatsAppCredentialsUpdate,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        profile_service: Annotated[ProfileService, Depends(ProfileService)]
    ):
        return await profile_service.set_whatsapp_credentials(current_user, credentials)

    async def disconnect_whatsapp(
        self,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        profile_service: Annotated[ProfileService, Depends(ProfileService)]
    ):
        return await profile_service.set_whatsapp_credentials(current_user, None)

# Instantiate the class and export its router
profiles_api = ProfilesAPI()
router = profiles_api.router
