'''
API endpoints for transactional email and in-app support requests.
'''
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status

from ..database import models as db_models
from ..models import contact as contact_models
from ..services.security import get_approved_user
from ..services.email_service import EmailService
from ..common.exceptions import EmailDeliveryError, EmailNotConfiguredError


class ContactAPI:
    def __init__(self):
        self.router = APIRouter(
            prefix="/contact",
            tags=["Contact"]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
                "/email",
                self.send_email,
                methods=["POST"],
                response_model=contact_models.EmailSendResult)
        self.router.add_api_route(
                "/support",
                self.send_support_request,
                methods=["POST"],
                response_model=contact_models.EmailSendResult)

    @staticmethod
    def _as_http_error(e: EmailDeliveryError) -> HTTPException:
        if isinstance(e, EmailNotConfiguredError):
            return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    async def send_email(
        self,
        email_data: contact_models.EmailSendRequest,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        email_service: Annotated[EmailService, Depends(EmailService)]
    ):
        try:
            return await email_service.send_email(
                email_data.to, email_data.subject, email_data.html, email_data.text
            )
        except EmailDeliveryError as e:
            raise self._as_http_error(e)

    async def send_support_request(
        self,
        request_data: contact_models.SupportRequest,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        email_service: Annotated[EmailService, Depends(EmailService)]
    ):
        """
        Sends an issue report or feature request to the support inbox, with
        the caller's address as reply-to.
        """
        try:
            return await email_service.send_support_request(request_data, current_user)
        except EmailDeliveryError as e:
            raise self._as_http_error(e)

# Instantiate the class and export its router
contact_api = ContactAPI()
router = contact_api.router
