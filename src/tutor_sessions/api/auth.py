'''
API endpoints for Authentication: login, signup, approval status and
password reset.
'''
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status, Form
from fastapi.security import OAuth2PasswordRequestForm

from ..database import models as db_models
from ..services.auth_service import LoginService, PasswordResetService
from ..services.approval_service import ApprovalService
from ..services.profile_service import ProfileService
from ..services.security import verify_token_and_get_user
from ..models import token as token_models
from ..models import profile as profile_models
from ..common.logger import log

class AuthRoutes:
    """
    A class to encapsulate all authentication and account creation endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/auth",
            tags=["Authentication"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
            "/login",
            self.login_for_access_token,
            methods=["POST"],
            response_model=token_models.Token,
            summary="Login for Access Token"
        )
        self.router.add_api_route(
            "/signup",
            self.signup,
            methods=["POST"],
            response_model=profile_models.ProfileRead,
            status_code=status.HTTP_201_CREATED,
            summary="Account Signup"
        )
        self.router.add_api_route(
            "/approval-status",
            self.approval_status,
            methods=["GET"],
            response_model=profile_models.ApprovalStatusRead,
            summary="Poll Approval Status"
        )
        self.router.add_api_route(
            "/password-reset/request",
            self.request_password_reset,
            methods=["POST"],
            status_code=status.HTTP_202_ACCEPTED,
            summary="Request Password Reset Email"
        )
        self.router.add_api_route(
            "/password-reset/confirm",
            self.confirm_password_reset,
            methods=["POST"],
            summary="Set New Password"
        )

    async def login_for_access_token(
        self,
        form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
        login_service: Annotated[LoginService, Depends(LoginService)],
        remember_me: Annotated[bool, Form()] = False
    ):
        """
        Authenticates a user and returns an access token.
        Uses OAuth2PasswordRequestForm (username & password fields) plus an
        optional remember_me flag for a long-lived token.
        """
        try:
            token = await login_service.login_user(form_data, remember_me=remember_me)
            return token
        except HTTPException as e:
            raise e
        except Exception as e:
            log.error(f"Unexpected error during login: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="An internal server error occurred during login.",
            )

    async def signup(
        self,
        profile_data: profile_models.ProfileCreate,
        profile_service: Annotated[ProfileService, Depends(ProfileService)]
    ):
        """
        Creates a new account. It stays pending until an administrator approves it.
        """
        return await profile_service.create_profile(profile_data)

    async def approval_status(
        self,
        current_user: Annotated[db_models.Profiles, Depends(verify_token_and_get_user)],
        approval_service: Annotated[ApprovalService, Depends(ApprovalService)]
    ):
        """
        Polled by the pending-approval page; tells the client where to go next.
        """
        return await approval_service.get_status(current_user.id)

    async def request_password_reset(
        self,
        request_data: token_models.PasswordResetRequest,
        reset_service: Annotated[PasswordResetService, Depends(PasswordResetService)]
    ):
        """
        Emails a reset link if the account exists. The answer is the same either way.
        """
        await reset_service.request_reset(request_data.email)
        return {"message": "If an account exists for this email, a reset link has been sent."}

    async def confirm_password_reset(
        self,
        confirm_data: token_models.PasswordResetConfirm,
        reset_service: Annotated[PasswordResetService, Depends(PasswordResetService)]
    ):
        await reset_service.confirm_reset(confirm_data)
        return {"message": "Password updated successfully."}

# Create an instance of the class and export its router
auth_routes = AuthRoutes()
router = auth_routes.router
