'''

'''
from typing import Annotated
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from .security import HashedPassword, JWTHandler, PASSWORD_RESET_PURPOSE
from .profile_service import ProfileService
from .email_service import EmailService
from ..common.config import settings
from ..common.exceptions import EmailDeliveryError
from ..models import token as token_models
from ..common.logger import log

class LoginService:
    """
    Service for handling user login and authentication.
    Depends on the ProfileService to fetch account data.
    """
    def __init__(
        self,
        profile_service: Annotated[ProfileService, Depends(ProfileService)]
    ):
        self.profile_service = profile_service

    async def login_user(self, form_data: OAuth2PasswordRequestForm, remember_me: bool = False) -> token_models.Token:
        log.info(f"Attempting login for user: {form_data.username}")

        user = await self.profile_service.get_profile_by_email(form_data.username)

        valid, new_hash = (False, None)
        if user:
            valid, new_hash = HashedPassword.verify_and_update(form_data.password, user.password)
        if not valid:
            log.warning(f"Login failed for user: {form_data.username} - Incorrect email or password")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect email or password",
                headers={"WWW-Authenticate": "Bearer"},
            )
        if new_hash:
            log.info(f"Upgrading stored password hash for user: {form_data.username}")
            user.password = new_hash

        # Check if user is active
        if not user.is_active:
            log.warning(f"Login failed for user: {form_data.username} - User is inactive.")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Inactive user."
            )

        # Unapproved users still get a token; the approval gate redirects them.
        access_token, expires_at = JWTHandler.create_access_token(subject=user.email, remember_me=remember_me)
        log.info(f"Login successful for user: {form_data.username} (remember_me={remember_me})")

        return token_models.Token(access_token=access_token, token_type="bearer", expires_at=expires_at)


class PasswordResetService:
    """
    Emailed password-reset links. A reset token is bound to the password hash
    it was issued against, so using it once invalidates it.
    """
    INVALID_TOKEN_DETAIL = "Invalid or expired reset token."

    def __init__(
        self,
        profile_service: Annotated[ProfileService, Depends(ProfileService)],
        email_service: Annotated[EmailService, Depends(EmailService)]
    ):
        self.profile_service = profile_service
        self.email_service = email_service

    async def request_reset(self, email: str) -> None:
        """
        Sends a reset link if the account exists. The caller always answers
        the same way so the endpoint cannot be used to probe for accounts.
        """
        if not self.email_service.is_configured:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Password reset email is not configured on this server."
            )

        profile = await self.profile_service.get_profile_by_email(email)
        if profile is None or not profile.is_active:
            log.info(f"Password reset requested for unknown or inactive account: {email}")
            return

        token = JWTHandler.create_password_reset_token(profile.email, profile.password)
        link = f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?token={token}"
        try:
            await self.email_service.send_password_reset(profile.email, link)
        except EmailDeliveryError as e:
            # The response must not differ for existing accounts.
            log.error(f"Password reset email to {profile.email} failed: {e}", exc_info=True)
            return
        log.info(f"Password reset link sent to {profile.email}")

    async def confirm_reset(self, data: token_models.PasswordResetConfirm) -> None:
        invalid = HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=self.INVALID_TOKEN_DETAIL)

        token_data = JWTHandler.decode_token(data.token)
        if token_data is None or token_data.purpose != PASSWORD_RESET_PURPOSE:
            log.warning("Password reset rejected: token invalid or of the wrong purpose.")
            raise invalid

        profile = await self.profile_service.get_profile_by_email(token_data.sub)
        if profile is None or not profile.is_active:
            raise invalid

        if token_data.pwd != HashedPassword.fingerprint(profile.password):
            log.warning(f"Password reset rejected for {profile.email}: token already used.")
            raise invalid

        await self.profile_service.set_password(profile, data.new_password)
