'''

'''
from datetime import datetime, timedelta, timezone
from typing import Optional, Annotated
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from ..common.config import settings
from ..models.token import TokenPayload
from ..common.logger import log
from ..common.security_utils import HashedPassword
from ..database import models as db_models
from .profile_service import ProfileService
from .approval_service import PENDING_APPROVAL_PATH

ACCESS_PURPOSE = "access"
PASSWORD_RESET_PURPOSE = "password_reset"

# --- JWT Handling ---
class JWTHandler:
    @staticmethod
    def create_access_token(
        subject: str,
        # Add default value using settings
        expires_delta: Optional[timedelta] = None,
        remember_me: bool = False
    ) -> tuple[str, datetime]:
        if expires_delta is None:
            if remember_me:
                expires_delta = timedelta(days=settings.REMEMBER_ME_EXPIRE_DAYS)
            else:
                expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

        expire = datetime.now(timezone.utc) + expires_delta
        to_encode = {"sub": str(subject), "exp": expire, "purpose": ACCESS_PURPOSE}
        encoded_jwt = jwt.encode(
            to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM
        )
        return encoded_jwt, expire

    @staticmethod
    def create_password_reset_token(subject: str, hashed_password: str) -> str:
        """
        Reset tokens carry a fingerprint of the current password hash, so they
        stop verifying as soon as the password is changed.
        """
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES)
        to_encode = {
            "sub": str(subject),
            "exp": expire,
            "purpose": PASSWORD_RESET_PURPOSE,
            "pwd": HashedPassword.fingerprint(hashed_password),
        }
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_token(token: str) -> TokenPayload | None:
        try:
            payload = jwt.decode(
                token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
            )
            token_data = TokenPayload(**payload)
            return token_data
        except (JWTError, ValueError) as e: # Catch Pydantic validation errors too
            log.warning(f"JWT decode/validation error: {e}")
            return None

# --- JWT Verification Dependency Functions ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

async def verify_token_and_get_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    profile_service: Annotated[ProfileService, Depends(ProfileService)]
    ) -> db_models.Profiles:
    """
    Dependency to verify the JWT and fetch the caller's profile.
    Does not check approval; see get_approved_user.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token_data = JWTHandler.decode_token(token)
    if not token_data or not token_data.sub:
        log.warning("JWT decode failed or invalid token structure.")
        raise credentials_exception

    if token_data.purpose != ACCESS_PURPOSE:
        log.warning(f"Rejected '{token_data.purpose}' token used as an access token.")
        raise credentials_exception

    user = await profile_service.get_profile_by_email(token_data.sub)

    if user is None:
        log.warning(f"User '{token_data.sub}' not found during token verification.")
        raise credentials_exception

    if not user.is_active:
        log.warning(f"User '{token_data.sub}' is not active.")
        raise credentials_exception

    log.info(f"JWT verified successfully for user: {user.email}")
    return user

async def get_approved_user(
    current_user: Annotated[db_models.Profiles, Depends(verify_token_and_get_user)]
    ) -> db_models.Profiles:
    """
    Gate for every route that needs an approved account. The header tells
    the client where to send the user instead.
    """
    if not current_user.is_approved:
        log.info(f"User '{current_user.email}' blocked: account pending approval.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account pending approval.",
            headers={"X-Redirect-To": PENDING_APPROVAL_PATH},
        )
    return current_user
