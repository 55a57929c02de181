'''

'''
from typing import Annotated
from uuid import UUID
from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..common.logger import log
from ..common.security_utils import HashedPassword
from ..models import profile as profile_models


class ProfileService:
    """
    Database operations on accounts: lookup, signup, settings and the
    per-user integration credentials.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def get_profile_by_email(self, email: str) -> db_models.Profiles | None:
        log.info(f"Fetching profile for email: {email}")
        try:
            stmt = select(db_models.Profiles).filter(db_models.Profiles.email == email.lower())
            result = await self.db.execute(stmt)
            return result.scalars().first()
        except Exception as e:
            log.error(f"Database error fetching profile by email {email}: {e}", exc_info=True)
            raise

    async def get_profile_by_id(self, profile_id: UUID) -> db_models.Profiles | None:
        try:
            return await self.db.get(db_models.Profiles, profile_id)
        except Exception as e:
            log.error(f"Database error fetching profile by ID {profile_id}: {e}", exc_info=True)
            raise

    async def create_profile(self, data: profile_models.ProfileCreate) -> db_models.Profiles:
        """
        Registers a new account. New accounts are never approved on signup.
        """
        email = data.email.lower()
        if await self.get_profile_by_email(email):
            log.warning(f"Signup rejected, email already registered: {email}")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="An account with this email already exists."
            )

        profile = db_models.Profiles(
            email=email,
            password=HashedPassword.get_hash(data.password),
            full_name=data.full_name,
            language=data.language.value,
            is_approved=False,
            is_active=True,
        )
        self.db.add(profile)
        await self.db.flush()
        log.info(f"Created profile {profile.id} for {email} (pending approval).")
        return profile

    async def update_profile(
        self,
        profile: db_models.Profiles,
        data: profile_models.ProfileUpdate
    ) -> db_models.Profiles:
        update_data = data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            if value is None:
                continue
            setattr(profile, key, value.value if key == 'language' else value)
        await self.db.flush()
        log.info(f"Updated settings for profile {profile.id}: {list(update_data)}")
        return profile

    async def set_password(self, profile: db_models.Profiles, new_password: str) -> None:
        profile.password = HashedPassword.get_hash(new_password)
        await self.db.flush()
        log.info(f"Password changed for profile {profile.id}.")

    async def set_zoom_credentials(
        self,
        profile: db_models.Profiles,
        data: profile_models.ZoomCredentialsUpdate | None
    ) -> db_models.Profiles:
        """Stores the Zoom OAuth triple, or clears it when data is None."""
        profile.zoom_account_id = data.account_id if data else None
        profile.zoom_client_id = data.client_id if data else None
        profile.zoom_client_secret = data.client_secret if data else None
        await self.db.flush()
        log.info(f"Zoom {'connected' if data else 'disconnected'} for profile {profile.id}.")
        return profile

    async def set_whatsapp_credentials(
        self,
        profile: db_models.Profiles,
        data: profile_models.WhatsAppCredentialsUpdate | None
    ) -> db_models.Profiles:
        """Stores the WhatsApp phone-number-id and token, or clears them."""
        profile.whatsapp_phone_number_id = data.phone_number_id if data else None
        profile.whatsapp_token = data.token if data else None
        await self.db.flush()
        log.info(f"WhatsApp {'connected' if data else 'disconnected'} for profile {profile.id}.")
        return profile

    async def list_profiles(self, pending_only: bool = False) -> list[db_models.Profiles]:
        stmt = select(db_models.Profiles).order_by(db_models.Profiles.created_at)
        if pending_only:
            stmt = stmt.filter(db_models.Profiles.is_approved.is_(False))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def set_approval(self, email: str, approved: bool) -> db_models.Profiles:
        """Administrative approve/unapprove by email."""
        profile = await self.get_profile_by_email(email)
        if profile is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
        profile.is_approved = approved
        await self.db.flush()
        log.info(f"Profile {email} is_approved set to {approved}.")
        return profile
