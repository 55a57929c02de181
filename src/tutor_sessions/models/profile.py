'''
Pydantic models for accounts (profiles) and their settings.
'''
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..database.db_enums import LanguageEnum

# --- API Input Models ---

class ProfileCreate(BaseModel):
    """
    Validates the signup request body.
    """
    email: EmailStr
    password: str = Field(min_length=8)
    full_name: str = ""
    language: LanguageEnum = LanguageEnum.EN

class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    language: Optional[LanguageEnum] = None

class ZoomCredentialsUpdate(BaseModel):
    """Zoom Server-to-Server OAuth triple. All three are required to connect."""
    account_id: str = Field(min_length=1)
    client_id: str = Field(min_length=1)
    client_secret: str = Field(min_length=1)

class WhatsAppCredentialsUpdate(BaseModel):
    phone_number_id: str = Field(min_length=1)
    token: str = Field(min_length=1)

# --- API Output Models ---

class ProfileRead(BaseModel):
    """
    A profile as returned by the API. Stored secrets are never included,
    only whether each integration is connected.
    """
    id: UUID
    email: EmailStr
    full_name: str
    language: LanguageEnum
    is_approved: bool
    is_active: bool
    zoom_connected: bool = Field(validation_alias='has_zoom_credentials')
    whatsapp_connected: bool = Field(validation_alias='has_whatsapp_credentials')
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

class ApprovalStatusRead(BaseModel):
    is_approved: bool
    redirect_to: str
    poll_interval_seconds: int
