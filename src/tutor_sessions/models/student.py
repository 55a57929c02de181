'''

'''
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

E164_PATTERN = r'^\+?[0-9 ]{6,20}$'

# --- 1. API Input Models (for POST/PATCH) ---

class StudentCreate(BaseModel):
    """
    Validates the request body for creating a student.
    """
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    country: Optional[str] = None
    email: Optional[EmailStr] = None
    phone_e164: Optional[str] = Field(default=None, pattern=E164_PATTERN)
    price_per_hour: Decimal = Field(default=Decimal('0'), ge=0, max_digits=10, decimal_places=2)
    is_active: bool = True

class StudentUpdate(BaseModel):
    """
    Partial update; only the fields sent are changed.
    """
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    country: Optional[str] = None
    email: Optional[EmailStr] = None
    phone_e164: Optional[str] = Field(default=None, pattern=E164_PATTERN)
    price_per_hour: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    is_active: Optional[bool] = None

# --- 2. API Output Models (for GET) ---

class StudentRead(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    country: Optional[str] = None
    email: Optional[str] = None
    phone_e164: Optional[str] = None
    price_per_hour: Decimal
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
