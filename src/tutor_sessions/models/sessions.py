'''
Pydantic models for tutoring sessions.
'''
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, computed_field, model_validator

from ..database.db_enums import SessionStatusEnum, WhatsAppReminderOptionEnum, WhatsAppNotificationStatusEnum

def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC; aware ones are converted to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]

# --- 1. API Input Models ---

class SessionCreate(BaseModel):
    """
    Validates the request body for scheduling a session.
    """
    student_id: UUID
    scheduled_start_at: UTCDateTime
    scheduled_end_at: UTCDateTime
    notes: Optional[str] = None
    create_zoom_meeting: bool = False
    whatsapp_reminder_options: WhatsAppReminderOptionEnum = WhatsAppReminderOptionEnum.NONE

    @model_validator(mode='after')
    def check_window(self):
        if self.scheduled_end_at <= self.scheduled_start_at:
            raise ValueError("scheduled_end_at must be after scheduled_start_at")
        return self

class SessionUpdate(BaseModel):
    """
    Partial update of a SCHEDULED session. Status changes go through the
    dedicated complete/cancel/no-show endpoints.
    """
    scheduled_start_at: Optional[UTCDateTime] = None
    scheduled_end_at: Optional[UTCDateTime] = None
    notes: Optional[str] = None

class SessionComplete(BaseModel):
    actual_start_at: Optional[UTCDateTime] = None
    actual_end_at: Optional[UTCDateTime] = None

    @model_validator(mode='after')
    def check_window(self):
        if self.actual_start_at and self.actual_end_at and self.actual_end_at <= self.actual_start_at:
            raise ValueError("actual_end_at must be after actual_start_at")
        return self

# --- 2. API Output Models ---

class SessionRead(BaseModel):
    id: UUID
    student_id: UUID
    student_name: str
    status: SessionStatusEnum
    scheduled_start_at: datetime
    scheduled_end_at: datetime
    actual_start_at: Optional[datetime] = None
    actual_end_at: Optional[datetime] = None
    zoom_meeting_id: Optional[str] = None
    zoom_join_url: Optional[str] = None
    zoom_start_url: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[UUID] = None
    whatsapp_reminder_options: WhatsAppReminderOptionEnum
    whatsapp_notification_status: WhatsAppNotificationStatusEnum
    whatsapp_last_error: Optional[str] = None
    # Set only on create, when a requested Zoom meeting could not be made.
    zoom_warning: Optional[str] = None

    @computed_field
    @property
    def duration_hours(self) -> Decimal:
        seconds = (self.scheduled_end_at - self.scheduled_start_at).total_seconds()
        return (Decimal(str(seconds)) / Decimal(3600)).quantize(Decimal('0.01'))

    model_config = ConfigDict(from_attributes=True)
