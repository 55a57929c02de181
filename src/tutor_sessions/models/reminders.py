'''

'''
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from ..database.db_enums import ReminderStatusEnum, ReminderChannelEnum

class ReminderJobRead(BaseModel):
    id: UUID
    session_id: UUID
    scheduled_for: datetime
    status: ReminderStatusEnum
    channel: ReminderChannelEnum
    last_error: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class DispatchSummary(BaseModel):
    """Outcome counts of one dispatch pass."""
    processed: int = 0
    sent: int = 0
    failed: int = 0
    skipped: int = 0 # claimed by another dispatcher first
