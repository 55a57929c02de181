'''

'''
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from ..database.db_enums import SupportRequestTypeEnum

class EmailSendRequest(BaseModel):
    to: EmailStr
    subject: str = Field(min_length=1)
    html: str = Field(min_length=1)
    text: Optional[str] = None

class SupportRequest(BaseModel):
    """The in-app "report an issue / suggest a feature" form."""
    type: SupportRequestTypeEnum
    subject: str = Field(min_length=1)
    message: str = Field(min_length=1)

class EmailSendResult(BaseModel):
    success: bool
    message: str
    id: Optional[str] = None
