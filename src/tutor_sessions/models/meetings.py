'''

'''
from pydantic import BaseModel, Field

from .sessions import UTCDateTime

class ZoomMeetingCreate(BaseModel):
    start_time: UTCDateTime
    duration: int = Field(gt=0, description="Duration in minutes")
    topic: str = Field(min_length=1)

class ZoomMeetingRead(BaseModel):
    id: str
    join_url: str
    start_url: str
