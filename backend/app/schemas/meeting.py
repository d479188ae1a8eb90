from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.models.meeting import MeetingStatus


class MeetingCreate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    participant_computer_number: Optional[str] = None
    scheduled_at: Optional[datetime] = None


class MeetingStatusUpdate(BaseModel):
    status: Optional[str] = None


class MeetingParty(BaseModel):
    computer_number: str
    first_name: str
    last_name: str

    class Config:
        from_attributes = True


class MeetingResponse(BaseModel):
    meeting_id: int
    title: str
    description: Optional[str] = None
    organizer_computer_number: str
    participant_computer_number: str
    scheduled_at: datetime
    status: MeetingStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
    organizer: Optional[MeetingParty] = None
    participant: Optional[MeetingParty] = None

    class Config:
        from_attributes = True
