from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class MeetingCreate(BaseModel):
    receiver_id: int
    description: str
    meeting_time: datetime
    session_id: Optional[int] = None

class MeetingRespond(BaseModel):
    decision: str  # "accept" | "reject"

class MeetingCancel(BaseModel):
    reason: str


class MeetingOut(BaseModel):
    id: int
    session_id: Optional[int] = None
    sender_id: int
    receiver_id: int
    description: str
    meeting_time: datetime
    meeting_link: Optional[str] = None
    accept_status: bool
    state: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CancelMeetingOut(BaseModel):
    id: int
    meeting_id: int
    cancelled_by: int
    reason: str
    acknowledged: bool
    acknowledged_by: Optional[int] = None
    acknowledged_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
