from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class ReportCreate(BaseModel):
    session_id: int
    reported_user_id: int
    reason: str
    description: str
    evidence_files: List[str] = []

class ReportResolve(BaseModel):
    resolution: str  # mark_resolved | warn_reported | warn_reporter | dismiss
    notes: Optional[str] = None

class ReportAction(BaseModel):
    action: str  # warn | suspend | block
    admin_message: str


class ReportOut(BaseModel):
    id: int
    session_id: int
    reported_by: int
    reported_user: int
    reason: str
    description: str
    evidence_files: Optional[List[str]] = None
    status: str
    resolution: Optional[str] = None
    admin_response: Optional[str] = None
    admin_notes: Optional[str] = None
    admin_id: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
