from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# ======================
# SESSION REQUEST MODELS
# ======================

class SessionCreate(BaseModel):
    user2_id: int
    skill1_id: int
    description_of_service1: str
    skill2_id: int
    description_of_service2: str
    start_date: datetime
    expected_end_date: Optional[datetime] = None

# ======================
# SESSION RESPONSE MODELS
# ======================

class SessionOut(BaseModel):
    id: int
    user1_id: int
    user2_id: int
    skill1_id: int
    description_of_service1: str
    skill2_id: int
    description_of_service2: str
    start_date: datetime
    expected_end_date: Optional[datetime] = None
    is_accepted: Optional[bool] = None
    is_amended: Optional[bool] = False
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

# ======================
# COUNTER-OFFERS
# ======================

class CounterOfferCreate(BaseModel):
    skill1_id: int
    description_of_service1: str
    skill2_id: int
    description_of_service2: str
    start_date: datetime
    expected_end_date: Optional[datetime] = None
    message: str

class CounterOfferRespond(BaseModel):
    decision: str  # "accept" | "reject"

class CounterOfferOut(BaseModel):
    id: int
    session_id: int
    counter_offered_by: int
    skill1_id: int
    description_of_service1: str
    skill2_id: int
    description_of_service2: str
    start_date: datetime
    expected_end_date: Optional[datetime] = None
    message: str
    status: str
    responded_by: Optional[int] = None
    responded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

# ======================
# COMPLETION & PROGRESS
# ======================

class CompletionRequestCreate(BaseModel):
    request_for_user: str = "both"

class CompletionResolve(BaseModel):
    decision: str  # "approved" | "rejected"
    rejection_reason: Optional[str] = None

class CompletionRequestOut(BaseModel):
    id: int
    session_id: int
    requested_by: int
    request_for_user: str
    status: str
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[int] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProgressUpdate(BaseModel):
    completion_percentage: Optional[float] = None
    status: Optional[str] = None
    notes: Optional[str] = None

class ProgressOut(BaseModel):
    id: int
    session_id: int
    user_id: int
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    completion_percentage: int
    status: str
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

# ======================
# CANCELLATION & DISPUTES
# ======================

class CancelRequestCreate(BaseModel):
    reason: str = Field(..., max_length=100)
    description: str
    evidence_files: List[str] = []

class CancelRespond(BaseModel):
    action: str  # "agree" | "dispute"
    response_description: Optional[str] = None
    response_evidence_files: List[str] = []
    work_completion_percentage: Optional[float] = None

class DisputeResolve(BaseModel):
    resolution: str  # "canceled" | "partial_completion" | "continued"
    note: Optional[str] = None

class CancelRequestOut(BaseModel):
    id: int
    session_id: int
    initiator_id: int
    reason: str
    description: str
    evidence_files: Optional[List[str]] = None
    response_status: str
    responder_id: Optional[int] = None
    response_description: Optional[str] = None
    response_evidence_files: Optional[List[str]] = None
    work_completion_percentage: Optional[int] = None
    responded_at: Optional[datetime] = None
    resolution: str
    resolved_by: Optional[int] = None
    resolution_note: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
