"""Admin review queue schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ReviewItem(BaseModel):
    id: int
    kind: str
    user_id: int
    nickname: Optional[str] = None
    status: str
    # identity
    doc_type: Optional[str] = None
    country_code: Optional[str] = None
    submitted_at: Optional[datetime] = None
    document_url: Optional[str] = None
    # profile_photo / bio_update
    created_at: Optional[datetime] = None
    photo_url: Optional[str] = None
    proposed_bio: Optional[str] = None
    current_bio: Optional[str] = None
    user_display_name: Optional[str] = None


class ReviewGroup(BaseModel):
    user_id: int
    nickname: Optional[str] = None
    requests: list[ReviewItem]


class RejectRequest(BaseModel):
    reason: str = ""


class DecisionResponse(BaseModel):
    id: int
    kind: str
    status: str
    rejection_reason: Optional[str] = None
    notified: bool
