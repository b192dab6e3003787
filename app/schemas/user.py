"""User profile request/response schemas."""
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


class ProfileResponse(BaseModel):
    id: int
    email: str
    nickname: Optional[str] = None
    gender: Optional[str] = None
    birthdate: Optional[date] = None
    city: Optional[str] = None
    country_code: Optional[str] = None
    bio: Optional[str] = None
    job: Optional[str] = None
    education: Optional[str] = None
    is_verified: bool
    onboarding_completed: bool
    onboarding_step: int
    photos: list[str] = []
    interests: list[str] = []
    language_skills: dict[str, str] = {}
    bio_pending_review: bool = False


class BioUpdateRequest(BaseModel):
    bio: str = Field(..., max_length=1000)


class BioUpdateResponse(BaseModel):
    request_id: int
    bio: Optional[str] = None
    bio_pending_review: bool
    message: str


class PhotoUpdateResponse(BaseModel):
    request_id: int
    photo_url: str
    message: str


class AccessResponse(BaseModel):
    can_access_chat: bool
    can_access_recommendations: bool
