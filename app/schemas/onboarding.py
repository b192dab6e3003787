"""Onboarding wizard request/response schemas."""
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from app.core.constants import EducationLevel, Gender, Language, Nationality, Proficiency


class OnboardingStatusResponse(BaseModel):
    onboarding_step: int
    onboarding_completed: bool
    is_verified: bool
    nickname: Optional[str] = None
    country_code: Optional[str] = None
    gender: Optional[str] = None
    birthdate: Optional[date] = None
    city: Optional[str] = None
    bio: Optional[str] = None
    photo_count: int = 0


class StepUpdateRequest(BaseModel):
    step: int = Field(..., ge=1, le=5)


class UploadedPhoto(BaseModel):
    url: str
    storage_path: str


class PhotoUploadResponse(BaseModel):
    photos: list[UploadedPhoto]
    skipped: int


class BasicInfoRequest(BaseModel):
    nationality: Nationality
    name: str = Field(..., min_length=1, max_length=100)
    gender: Gender
    birthdate: date
    city: str = Field(..., min_length=1, max_length=100)


class QuestionsRequest(BaseModel):
    nationality: Nationality
    job: Optional[str] = Field(None, max_length=100)
    education: Optional[EducationLevel] = None
    bio: Optional[str] = Field(None, max_length=1000)
    interests: list[str] = []
    language_skills: dict[Language, Proficiency] = {}


class OnboardingProfile(BasicInfoRequest):
    """Everything buffered by steps 1-4, sent with the terminal step."""
    photos: list[UploadedPhoto] = []
    bio: Optional[str] = Field(None, max_length=1000)


class VerificationSubmitResponse(BaseModel):
    verification_id: int
    onboarding_step: int
    onboarding_completed: bool
