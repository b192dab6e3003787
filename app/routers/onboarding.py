"""Onboarding wizard endpoints.

Steps 1-3 are buffered client-side between requests; the server only
validates them. Questions write through, and the terminal step receives the
whole buffered profile alongside the identity document.
"""
import json
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.constants import DocType
from app.core.database import get_db
from app.core.i18n import t
from app.dependencies.auth import get_current_user_model
from app.dependencies.language import get_language
from app.models.user import User
from app.schemas.common import SuccessResponse
from app.schemas.onboarding import (
    BasicInfoRequest,
    OnboardingProfile,
    OnboardingStatusResponse,
    PhotoUploadResponse,
    QuestionsRequest,
    StepUpdateRequest,
    VerificationSubmitResponse,
)
from app.services.onboarding_service import (
    DraftPhoto,
    OnboardingDraft,
    OnboardingService,
    OnboardingWizard,
)
from app.services.verification_service import IncomingFile
from app.utils.errors import ValidationFailedError
from app.utils.helpers import format_response

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


def _parse_profile(raw: str, language: str) -> OnboardingProfile:
    try:
        return OnboardingProfile.model_validate(json.loads(raw))
    except (ValueError, ValidationError):
        raise ValidationFailedError(t("onboarding.required_field", language, field="profile"))


def _to_draft(profile: OnboardingProfile) -> OnboardingDraft:
    return OnboardingDraft(
        nationality=profile.nationality,
        photos=[DraftPhoto(url=p.url, storage_path=p.storage_path) for p in profile.photos],
        name=profile.name,
        gender=profile.gender,
        birthdate=profile.birthdate,
        city=profile.city,
        bio=profile.bio,
    )


@router.get("/status", response_model=SuccessResponse[OnboardingStatusResponse])
async def get_status(user: User = Depends(get_current_user_model)):
    return format_response(OnboardingService.status(user))


@router.post("/step", response_model=SuccessResponse[OnboardingStatusResponse])
async def set_step(
    payload: StepUpdateRequest,
    user: User = Depends(get_current_user_model),
    db: Session = Depends(get_db),
    language: str = Depends(get_language),
):
    user = OnboardingService.set_step(db, user, payload.step, language)
    return format_response(OnboardingService.status(user))


@router.post("/photos", status_code=201, response_model=SuccessResponse[PhotoUploadResponse])
async def upload_photos(
    files: list[UploadFile] = File(...),
    user: User = Depends(get_current_user_model),
    language: str = Depends(get_language),
):
    incoming = [
        IncomingFile(filename=f.filename, content_type=f.content_type, data=await f.read())
        for f in files
    ]
    accepted = OnboardingService.upload_photos(user, incoming, language)
    return format_response(
        {
            "photos": [{"url": p.url, "storage_path": p.storage_path} for p in accepted],
            "skipped": len(incoming) - len(accepted),
        }
    )


@router.delete("/photos", response_model=SuccessResponse[OnboardingStatusResponse])
async def delete_photo(
    storage_path: str = Query(...),
    user: User = Depends(get_current_user_model),
    db: Session = Depends(get_db),
    language: str = Depends(get_language),
):
    """Discard an uploaded photo the applicant removed from the draft."""
    OnboardingService.delete_photo(db, user, storage_path, language)
    return format_response(OnboardingService.status(user))


@router.post("/basic-info")
async def submit_basic_info(
    payload: BasicInfoRequest,
    user: User = Depends(get_current_user_model),
    language: str = Depends(get_language),
):
    """Validate step 3; nothing is written."""
    OnboardingService.validate_basic_info(
        payload.nationality, payload.name, payload.birthdate, payload.city, language
    )
    return format_response({"valid": True})


@router.post("/questions", response_model=SuccessResponse[OnboardingStatusResponse])
async def submit_questions(
    payload: QuestionsRequest,
    user: User = Depends(get_current_user_model),
    db: Session = Depends(get_db),
    language: str = Depends(get_language),
):
    user = OnboardingService.save_questions(
        db,
        user,
        payload.nationality,
        payload.job,
        payload.education,
        payload.bio,
        payload.interests,
        payload.language_skills,
        language,
    )
    return format_response(OnboardingService.status(user))


@router.post("/verification", status_code=201, response_model=SuccessResponse[VerificationSubmitResponse])
async def submit_verification(
    profile: str = Form(...),
    doc_type: DocType = Form(...),
    document: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user_model),
    db: Session = Depends(get_db),
    language: str = Depends(get_language),
):
    wizard = OnboardingWizard.restore(db, user, _to_draft(_parse_profile(profile, language)), language)
    incoming = None
    if document is not None:
        incoming = IncomingFile(
            filename=document.filename,
            content_type=document.content_type,
            data=await document.read(),
        )
    verification_id = wizard.submit_verification(doc_type, incoming)
    return format_response(
        {
            "verification_id": verification_id,
            "onboarding_step": user.onboarding_step,
            "onboarding_completed": bool(user.onboarding_completed),
        }
    )


@router.post("/skip-verification", response_model=SuccessResponse[OnboardingStatusResponse])
async def skip_verification(
    payload: OnboardingProfile,
    user: User = Depends(get_current_user_model),
    db: Session = Depends(get_db),
    language: str = Depends(get_language),
):
    wizard = OnboardingWizard.restore(db, user, _to_draft(payload), language)
    user = wizard.skip_verification()
    return format_response(OnboardingService.status(user))
