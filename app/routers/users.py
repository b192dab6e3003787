"""Current user's profile, profile edits and feature access."""
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies.auth import get_current_user, get_current_user_model
from app.dependencies.language import get_language
from app.models.user import User
from app.schemas.common import SuccessResponse
from app.schemas.user import (
    AccessResponse,
    BioUpdateRequest,
    BioUpdateResponse,
    PhotoUpdateResponse,
    ProfileResponse,
)
from app.services.access_service import AccessService
from app.services.profile_service import ProfileService
from app.services.verification_service import IncomingFile
from app.utils.helpers import format_response

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=SuccessResponse[ProfileResponse])
async def get_me(
    user: User = Depends(get_current_user_model),
    db: Session = Depends(get_db),
):
    return format_response(ProfileService.get_profile(db, user))


@router.put("/me/bio", response_model=SuccessResponse[BioUpdateResponse])
async def update_bio(
    payload: BioUpdateRequest,
    user: User = Depends(get_current_user_model),
    db: Session = Depends(get_db),
    language: str = Depends(get_language),
):
    """Submit a bio change for review. The current bio stays visible until approved."""
    return format_response(ProfileService.request_bio_update(db, user, payload.bio, language))


@router.post("/me/profile-photo", status_code=201, response_model=SuccessResponse[PhotoUpdateResponse])
async def update_profile_photo(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user_model),
    db: Session = Depends(get_db),
    language: str = Depends(get_language),
):
    photo = IncomingFile(filename=file.filename, content_type=file.content_type, data=await file.read())
    return format_response(ProfileService.request_photo_update(db, user, photo, language))


@router.get("/me/access", response_model=SuccessResponse[AccessResponse])
async def get_access(
    current_user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return format_response(AccessService.summary(db, current_user["user_id"]))


@router.delete("/me")
async def delete_me(
    user: User = Depends(get_current_user_model),
    db: Session = Depends(get_db),
):
    ProfileService.delete_account(db, user)
    return format_response({"message": "Account deleted"})
