from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from app.core.constants import DocType, Nationality
from app.core.database import get_db
from app.dependencies.auth import get_current_user_model
from app.dependencies.language import get_language
from app.dependencies.rate_limit import rate_limit
from app.models.user import User
from app.schemas.common import SuccessResponse
from app.schemas.verification import IdentitySubmitResponse, VerificationStatusResponse
from app.services.verification_service import IncomingFile, VerificationService
from app.utils.helpers import format_response

router = APIRouter(prefix="/verification", tags=["verification"])


@router.post("/identity", status_code=201, response_model=SuccessResponse[IdentitySubmitResponse])
async def submit_identity(
    doc_type: DocType = Form(...),
    country_code: Optional[Nationality] = Form(None),
    document: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user_model),
    db: Session = Depends(get_db),
    language: str = Depends(get_language),
    _: None = Depends(rate_limit),
):
    """Re-submit an identity document outside onboarding."""
    incoming = None
    if document is not None:
        incoming = IncomingFile(
            filename=document.filename,
            content_type=document.content_type,
            data=await document.read(),
        )
    nationality = country_code or user.country_code
    verification_id = VerificationService.resubmit_identity(
        db, user, doc_type, nationality, incoming, language
    )
    return format_response({"verification_id": verification_id, "verification_status": "in_review"})


@router.get("/status", response_model=SuccessResponse[VerificationStatusResponse])
async def get_status(
    user: User = Depends(get_current_user_model),
    db: Session = Depends(get_db),
):
    return format_response(VerificationService.status(db, user))
