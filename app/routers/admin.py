"""Admin review queue endpoints."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.constants import ReviewKind
from app.core.database import get_db
from app.dependencies.auth import get_current_admin
from app.dependencies.language import get_language
from app.dependencies.rate_limit import rate_limit
from app.schemas.admin import DecisionResponse, RejectRequest, ReviewGroup, ReviewItem
from app.schemas.common import SuccessResponse
from app.services.connection_manager import manager
from app.services.review_service import ReviewOutcome, ReviewService
from app.utils.helpers import format_response

router = APIRouter(prefix="/admin", tags=["admin"])


def _decision(kind: ReviewKind, outcome: ReviewOutcome) -> dict:
    return {
        "id": outcome.submission.id,
        "kind": kind.value,
        "status": outcome.submission.status,
        "rejection_reason": outcome.submission.rejection_reason,
        "notified": outcome.notification is not None,
    }


@router.get("/verifications", response_model=SuccessResponse[list[ReviewItem]])
async def list_pending(
    type: ReviewKind = Query(ReviewKind.IDENTITY),
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    return format_response(ReviewService.list_pending(db, type))


@router.get("/verifications/grouped", response_model=SuccessResponse[list[ReviewGroup]])
async def list_grouped(
    type: ReviewKind = Query(ReviewKind.PROFILE_PHOTO),
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return format_response(ReviewService.list_grouped(db, type))


@router.post("/verifications/{kind}/{submission_id}/approve", response_model=SuccessResponse[DecisionResponse])
async def approve(
    kind: ReviewKind,
    submission_id: int,
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db),
    language: str = Depends(get_language),
):
    outcome = ReviewService.approve(db, current_admin["user_id"], kind, submission_id, language)
    await manager.publish_notification(outcome.notification)
    return format_response(_decision(kind, outcome))


@router.post("/verifications/{kind}/{submission_id}/reject", response_model=SuccessResponse[DecisionResponse])
async def reject(
    kind: ReviewKind,
    submission_id: int,
    payload: RejectRequest,
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db),
    language: str = Depends(get_language),
):
    outcome = ReviewService.reject(
        db, current_admin["user_id"], kind, submission_id, payload.reason, language
    )
    await manager.publish_notification(outcome.notification)
    return format_response(_decision(kind, outcome))
