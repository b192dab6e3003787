from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.i18n import t
from app.dependencies.auth import get_current_user
from app.dependencies.language import get_language
from app.schemas.common import SuccessResponse
from app.schemas.notification import MarkAllReadResponse, NotificationItem, NotificationListResponse
from app.services.notification_service import NotificationService
from app.utils.errors import NotFoundError
from app.utils.helpers import format_response

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=SuccessResponse[NotificationListResponse])
async def list_notifications(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    current_user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user_id = current_user["user_id"]
    items, total = NotificationService.list_for_user(db, user_id, skip, limit)
    return format_response(
        {
            "items": [NotificationItem.model_validate(n).model_dump() for n in items],
            "total": total,
            "unread": NotificationService.unread_count(db, user_id),
        }
    )


@router.post("/read-all", response_model=SuccessResponse[MarkAllReadResponse])
async def mark_all_read(
    current_user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    updated = NotificationService.mark_all_read(db, current_user["user_id"])
    return format_response({"updated": updated})


@router.post("/{notification_id}/read", response_model=SuccessResponse[NotificationItem])
async def mark_read(
    notification_id: int,
    current_user=Depends(get_current_user),
    db: Session = Depends(get_db),
    language: str = Depends(get_language),
):
    notification = NotificationService.mark_read(db, current_user["user_id"], notification_id)
    if not notification:
        raise NotFoundError(t("error.not_found", language))
    return format_response(NotificationItem.model_validate(notification).model_dump())
