"""Admin review queue over identity, profile-photo and bio submissions."""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import (
    IdentityStatus,
    Nationality,
    NotificationType,
    ReviewKind,
)
from app.core.i18n import t
from app.models.audit import AdminActivityLog
from app.models.notification import Notification
from app.models.user import User
from app.services import storage_service
from app.services.notification_service import NotificationService
from app.services.submission_store import Submission, SubmissionStore
from app.utils.errors import ValidationFailedError

logger = logging.getLogger(__name__)

_OUTCOME_TYPES = {
    (ReviewKind.IDENTITY, True): NotificationType.VERIFY_PASSED,
    (ReviewKind.IDENTITY, False): NotificationType.VERIFY_REJECTED,
    (ReviewKind.PROFILE_PHOTO, True): NotificationType.PROFILE_PHOTO_APPROVED,
    (ReviewKind.PROFILE_PHOTO, False): NotificationType.PROFILE_PHOTO_REJECTED,
    (ReviewKind.BIO_UPDATE, True): NotificationType.BIO_APPROVED,
    (ReviewKind.BIO_UPDATE, False): NotificationType.BIO_REJECTED,
}


@dataclass
class ReviewOutcome:
    submission: Submission
    notification: Optional[Notification]


def _recipient_language(user: Optional[User], fallback: str) -> str:
    if user and user.country_code == Nationality.JP.value:
        return "ja"
    if user and user.country_code == Nationality.KR.value:
        return "ko"
    return fallback


class ReviewService:
    @staticmethod
    def list_pending(db: Session, kind: ReviewKind) -> list[dict]:
        kind = ReviewKind(kind)
        items = SubmissionStore.list_pending(db, kind)
        return [ReviewService._serialize(db, kind, item) for item in items]

    @staticmethod
    def list_grouped(db: Session, kind: ReviewKind) -> list[dict]:
        """Pending items grouped by owning user, newest group first."""
        groups: dict[int, dict] = {}
        for item in ReviewService.list_pending(db, kind):
            group = groups.setdefault(
                item["user_id"],
                {"user_id": item["user_id"], "nickname": item.get("nickname"), "requests": []},
            )
            group["requests"].append(item)
        return list(groups.values())

    @staticmethod
    def _serialize(db: Session, kind: ReviewKind, item: Submission) -> dict:
        user = item.user
        data = {
            "id": item.id,
            "kind": kind.value,
            "user_id": item.user_id,
            "nickname": user.nickname if user else None,
            "status": item.status,
        }
        if kind == ReviewKind.IDENTITY:
            data.update(
                doc_type=item.doc_type,
                country_code=item.country_code,
                submitted_at=item.submitted_at,
                document_url=ReviewService._document_url(item.id_front_path),
            )
        else:
            data.update(
                created_at=item.created_at,
                photo_url=item.photo_url,
                proposed_bio=item.proposed_bio,
                current_bio=user.bio if user else None,
                user_display_name=item.user_display_name,
            )
        return data

    @staticmethod
    def _document_url(path: str) -> Optional[str]:
        try:
            return storage_service.get_signed_url(
                settings.IDENTITY_DOCUMENT_BUCKET,
                path,
                settings.SIGNED_URL_TTL_SECONDS,
            )
        except storage_service.StorageError as e:
            logger.error(f"Could not sign identity document {path}: {e}")
            return None

    @staticmethod
    def approve(
        db: Session,
        admin_id: int,
        kind: ReviewKind,
        submission_id: int,
        language: str = settings.DEFAULT_LANGUAGE,
    ) -> ReviewOutcome:
        kind = ReviewKind(kind)
        record = SubmissionStore.update_status(
            db,
            kind,
            submission_id,
            IdentityStatus.APPROVED.value,
            reviewed_by=admin_id,
            language=language,
        )
        ReviewService._log_activity(db, admin_id, f"{kind.value}:{submission_id}:approved")

        lang = _recipient_language(record.user, language)
        notification_type = _OUTCOME_TYPES[(kind, True)]
        notification = NotificationService.notify(
            db,
            record.user_id,
            notification_type,
            t(f"notify.{notification_type.value}.title", lang),
            t(f"notify.{notification_type.value}.body", lang),
            related_id=record.id,
        )
        return ReviewOutcome(submission=record, notification=notification)

    @staticmethod
    def reject(
        db: Session,
        admin_id: int,
        kind: ReviewKind,
        submission_id: int,
        reason: Optional[str],
        language: str = settings.DEFAULT_LANGUAGE,
    ) -> ReviewOutcome:
        kind = ReviewKind(kind)
        reason = (reason or "").strip()
        if not reason:
            raise ValidationFailedError(t("admin.rejection_reason_required", language))

        record = SubmissionStore.update_status(
            db,
            kind,
            submission_id,
            IdentityStatus.REJECTED.value,
            rejection_reason=reason,
            reviewed_by=admin_id,
            language=language,
        )
        ReviewService._log_activity(db, admin_id, f"{kind.value}:{submission_id}:rejected")

        lang = _recipient_language(record.user, language)
        notification_type = _OUTCOME_TYPES[(kind, False)]
        notification = NotificationService.notify(
            db,
            record.user_id,
            notification_type,
            t(f"notify.{notification_type.value}.title", lang),
            t("notify.rejection_reason", lang, reason=reason),
            related_id=record.id,
        )
        return ReviewOutcome(submission=record, notification=notification)

    @staticmethod
    def _log_activity(db: Session, admin_id: int, activity: str) -> None:
        try:
            db.add(AdminActivityLog(admin_id=str(admin_id), activity=activity))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to record admin activity '{activity}': {e}")
