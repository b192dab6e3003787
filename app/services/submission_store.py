"""Durable verification submissions and their lifecycle transitions.

Identity verifications move ``submitted -> approved | rejected``; profile
review requests move ``pending -> approved | rejected``. Both are terminal
once decided; a rejected applicant re-submits by creating a new record.

Deciding an identity record also sets the owner's ``is_verified`` flag in the
same commit, since the access gate reads that flag directly.
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Union

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import (
    IdentityStatus,
    RequestStatus,
    RequestType,
    ReviewKind,
)
from app.core.i18n import t
from app.models.profile import ProfilePhoto
from app.models.user import User
from app.models.verification import IdentityVerification, VerificationRequest
from app.utils.errors import AlreadyDecidedError, NotFoundError, ValidationFailedError

logger = logging.getLogger(__name__)

Submission = Union[IdentityVerification, VerificationRequest]


def _now():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SubmissionStore:
    @staticmethod
    def create_identity_verification(
        db: Session,
        user_id: int,
        doc_type: str,
        country_code: str,
        artifact_ref: str,
    ) -> int:
        outstanding = SubmissionStore.outstanding_identity(db, user_id)
        if outstanding:
            # Not enforced; admins see both and decide each independently
            logger.warning(
                f"User {user_id} already has outstanding identity verification {outstanding.id}"
            )

        now = _now()
        record = IdentityVerification(
            user_id=user_id,
            doc_type=doc_type,
            country_code=country_code,
            id_front_path=artifact_ref,
            status=IdentityStatus.SUBMITTED.value,
            submitted_at=now,
            updated_at=now,
        )
        db.add(record)
        db.commit()
        db.refresh(record)
        logger.info(f"Identity verification {record.id} submitted for user {user_id}")
        return record.id

    @staticmethod
    def create_verification_request(
        db: Session,
        user_id: int,
        type: RequestType,
        payload: Optional[dict] = None,
    ) -> int:
        payload = payload or {}
        request_type = RequestType(type)
        if request_type == RequestType.PROFILE_PHOTO and not payload.get("photo_url"):
            raise ValueError("photo_url is required for profile_photo requests")

        record = VerificationRequest(
            user_id=user_id,
            type=request_type.value,
            photo_url=payload.get("photo_url"),
            photo_path=payload.get("photo_path"),
            proposed_bio=payload.get("proposed_bio"),
            user_display_name=payload.get("display_name"),
            status=RequestStatus.PENDING.value,
        )
        db.add(record)
        db.commit()
        db.refresh(record)
        logger.info(f"Verification request {record.id} ({request_type.value}) created for user {user_id}")
        return record.id

    @staticmethod
    def list_pending(db: Session, kind: ReviewKind) -> list[Submission]:
        kind = ReviewKind(kind)
        if kind == ReviewKind.IDENTITY:
            return (
                db.query(IdentityVerification)
                .filter(IdentityVerification.status == IdentityStatus.SUBMITTED.value)
                .order_by(IdentityVerification.submitted_at.desc(), IdentityVerification.id.desc())
                .all()
            )
        return (
            db.query(VerificationRequest)
            .filter(
                VerificationRequest.type == kind.value,
                VerificationRequest.status == RequestStatus.PENDING.value,
            )
            .order_by(VerificationRequest.created_at.desc(), VerificationRequest.id.desc())
            .all()
        )

    @staticmethod
    def get(db: Session, kind: ReviewKind, submission_id: int) -> Optional[Submission]:
        kind = ReviewKind(kind)
        if kind == ReviewKind.IDENTITY:
            return db.query(IdentityVerification).filter(IdentityVerification.id == submission_id).first()
        return (
            db.query(VerificationRequest)
            .filter(VerificationRequest.id == submission_id, VerificationRequest.type == kind.value)
            .first()
        )

    @staticmethod
    def outstanding_identity(db: Session, user_id: int) -> Optional[IdentityVerification]:
        return (
            db.query(IdentityVerification)
            .filter(
                IdentityVerification.user_id == user_id,
                IdentityVerification.status == IdentityStatus.SUBMITTED.value,
            )
            .order_by(IdentityVerification.submitted_at.desc(), IdentityVerification.id.desc())
            .first()
        )

    @staticmethod
    def latest_identity(db: Session, user_id: int) -> Optional[IdentityVerification]:
        return (
            db.query(IdentityVerification)
            .filter(IdentityVerification.user_id == user_id)
            .order_by(IdentityVerification.submitted_at.desc(), IdentityVerification.id.desc())
            .first()
        )

    @staticmethod
    def has_pending_bio(db: Session, user_id: int) -> bool:
        return (
            db.query(VerificationRequest.id)
            .filter(
                VerificationRequest.user_id == user_id,
                VerificationRequest.type == RequestType.BIO_UPDATE.value,
                VerificationRequest.status == RequestStatus.PENDING.value,
            )
            .first()
            is not None
        )

    @staticmethod
    def update_status(
        db: Session,
        kind: ReviewKind,
        submission_id: int,
        status: str,
        rejection_reason: Optional[str] = None,
        reviewed_by: Optional[int] = None,
        language: str = settings.DEFAULT_LANGUAGE,
    ) -> Submission:
        kind = ReviewKind(kind)
        record = SubmissionStore.get(db, kind, submission_id)
        if not record:
            raise NotFoundError(t("error.not_found", language))

        outstanding = (
            IdentityStatus.SUBMITTED.value if kind == ReviewKind.IDENTITY else RequestStatus.PENDING.value
        )
        if record.status != outstanding:
            raise AlreadyDecidedError(t("admin.already_decided", language))

        if status not in (IdentityStatus.APPROVED.value, IdentityStatus.REJECTED.value):
            raise ValueError(f"Unsupported status transition: {status}")

        reason = (rejection_reason or "").strip()
        if status == IdentityStatus.REJECTED.value and not reason:
            raise ValidationFailedError(t("admin.rejection_reason_required", language))

        now = _now()
        record.status = status
        record.rejection_reason = reason if status == IdentityStatus.REJECTED.value else None
        record.updated_at = now
        record.reviewed_at = now
        record.reviewed_by = reviewed_by

        user = db.query(User).filter(User.id == record.user_id).first()
        if user:
            SubmissionStore._apply_decision(db, kind, record, user)

        db.commit()
        db.refresh(record)
        logger.info(f"{kind.value} submission {submission_id} -> {status}")
        return record

    @staticmethod
    def _apply_decision(db: Session, kind: ReviewKind, record: Submission, user: User) -> None:
        approved = record.status == IdentityStatus.APPROVED.value

        if kind == ReviewKind.IDENTITY:
            user.is_verified = approved
            return

        if not approved:
            return

        if kind == ReviewKind.BIO_UPDATE and record.proposed_bio is not None:
            user.bio = record.proposed_bio
        elif kind == ReviewKind.PROFILE_PHOTO:
            # Approved photo becomes the primary avatar
            for photo in user.photos:
                photo.sort_order += 1
            db.add(
                ProfilePhoto(
                    user_id=user.id,
                    url=record.photo_url,
                    storage_path=record.photo_path,
                    sort_order=0,
                )
            )
