import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import DocType, IdentityStatus, Nationality
from app.core.i18n import t
from app.models.user import User
from app.services import storage_service
from app.services.submission_store import SubmissionStore
from app.utils.errors import AlreadyVerifiedError, RemoteCallError, ValidationFailedError
from app.utils.helpers import artifact_path
from app.utils.validators import doc_type_allowed, is_image

logger = logging.getLogger(__name__)


@dataclass
class IncomingFile:
    """An uploaded file already read into memory."""
    filename: Optional[str]
    content_type: Optional[str]
    data: bytes


def generic_error(language: str) -> str:
    return f"{t('error.generic', language)} {t('error.try_again', language)}"


class VerificationService:
    @staticmethod
    def validate_document(
        nationality: Nationality,
        doc_type: DocType,
        document: Optional[IncomingFile],
        language: str,
    ) -> None:
        try:
            allowed = doc_type_allowed(nationality, doc_type)
        except ValueError:
            allowed = False
        if not allowed:
            raise ValidationFailedError(t("onboarding.invalid_doc_type", language))
        if not document or not document.data or not is_image(document.filename, document.content_type):
            raise ValidationFailedError(t("onboarding.image_required", language))

    @staticmethod
    def submit_identity(
        db: Session,
        user: User,
        doc_type: DocType,
        country_code: str,
        document: IncomingFile,
        language: str = settings.DEFAULT_LANGUAGE,
    ) -> int:
        """Upload the document, then insert a ``submitted`` verification.

        The two steps are independent: an insert failing after a successful
        upload leaves the stored artifact orphaned.
        """
        VerificationService.validate_document(country_code, doc_type, document, language)

        path = artifact_path(user.id, document.filename)
        try:
            ref = storage_service.upload(
                settings.IDENTITY_DOCUMENT_BUCKET,
                path,
                document.data,
                document.content_type,
            )
        except storage_service.StorageError as e:
            logger.error(f"Identity document upload failed for user {user.id}: {e}")
            raise RemoteCallError(generic_error(language))

        try:
            return SubmissionStore.create_identity_verification(
                db,
                user.id,
                DocType(doc_type).value,
                Nationality(country_code).value,
                ref,
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                f"Identity verification insert failed for user {user.id}; "
                f"orphaned artifact {settings.IDENTITY_DOCUMENT_BUCKET}/{ref}: {e}"
            )
            raise RemoteCallError(generic_error(language))

    @staticmethod
    def resubmit_identity(
        db: Session,
        user: User,
        doc_type: DocType,
        country_code: str,
        document: IncomingFile,
        language: str = settings.DEFAULT_LANGUAGE,
    ) -> int:
        if user.is_verified:
            raise AlreadyVerifiedError(t("verify.already_verified", language))
        return VerificationService.submit_identity(db, user, doc_type, country_code, document, language)

    @staticmethod
    def status(db: Session, user: User) -> dict:
        latest = SubmissionStore.latest_identity(db, user.id)
        if latest is None:
            status = "none"
        elif latest.status == IdentityStatus.SUBMITTED.value:
            status = "in_review"
        else:
            status = latest.status
        return {
            "is_verified": bool(user.is_verified),
            "verification_status": status,
            "rejection_reason": latest.rejection_reason if latest else None,
        }
