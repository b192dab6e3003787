import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import RequestType
from app.core.i18n import t
from app.models.user import User
from app.services import storage_service
from app.services.onboarding_service import OnboardingService
from app.services.submission_store import SubmissionStore
from app.services.verification_service import IncomingFile, generic_error
from app.utils.errors import RemoteCallError, ValidationFailedError

logger = logging.getLogger(__name__)


class ProfileService:
    @staticmethod
    def get_profile(db: Session, user: User) -> dict:
        return {
            "id": user.id,
            "email": user.email,
            "nickname": user.nickname,
            "gender": user.gender,
            "birthdate": user.birthdate,
            "city": user.city,
            "country_code": user.country_code,
            "bio": user.bio,
            "job": user.job,
            "education": user.education,
            "is_verified": bool(user.is_verified),
            "onboarding_completed": bool(user.onboarding_completed),
            "onboarding_step": user.onboarding_step,
            "photos": [p.url for p in user.photos],
            "interests": [i.interest for i in user.interests],
            "language_skills": {s.language_code: s.proficiency for s in user.language_skills},
            "bio_pending_review": SubmissionStore.has_pending_bio(db, user.id),
        }

    @staticmethod
    def request_bio_update(db: Session, user: User, bio: str, language: str) -> dict:
        """Queue a bio change for review; the visible bio stays as is until approved."""
        try:
            request_id = SubmissionStore.create_verification_request(
                db,
                user.id,
                RequestType.BIO_UPDATE,
                {"proposed_bio": bio, "display_name": user.nickname},
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error creating bio update request for user {user.id}: {e}")
            raise RemoteCallError(generic_error(language))
        return {
            "request_id": request_id,
            "bio": user.bio,
            "bio_pending_review": True,
            "message": t("profile.bio_pending_review", language),
        }

    @staticmethod
    def request_photo_update(db: Session, user: User, photo: IncomingFile, language: str) -> dict:
        accepted = OnboardingService.store_photos(user, [photo], 1, language)
        if not accepted:
            raise ValidationFailedError(t("onboarding.image_required", language))
        uploaded = accepted[0]

        try:
            request_id = SubmissionStore.create_verification_request(
                db,
                user.id,
                RequestType.PROFILE_PHOTO,
                {
                    "photo_url": uploaded.url,
                    "photo_path": uploaded.storage_path,
                    "display_name": user.nickname,
                },
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                f"Error creating photo request for user {user.id}; "
                f"orphaned artifact {settings.PROFILE_PHOTO_BUCKET}/{uploaded.storage_path}: {e}"
            )
            raise RemoteCallError(generic_error(language))
        return {
            "request_id": request_id,
            "photo_url": uploaded.url,
            "message": t("profile.photo_pending_review", language),
        }

    @staticmethod
    def delete_account(db: Session, user: User) -> None:
        """Delete the user and every owned row; stored files are removed best-effort."""
        artifacts = [(settings.PROFILE_PHOTO_BUCKET, p.storage_path) for p in user.photos if p.storage_path]
        artifacts += [
            (settings.PROFILE_PHOTO_BUCKET, r.photo_path)
            for r in user.verification_requests
            if r.photo_path
        ]
        artifacts += [
            (settings.IDENTITY_DOCUMENT_BUCKET, v.id_front_path)
            for v in user.identity_verifications
            if v.id_front_path
        ]

        user_id = user.id
        db.delete(user)
        db.commit()
        logger.info(f"Deleted account {user_id}")

        for bucket, path in dict.fromkeys(artifacts):
            try:
                storage_service.delete(bucket, path)
            except storage_service.StorageError as e:
                logger.warning(f"Could not delete {bucket}/{path} for user {user_id}: {e}")
