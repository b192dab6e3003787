"""Onboarding wizard: nationality, photos, basic info, questions, verification.

The wizard buffers answers in an :class:`OnboardingDraft` that only lives for
one wizard session. Questions write through immediately; the terminal step
commits the buffered profile in a single user update and then submits an
identity verification. Writes are one-way: moving back only lowers the
stored step marker.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import (
    MINIMUM_AGE,
    ONBOARDING_TOTAL_STEPS,
    ONBOARDING_VERIFICATION_STEP,
    DocType,
    EducationLevel,
    Gender,
    Language,
    Nationality,
    Proficiency,
)
from app.core.i18n import t
from app.models.profile import LanguageSkill, ProfilePhoto, UserInterest
from app.models.user import User
from app.services import storage_service
from app.services.verification_service import IncomingFile, VerificationService, generic_error
from app.utils.errors import RemoteCallError, ValidationFailedError
from app.utils.helpers import artifact_path
from app.utils.validators import is_image, meets_minimum_age, unknown_interests

logger = logging.getLogger(__name__)

STEP_NATIONALITY = 1
STEP_PHOTOS = 2
STEP_BASIC_INFO = 3
STEP_QUESTIONS = 4

ONBOARDING_PHOTO_FOLDER = "onboarding"


@dataclass
class DraftPhoto:
    url: str
    storage_path: str


@dataclass
class OnboardingDraft:
    nationality: Optional[Nationality] = None
    photos: list[DraftPhoto] = field(default_factory=list)
    name: Optional[str] = None
    gender: Optional[Gender] = None
    birthdate: Optional[date] = None
    city: Optional[str] = None
    job: Optional[str] = None
    education: Optional[EducationLevel] = None
    bio: Optional[str] = None
    interests: list[str] = field(default_factory=list)
    language_skills: dict[Language, Proficiency] = field(default_factory=dict)


class OnboardingService:
    @staticmethod
    def status(user: User) -> dict:
        return {
            "onboarding_step": user.onboarding_step,
            "onboarding_completed": bool(user.onboarding_completed),
            "is_verified": bool(user.is_verified),
            "nickname": user.nickname,
            "country_code": user.country_code,
            "gender": user.gender,
            "birthdate": user.birthdate,
            "city": user.city,
            "bio": user.bio,
            "photo_count": len(user.photos),
        }

    @staticmethod
    def set_step(db: Session, user: User, step: int, language: str) -> User:
        step = max(1, min(step, ONBOARDING_TOTAL_STEPS))
        try:
            user.onboarding_step = step
            db.commit()
            db.refresh(user)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error updating onboarding step for user {user.id}: {e}")
            raise RemoteCallError(generic_error(language))
        return user

    @staticmethod
    def validate_basic_info(
        nationality: Optional[Nationality],
        name: Optional[str],
        birthdate: Optional[date],
        city: Optional[str],
        language: str,
        today: Optional[date] = None,
    ) -> None:
        for label, value in (("nationality", nationality), ("name", name), ("birthdate", birthdate), ("city", city)):
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationFailedError(t("onboarding.required_field", language, field=label))
        nationality = Nationality(nationality)
        if not meets_minimum_age(nationality, birthdate, today):
            raise ValidationFailedError(
                t("onboarding.age_restriction", language, age=MINIMUM_AGE[nationality])
            )

    @staticmethod
    def photo_prefix(user: User) -> str:
        return f"{user.id}/{ONBOARDING_PHOTO_FOLDER}/"

    @staticmethod
    def stored_photo_paths(user: User, language: str) -> list[str]:
        """Onboarding photos already in storage for ``user``, committed or not."""
        try:
            return storage_service.list_paths(settings.PROFILE_PHOTO_BUCKET, OnboardingService.photo_prefix(user))
        except storage_service.StorageError as e:
            logger.error(f"Error listing photos for user {user.id}: {e}")
            raise RemoteCallError(generic_error(language))

    @staticmethod
    def upload_photos(user: User, files: list[IncomingFile], language: str) -> list[DraftPhoto]:
        """Store accepted onboarding images, up to ONBOARDING_MAX_PHOTOS per user."""
        slots = settings.ONBOARDING_MAX_PHOTOS - len(OnboardingService.stored_photo_paths(user, language))
        if slots <= 0:
            raise ValidationFailedError(
                t("onboarding.photo_limit", language, count=settings.ONBOARDING_MAX_PHOTOS)
            )
        return OnboardingService.store_photos(user, files, slots, language, ONBOARDING_PHOTO_FOLDER)

    @staticmethod
    def store_photos(
        user: User,
        files: list[IncomingFile],
        limit: int,
        language: str,
        folder: Optional[str] = None,
    ) -> list[DraftPhoto]:
        """Upload at most ``limit`` images; non-images and oversize files are skipped."""
        accepted = []
        for f in files:
            if len(accepted) >= limit:
                break
            if not is_image(f.filename, f.content_type):
                logger.info(f"Skipping non-image upload '{f.filename}' for user {user.id}")
                continue
            if len(f.data) > settings.MAX_UPLOAD_BYTES:
                logger.info(f"Skipping oversize upload '{f.filename}' ({len(f.data)} bytes)")
                continue
            path = artifact_path(user.id, f.filename, folder)
            try:
                storage_service.upload(settings.PROFILE_PHOTO_BUCKET, path, f.data, f.content_type)
            except storage_service.StorageError as e:
                logger.error(f"Error uploading photo for user {user.id}: {e}")
                raise RemoteCallError(generic_error(language))
            accepted.append(
                DraftPhoto(url=storage_service.public_url(settings.PROFILE_PHOTO_BUCKET, path), storage_path=path)
            )
        return accepted

    @staticmethod
    def verify_draft_photos(user: User, photos: list[DraftPhoto], language: str) -> list[DraftPhoto]:
        """Keep only photos this user uploaded; URLs are rebuilt from the storage path."""
        stored = set(OnboardingService.stored_photo_paths(user, language))
        verified = []
        for path in dict.fromkeys(p.storage_path for p in photos):
            if path not in stored:
                logger.warning(f"User {user.id} referenced a photo it does not own: {path!r}")
                raise ValidationFailedError(t("onboarding.invalid_photo", language))
            verified.append(
                DraftPhoto(url=storage_service.public_url(settings.PROFILE_PHOTO_BUCKET, path), storage_path=path)
            )
        return verified

    @staticmethod
    def delete_photo(db: Session, user: User, storage_path: str, language: str) -> None:
        """Discard an uploaded onboarding photo and free its slot."""
        if storage_path not in OnboardingService.stored_photo_paths(user, language):
            raise ValidationFailedError(t("onboarding.photo_not_found", language))
        try:
            db.query(ProfilePhoto).filter(
                ProfilePhoto.user_id == user.id,
                ProfilePhoto.storage_path == storage_path,
            ).delete(synchronize_session=False)
            db.commit()
            db.refresh(user)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error removing photo {storage_path} for user {user.id}: {e}")
            raise RemoteCallError(generic_error(language))
        try:
            storage_service.delete(settings.PROFILE_PHOTO_BUCKET, storage_path)
        except storage_service.StorageError as e:
            logger.error(f"Error deleting photo {storage_path} for user {user.id}: {e}")
            raise RemoteCallError(generic_error(language))

    @staticmethod
    def save_questions(
        db: Session,
        user: User,
        nationality: Nationality,
        job: Optional[str],
        education: Optional[EducationLevel],
        bio: Optional[str],
        interests: list[str],
        language_skills: dict[Language, Proficiency],
        language: str,
    ) -> User:
        if unknown_interests(nationality, interests):
            raise ValidationFailedError(t("onboarding.invalid_interest", language))

        try:
            user.job = job
            user.education = EducationLevel(education).value if education else None
            user.bio = bio
            user.onboarding_step = ONBOARDING_VERIFICATION_STEP

            db.query(UserInterest).filter(UserInterest.user_id == user.id).delete(synchronize_session=False)
            db.query(LanguageSkill).filter(LanguageSkill.user_id == user.id).delete(synchronize_session=False)
            for interest in dict.fromkeys(interests):
                db.add(UserInterest(user_id=user.id, interest=interest))
            for code, proficiency in language_skills.items():
                db.add(
                    LanguageSkill(
                        user_id=user.id,
                        language_code=Language(code).value,
                        proficiency=Proficiency(proficiency).value,
                    )
                )
            db.commit()
            db.refresh(user)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error saving onboarding answers for user {user.id}: {e}")
            raise RemoteCallError(generic_error(language))
        return user

    @staticmethod
    def commit_profile(
        db: Session,
        user: User,
        draft: OnboardingDraft,
        completed: bool,
        language: str,
    ) -> User:
        """Write every buffered field to the user in one update."""
        try:
            user.nickname = draft.name.strip()
            user.country_code = Nationality(draft.nationality).value
            user.gender = Gender(draft.gender).value if draft.gender else None
            user.birthdate = draft.birthdate
            user.city = draft.city.strip()
            if draft.bio is not None:
                user.bio = draft.bio
            user.onboarding_step = ONBOARDING_VERIFICATION_STEP
            user.onboarding_completed = completed

            known = {p.storage_path for p in user.photos}
            order = len(user.photos)
            for photo in draft.photos:
                if photo.storage_path in known:
                    continue
                db.add(
                    ProfilePhoto(
                        user_id=user.id,
                        url=storage_service.public_url(settings.PROFILE_PHOTO_BUCKET, photo.storage_path),
                        storage_path=photo.storage_path,
                        sort_order=order,
                    )
                )
                order += 1
            db.commit()
            db.refresh(user)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error committing onboarding profile for user {user.id}: {e}")
            raise RemoteCallError(generic_error(language))
        logger.info(f"Onboarding profile committed for user {user.id} (completed={completed})")
        return user


class OnboardingWizard:
    """Step sequencer for one applicant's wizard session."""

    def __init__(
        self,
        db: Session,
        user: User,
        language: str = settings.DEFAULT_LANGUAGE,
        draft: Optional[OnboardingDraft] = None,
        step: int = STEP_NATIONALITY,
    ):
        self.db = db
        self.user = user
        self.language = language
        self.draft = draft or OnboardingDraft()
        self.step = step
        self.verification_id: Optional[int] = None
        self.finished = False

    @classmethod
    def restore(
        cls,
        db: Session,
        user: User,
        draft: OnboardingDraft,
        language: str = settings.DEFAULT_LANGUAGE,
        today: Optional[date] = None,
    ) -> "OnboardingWizard":
        """Rebuild a wizard at the terminal step from a client-held draft.

        The draft is untrusted: basic info is re-validated and every photo
        must be one this user uploaded.
        """
        OnboardingService.validate_basic_info(
            draft.nationality, draft.name, draft.birthdate, draft.city, language, today
        )
        draft.photos = OnboardingService.verify_draft_photos(user, draft.photos, language)
        if len(draft.photos) < settings.ONBOARDING_MIN_PHOTOS:
            raise ValidationFailedError(
                t("onboarding.photos_required", language, count=settings.ONBOARDING_MIN_PHOTOS)
            )
        return cls(db, user, language, draft=draft, step=ONBOARDING_VERIFICATION_STEP)

    # Step 1
    def select_nationality(self, nationality: Nationality) -> int:
        self._require_step(STEP_NATIONALITY)
        self.draft.nationality = Nationality(nationality)
        self.step = STEP_PHOTOS
        return self.step

    # Step 2
    def add_photos(self, files: list[IncomingFile]) -> list[DraftPhoto]:
        self._require_step(STEP_PHOTOS)
        accepted = OnboardingService.upload_photos(self.user, files, self.language)
        self.draft.photos.extend(accepted)
        return accepted

    def remove_photo(self, index: int) -> None:
        self._require_step(STEP_PHOTOS)
        if not 0 <= index < len(self.draft.photos):
            raise ValidationFailedError(t("onboarding.photo_not_found", self.language))
        photo = self.draft.photos[index]
        OnboardingService.delete_photo(self.db, self.user, photo.storage_path, self.language)
        del self.draft.photos[index]

    def complete_photos(self) -> int:
        self._require_step(STEP_PHOTOS)
        if len(self.draft.photos) < settings.ONBOARDING_MIN_PHOTOS:
            raise ValidationFailedError(
                t("onboarding.photos_required", self.language, count=settings.ONBOARDING_MIN_PHOTOS)
            )
        self.step = STEP_BASIC_INFO
        return self.step

    # Step 3
    def submit_basic_info(
        self,
        name: str,
        gender: Gender,
        birthdate: date,
        city: str,
        today: Optional[date] = None,
    ) -> int:
        self._require_step(STEP_BASIC_INFO)
        OnboardingService.validate_basic_info(
            self.draft.nationality, name, birthdate, city, self.language, today
        )
        self.draft.name = name.strip()
        self.draft.gender = Gender(gender)
        self.draft.birthdate = birthdate
        self.draft.city = city.strip()
        self.step = STEP_QUESTIONS
        return self.step

    # Step 4
    def submit_questions(
        self,
        job: Optional[str],
        education: Optional[EducationLevel],
        bio: Optional[str],
        interests: list[str],
        language_skills: dict[Language, Proficiency],
    ) -> int:
        self._require_step(STEP_QUESTIONS)
        OnboardingService.save_questions(
            self.db,
            self.user,
            self.draft.nationality,
            job,
            education,
            bio,
            interests,
            language_skills,
            self.language,
        )
        self.draft.job = job
        self.draft.education = education
        self.draft.bio = bio
        self.draft.interests = list(interests)
        self.draft.language_skills = dict(language_skills)
        self.step = ONBOARDING_VERIFICATION_STEP
        return self.step

    # Step 5
    def submit_verification(self, doc_type: DocType, document: IncomingFile) -> int:
        self._require_step(ONBOARDING_VERIFICATION_STEP)
        VerificationService.validate_document(self.draft.nationality, doc_type, document, self.language)
        OnboardingService.commit_profile(self.db, self.user, self.draft, completed=False, language=self.language)
        self.verification_id = VerificationService.submit_identity(
            self.db,
            self.user,
            doc_type,
            Nationality(self.draft.nationality).value,
            document,
            self.language,
        )
        self.finished = True
        return self.verification_id

    def skip_verification(self) -> User:
        self._require_step(ONBOARDING_VERIFICATION_STEP)
        user = OnboardingService.commit_profile(
            self.db, self.user, self.draft, completed=True, language=self.language
        )
        self.finished = True
        return user

    def go_back(self) -> int:
        if self.step <= STEP_NATIONALITY:
            return self.step
        OnboardingService.set_step(self.db, self.user, self.step - 1, self.language)
        self.step -= 1
        return self.step

    def _require_step(self, expected: int) -> None:
        if self.finished:
            raise RuntimeError("Onboarding wizard already finished")
        if self.step != expected:
            raise RuntimeError(f"Wizard is on step {self.step}, not {expected}")
