"""Feature availability derived from identity verification state.

Chat requires a decided, approved verification. Recommendations are also
open while a verification is awaiting review.
"""
from sqlalchemy.orm import Session

from app.models.user import User
from app.services.submission_store import SubmissionStore


class AccessService:
    @staticmethod
    def can_access_chat(db: Session, user_id: int) -> bool:
        user = db.query(User).filter(User.id == user_id).first()
        return bool(user and user.is_verified)

    @staticmethod
    def can_access_recommendations(db: Session, user_id: int) -> bool:
        if AccessService.can_access_chat(db, user_id):
            return True
        return SubmissionStore.outstanding_identity(db, user_id) is not None

    @staticmethod
    def summary(db: Session, user_id: int) -> dict:
        return {
            "can_access_chat": AccessService.can_access_chat(db, user_id),
            "can_access_recommendations": AccessService.can_access_recommendations(db, user_id),
        }
