"""Service layer package."""

__all__ = [
    "access_service",
    "auth_service",
    "connection_manager",
    "notification_service",
    "onboarding_service",
    "profile_service",
    "review_service",
    "storage_service",
    "submission_store",
    "verification_service",
]
