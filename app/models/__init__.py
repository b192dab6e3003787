"""ORM models for users, submissions and notifications."""

__all__ = [
    "user",
    "admin",
    "session",
    "profile",
    "verification",
    "notification",
    "audit",
]
