from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, Text, UniqueConstraint
from sqlalchemy.orm import relationship, validates
from datetime import datetime
from app.core.database import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("oauth_provider", "oauth_subject", name="uq_users_oauth_identity"),
    )

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)

    # OAuth
    oauth_provider = Column(String(50), nullable=True)
    oauth_subject = Column(String(255), nullable=True, index=True)

    # Profile
    nickname = Column(String(100), nullable=True)
    gender = Column(String(20), nullable=True)
    birthdate = Column(Date, nullable=True)
    city = Column(String(100), nullable=True)
    country_code = Column(String(2), nullable=True, index=True)
    bio = Column(Text, nullable=True)
    job = Column(String(100), nullable=True)
    education = Column(String(50), nullable=True)

    # Only flipped by identity verification decisions
    is_verified = Column(Boolean, default=False, nullable=False)

    # Onboarding progress
    onboarding_completed = Column(Boolean, default=False, nullable=False)
    onboarding_step = Column(Integer, default=1, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)

    # Relationships
    admin = relationship("AdminUser", back_populates="user", uselist=False, cascade="all, delete-orphan")
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
    photos = relationship(
        "ProfilePhoto",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="ProfilePhoto.sort_order",
    )
    interests = relationship("UserInterest", back_populates="user", cascade="all, delete-orphan")
    language_skills = relationship("LanguageSkill", back_populates="user", cascade="all, delete-orphan")
    identity_verifications = relationship(
        "IdentityVerification",
        back_populates="user",
        cascade="all, delete-orphan",
        foreign_keys="IdentityVerification.user_id",
    )
    verification_requests = relationship(
        "VerificationRequest",
        back_populates="user",
        cascade="all, delete-orphan",
        foreign_keys="VerificationRequest.user_id",
    )
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email}>"

    @validates("country_code")
    def normalize_country_code(self, key, value):
        return value.upper() if value else None
