"""Identity verification and profile review submissions."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.core.database import Base


class IdentityVerification(Base):
    __tablename__ = "identity_verifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    doc_type = Column(String(50), nullable=False)
    country_code = Column(String(2), nullable=False)

    # Storage path inside the identity document bucket
    id_front_path = Column(String(512), nullable=False)

    status = Column(String(20), default="submitted", nullable=False, index=True)
    rejection_reason = Column(Text, nullable=True)

    submitted_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    reviewed_at = Column(DateTime, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    user = relationship("User", back_populates="identity_verifications", foreign_keys=[user_id])

    def __repr__(self):
        return f"<IdentityVerification {self.id} user={self.user_id} {self.status}>"


class VerificationRequest(Base):
    __tablename__ = "verification_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(30), nullable=False, index=True)

    photo_url = Column(Text, nullable=True)
    photo_path = Column(String(512), nullable=True)
    proposed_bio = Column(Text, nullable=True)
    user_display_name = Column(String(255), nullable=True)

    status = Column(String(20), default="pending", nullable=False, index=True)
    rejection_reason = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    reviewed_at = Column(DateTime, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    user = relationship("User", back_populates="verification_requests", foreign_keys=[user_id])

    def __repr__(self):
        return f"<VerificationRequest {self.id} {self.type} {self.status}>"
