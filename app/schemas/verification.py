from typing import Optional

from pydantic import BaseModel


class VerificationStatusResponse(BaseModel):
    is_verified: bool
    verification_status: str  # none | in_review | approved | rejected
    rejection_reason: Optional[str] = None


class IdentitySubmitResponse(BaseModel):
    verification_id: int
    verification_status: str = "in_review"
