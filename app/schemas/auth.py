from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class OAuthLoginRequest(BaseModel):
    """OAuth provider ID token exchange"""
    id_token: str


class TokenResponse(BaseModel):
    """Token response (access + refresh)"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user_id: int
    email: str
    onboarding_completed: bool
    onboarding_step: int
    is_new_user: Optional[bool] = None


class RefreshTokenRequest(BaseModel):
    """Request to refresh access token"""
    refresh_token: str


class CurrentUserResponse(BaseModel):
    id: int
    email: str
    nickname: Optional[str] = None
    country_code: Optional[str] = None
    is_verified: bool
    is_admin: bool = False
    onboarding_completed: bool
    onboarding_step: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
