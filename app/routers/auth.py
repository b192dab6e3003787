from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.schemas.auth import CurrentUserResponse, OAuthLoginRequest, RefreshTokenRequest, TokenResponse
from app.schemas.common import SuccessResponse
from app.services.auth_service import AuthService
from app.dependencies.auth import get_current_user
from app.dependencies.rate_limit import rate_limit
from app.utils.helpers import format_response, get_client_ip

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/oauth/{provider}", status_code=200, response_model=SuccessResponse[TokenResponse])
async def oauth_login(
    provider: str,
    payload: OAuthLoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    """
    OAuth sign-in
    - Verify the provider ID token
    - Create the user on first sign-in
    - Return access & refresh tokens
    """
    result = AuthService.oauth_login(
        db=db,
        provider=provider,
        id_token_str=payload.id_token,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent", ""),
    )
    return format_response(result)


@router.post("/refresh", status_code=200, response_model=SuccessResponse[TokenResponse])
async def refresh(
    payload: RefreshTokenRequest,
    request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    result = AuthService.refresh_tokens(
        db=db,
        refresh_token=payload.refresh_token,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent", ""),
    )
    return format_response(result)


@router.post("/logout", status_code=200)
async def logout(
    current_user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    AuthService.logout(db, current_user["user_id"], current_user.get("jti"))
    return format_response({"message": "Logged out"})


@router.get("/me", status_code=200, response_model=SuccessResponse[CurrentUserResponse])
async def me(
    current_user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = AuthService.get_user(db, current_user["user_id"])
    return format_response(
        {
            "id": user.id,
            "email": user.email,
            "nickname": user.nickname,
            "country_code": user.country_code,
            "is_verified": bool(user.is_verified),
            "is_admin": AuthService.is_admin(db, user.id),
            "onboarding_completed": bool(user.onboarding_completed),
            "onboarding_step": user.onboarding_step,
            "created_at": user.created_at,
        }
    )
