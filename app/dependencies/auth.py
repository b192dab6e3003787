from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from datetime import datetime, timezone
from app.core.database import get_db
from app.core.i18n import t
from app.core.security import decode_token
from app.dependencies.language import get_language
from app.models.user import User
from app.models.session import UserSession
from app.services.access_service import AccessService
from app.services.auth_service import AuthService

security = HTTPBearer()


def get_current_user_from_token(
    token: str,
    db: Session,
):
    """
    Verify JWT token string (for WebSockets) and return its payload.
    """
    payload = decode_token(token)

    if payload is None or payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )

    user_id = int(payload.get("sub"))
    jti = payload.get("jti")

    # Check if token is revoked
    session = db.query(UserSession).filter(
        UserSession.user_id == user_id,
        UserSession.token_jti == jti,
        UserSession.is_revoked == False,  # noqa: E712
    ).first()

    if not session:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token revoked or invalid",
        )

    now = datetime.now(timezone.utc).replace(tzinfo=None)
    if session.expires_at and session.expires_at < now:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
        )

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return {
        **payload,
        "user_id": user_id,
        "jti": jti,
    }


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
):
    """Verify JWT token and return its payload"""
    return get_current_user_from_token(credentials.credentials, db)


async def get_current_user_model(
    current_user=Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    return AuthService.get_user(db, current_user["user_id"])


async def get_current_admin(
    current_user=Depends(get_current_user),
    db: Session = Depends(get_db),
    language: str = Depends(get_language),
):
    """Verify current user has an admin_users row"""
    if not AuthService.is_admin(db, current_user["user_id"]):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=t("error.admin_required", language),
        )
    return current_user


async def require_chat_access(
    current_user=Depends(get_current_user),
    db: Session = Depends(get_db),
    language: str = Depends(get_language),
):
    """Only verified users may use chat"""
    if not AccessService.can_access_chat(db, current_user["user_id"]):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=t("access.chat_requires_verification", language),
        )
    return current_user
