from sqlalchemy.orm import Session
from app.models.user import User
from app.models.admin import AdminUser
from app.models.session import UserSession
from app.core.security import (
    create_access_token, create_refresh_token, hash_token, decode_refresh_token,
)
from app.core.config import settings
from datetime import datetime, timedelta, timezone
from typing import Optional
from app.utils.errors import InvalidCredentialsError, UserNotFoundError
from google.auth.transport import requests
from google.oauth2 import id_token
import logging

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("google",)


class AuthService:

    @staticmethod
    def verify_google_token(id_token_str: str) -> dict:
        """
        Verify a Google ID token
        - Validate token signature against Google's public keys
        - Extract the stable subject and email
        """
        try:
            idinfo = id_token.verify_oauth2_token(
                id_token_str,
                requests.Request(),
                settings.GOOGLE_CLIENT_ID,
            )
        except ValueError as e:
            logger.error(f"Google token verification failed: {e}")
            raise InvalidCredentialsError("Invalid Google token")

        if not idinfo.get("email"):
            raise InvalidCredentialsError("Google account has no email")

        return {
            "subject": idinfo["sub"],
            "email": idinfo["email"],
            "name": idinfo.get("name") or idinfo.get("given_name", ""),
        }

    @staticmethod
    def oauth_login(
        db: Session,
        provider: str,
        id_token_str: str,
        ip_address: str,
        user_agent: str = "",
    ) -> dict:
        """
        OAuth sign-in
        - Verify provider token
        - Find or create the applicant
        - Issue tokens and track the session
        """
        if provider not in SUPPORTED_PROVIDERS:
            raise InvalidCredentialsError(f"Unsupported OAuth provider: {provider}")

        profile = AuthService.verify_google_token(id_token_str)

        user = (
            db.query(User)
            .filter(User.oauth_provider == provider, User.oauth_subject == profile["subject"])
            .first()
        )
        if not user:
            # Same email from an earlier sign-in is linked rather than duplicated
            user = db.query(User).filter(User.email == profile["email"]).first()
            if user:
                user.oauth_provider = provider
                user.oauth_subject = profile["subject"]

        is_new = user is None
        if is_new:
            user = User(
                email=profile["email"],
                oauth_provider=provider,
                oauth_subject=profile["subject"],
                nickname=profile["name"] or None,
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            logger.info(f"Created user {user.id} via {provider}")

        tokens = AuthService._start_session(db, user, provider, ip_address, user_agent)
        tokens["is_new_user"] = is_new
        return tokens

    @staticmethod
    def _start_session(
        db: Session,
        user: User,
        provider: str,
        ip_address: str,
        user_agent: str,
    ) -> dict:
        access_token, access_jti = create_access_token(user_id=user.id, email=user.email)
        refresh_token, refresh_jti = create_refresh_token(user.id)

        now = datetime.now(timezone.utc).replace(tzinfo=None)
        session = UserSession(
            user_id=user.id,
            token_jti=access_jti,
            refresh_jti=refresh_jti,
            refresh_token_hash=hash_token(refresh_token),
            provider=provider,
            ip_address=ip_address,
            user_agent=user_agent,
            expires_at=now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_expires_at=now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )
        db.add(session)

        user.last_login = now
        db.commit()

        return AuthService._token_response(user, access_token, refresh_token)

    @staticmethod
    def _token_response(user: User, access_token: str, refresh_token: str) -> dict:
        return {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "token_type": "bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            "user_id": user.id,
            "email": user.email,
            "onboarding_completed": bool(user.onboarding_completed),
            "onboarding_step": user.onboarding_step,
        }

    @staticmethod
    def refresh_tokens(
        db: Session,
        refresh_token: str,
        ip_address: str,
        user_agent: str = "",
    ) -> dict:
        """
        Refresh access token using a valid refresh token with rotation.
        - Validate refresh JWT and session record
        - Rotate refresh token (new jti, hashed storage)
        - Issue new access token
        """
        payload = decode_refresh_token(refresh_token)
        if not payload or not payload.get("jti"):
            raise InvalidCredentialsError("Invalid refresh token")

        user_id = int(payload.get("sub"))
        session = (
            db.query(UserSession)
            .filter(
                UserSession.user_id == user_id,
                UserSession.refresh_jti == payload["jti"],
                UserSession.is_revoked == False,  # noqa: E712
            )
            .first()
        )
        if not session:
            raise InvalidCredentialsError("Invalid or revoked refresh token")

        now = datetime.now(timezone.utc).replace(tzinfo=None)
        if session.refresh_expires_at and session.refresh_expires_at < now:
            session.revoke("refresh_expired")
            db.commit()
            raise InvalidCredentialsError("Refresh token expired")

        if session.refresh_token_hash != hash_token(refresh_token):
            session.revoke("refresh_mismatch")
            db.commit()
            raise InvalidCredentialsError("Invalid refresh token")

        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise UserNotFoundError("User not found")

        access_token, access_jti = create_access_token(user_id=user.id, email=user.email)
        new_refresh_token, new_refresh_jti = create_refresh_token(user.id)

        # Rotate session tokens
        session.token_jti = access_jti
        session.refresh_jti = new_refresh_jti
        session.refresh_token_hash = hash_token(new_refresh_token)
        session.refresh_expires_at = now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        session.expires_at = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        session.ip_address = ip_address
        session.user_agent = user_agent

        user.last_login = now
        db.commit()

        return AuthService._token_response(user, access_token, new_refresh_token)

    @staticmethod
    def logout(db: Session, user_id: int, token_jti: Optional[str]) -> None:
        if not token_jti:
            return
        session = (
            db.query(UserSession)
            .filter(UserSession.user_id == user_id, UserSession.token_jti == token_jti)
            .first()
        )
        if session and not session.is_revoked:
            session.revoke("logout")
            db.commit()

    @staticmethod
    def get_user(db: Session, user_id: int) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise UserNotFoundError("User not found")
        return user

    @staticmethod
    def is_admin(db: Session, user_id: int) -> bool:
        return db.query(AdminUser.id).filter(AdminUser.user_id == user_id).first() is not None

    @staticmethod
    def grant_admin(db: Session, email: str) -> AdminUser:
        user = db.query(User).filter(User.email == email).first()
        if not user:
            raise UserNotFoundError("User not found")
        if user.admin:
            return user.admin
        admin = AdminUser(user_id=user.id)
        db.add(admin)
        db.commit()
        db.refresh(admin)
        logger.info(f"Granted admin to user {user.id}")
        return admin
