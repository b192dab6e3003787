from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
import secrets
import hashlib
from app.core.config import settings


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()

def _create_jwt(payload: Dict[str, Any], expires_delta: timedelta) -> tuple[str, str]:
    expire = datetime.now(timezone.utc) + expires_delta
    jti = secrets.token_urlsafe(32)

    payload.update({
        "exp": expire,
        "jti": jti,
    })

    token = jwt.encode(
        payload,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )
    return token, jti


def create_access_token(
    user_id: int,
    email: str,
    expires_delta: Optional[timedelta] = None,
) -> tuple[str, str]:
    return _create_jwt(
        payload={
            "sub": str(user_id),
            "email": email,
            "type": "access",
        },
        expires_delta=expires_delta
        or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(user_id: int) -> tuple[str, str]:
    return _create_jwt(
        payload={
            "sub": str(user_id),
            "type": "refresh",
        },
        expires_delta=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def create_storage_token(bucket: str, path: str, ttl_seconds: int) -> str:
    """Short-lived token granting read access to one stored artifact."""
    token, _ = _create_jwt(
        payload={
            "type": "storage",
            "bucket": bucket,
            "path": path,
        },
        expires_delta=timedelta(seconds=ttl_seconds),
    )
    return token

def decode_token(token: str) -> Optional[Dict[str, Any]]:
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
    except JWTError:
        return None


def decode_refresh_token(token: str) -> Optional[Dict[str, Any]]:
    payload = decode_token(token)
    if payload and payload.get("type") == "refresh":
        return payload
    return None


def decode_storage_token(token: str, bucket: str, path: str) -> bool:
    payload = decode_token(token)
    return bool(
        payload
        and payload.get("type") == "storage"
        and payload.get("bucket") == bucket
        and payload.get("path") == path
    )
