"""Pytest fixtures for async FastAPI testing.

Loads `.env.test` before any app module reads settings, initializes a clean
SQLite database, points local storage at a temp directory, and provides an
`AsyncClient` over ASGITransport for integration tests.
"""
import os
import pathlib
import uuid
from datetime import datetime, timedelta

import pytest
from dotenv import load_dotenv

ROOT = pathlib.Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=str(ROOT / ".env.test"), override=True)
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("STORAGE_BACKEND", "local")


@pytest.fixture(scope="session")
def prepare_database():
    """Create clean schema for the test session."""
    from app.core.database import engine, Base

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    yield

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(prepare_database):
    """Yield a SQLAlchemy session for direct DB access in tests."""
    from app.core.database import SessionLocal

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """Keep stored artifacts inside the test's temp directory."""
    from app.core.config import settings

    target = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(target))
    monkeypatch.setattr(settings, "STORAGE_BACKEND", "local")
    return target


@pytest.fixture
async def async_client(prepare_database):
    """Provide an httpx AsyncClient configured with the FastAPI app."""
    from httpx import ASGITransport, AsyncClient
    from app.main import create_app

    app = create_app()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client


@pytest.fixture
def make_user(db_session):
    """Create a user with an active session; returns (user, access_token)."""
    from app.core.security import create_access_token, create_refresh_token, hash_token
    from app.models.session import UserSession
    from app.models.user import User

    def _make(country_code="KR", is_verified=False, admin=False, **fields):
        user = User(
            email=f"user-{uuid.uuid4().hex[:8]}@example.com",
            oauth_provider="google",
            oauth_subject=uuid.uuid4().hex,
            nickname=fields.pop("nickname", "Tester"),
            country_code=country_code,
            is_verified=is_verified,
            **fields,
        )
        db_session.add(user)
        db_session.commit()

        if admin:
            from app.models.admin import AdminUser

            db_session.add(AdminUser(user_id=user.id))
            db_session.commit()

        access_token, access_jti = create_access_token(user_id=user.id, email=user.email)
        refresh_token, refresh_jti = create_refresh_token(user.id)
        db_session.add(
            UserSession(
                user_id=user.id,
                token_jti=access_jti,
                refresh_jti=refresh_jti,
                refresh_token_hash=hash_token(refresh_token),
                expires_at=datetime.utcnow() + timedelta(minutes=30),
                refresh_expires_at=datetime.utcnow() + timedelta(days=7),
            )
        )
        db_session.commit()
        db_session.refresh(user)
        return user, access_token

    return _make


@pytest.fixture
def auth_headers():
    def _headers(token, language=None):
        headers = {"Authorization": f"Bearer {token}"}
        if language:
            headers["X-Language"] = language
        return headers

    return _headers

