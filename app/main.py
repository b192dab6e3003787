from fastapi import FastAPI
from fastapi.exceptions import HTTPException as FastAPIHTTPException
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.logger import setup_logging
from app.middleware.cors import configure_cors
from app.middleware.logging import RequestLoggerMiddleware
from app.middleware.auth import JWTMiddleware
from app.middleware import error_handler

# Routers
from app.routers import health as health_router
from app.routers import auth as auth_router
from app.routers import users as users_router
from app.routers import onboarding as onboarding_router
from app.routers import verification as verification_router
from app.routers import admin as admin_router
from app.routers import notifications as notifications_router
from app.routers import notifications_ws as notifications_ws_router
from app.routers import storage as storage_router
from app.routers import chat as chat_router


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    setup_logging()
    description = (
        f"{settings.APP_NAME} Backend API.\n\n"
        "Applicant onboarding, identity verification, admin review and notifications "
        "for a Korean-Japanese dating service."
    )

    openapi_tags = [
        {"name": "authentication", "description": "OAuth sign-in, token refresh and logout."},
        {"name": "onboarding", "description": "Five-step applicant onboarding wizard."},
        {"name": "verification", "description": "Identity document submission and status."},
        {"name": "users", "description": "Profile, profile edit requests and feature access."},
        {"name": "admin", "description": "Review queue for identity, photo and bio submissions."},
        {"name": "notifications", "description": "In-app notification feed."},
        {"name": "chat", "description": "Chat availability behind the verification gate."},
        {"name": "storage", "description": "Signed access to locally stored artifacts."},
        {"name": "health", "description": "Health checks and service status endpoints."},
    ]

    app = FastAPI(
        title=f"{settings.APP_NAME} Backend API",
        version="0.1.0",
        description=description,
        openapi_tags=openapi_tags,
    )

    # Middleware
    configure_cors(app)
    app.add_middleware(RequestLoggerMiddleware)
    app.add_middleware(JWTMiddleware)

    # Exception handlers
    app.add_exception_handler(FastAPIHTTPException, error_handler.http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, error_handler.sqlalchemy_exception_handler)

    # Include routers
    app.include_router(health_router.router)
    app.include_router(auth_router.router)
    app.include_router(onboarding_router.router)
    app.include_router(verification_router.router)
    app.include_router(users_router.router)
    app.include_router(admin_router.router)
    app.include_router(notifications_router.router)
    app.include_router(notifications_ws_router.router)
    app.include_router(storage_router.router)
    app.include_router(chat_router.router)

    # Profile photos are public; identity documents only go out through signed URLs
    if settings.STORAGE_BACKEND == "local":
        app.mount(
            f"/static/{settings.PROFILE_PHOTO_BUCKET}",
            StaticFiles(directory=f"{settings.UPLOAD_DIR}/{settings.PROFILE_PHOTO_BUCKET}", check_dir=False),
            name="profile-photos",
        )

    return app


app = create_app()
