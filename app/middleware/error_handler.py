"""Global error handlers for the application."""
import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from app.core.i18n import normalize_language, t

logger = logging.getLogger(__name__)


def _request_language(request: Request) -> str:
    return normalize_language(
        request.headers.get("x-language") or request.headers.get("accept-language")
    )


async def http_exception_handler(request: Request, exc):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    language = _request_language(request)
    return JSONResponse(
        status_code=500,
        content={"detail": f"{t('error.generic', language)} {t('error.try_again', language)}"},
    )
