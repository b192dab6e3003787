"""Resolve the display language (ko/ja) for localized messages."""
from typing import Optional
from fastapi import Header
from app.core.i18n import normalize_language


async def get_language(
    x_language: Optional[str] = Header(None),
    accept_language: Optional[str] = Header(None),
) -> str:
    return normalize_language(x_language or accept_language)
