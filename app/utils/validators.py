"""Onboarding input validators shared by the wizard and the HTTP layer."""
import os
from datetime import date
from typing import Iterable, Optional

from app.core.constants import (
    DOC_TYPES_BY_NATIONALITY,
    INTERESTS_BY_NATIONALITY,
    MINIMUM_AGE,
    DocType,
    Nationality,
)

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".heic"}


def calculate_age(birthdate: date, today: Optional[date] = None) -> int:
    today = today or date.today()
    age = today.year - birthdate.year
    if (today.month, today.day) < (birthdate.month, birthdate.day):
        age -= 1
    return age


def meets_minimum_age(nationality: Nationality, birthdate: date, today: Optional[date] = None) -> bool:
    return calculate_age(birthdate, today) >= MINIMUM_AGE[Nationality(nationality)]


def is_image(filename: Optional[str], content_type: Optional[str] = None) -> bool:
    if content_type and content_type != "application/octet-stream":
        return content_type.lower().startswith("image/")
    return os.path.splitext(filename or "")[1].lower() in IMAGE_EXTENSIONS


def doc_type_allowed(nationality: Nationality, doc_type: DocType) -> bool:
    return DocType(doc_type) in DOC_TYPES_BY_NATIONALITY[Nationality(nationality)]


def unknown_interests(nationality: Nationality, interests: Iterable[str]) -> list[str]:
    vocabulary = INTERESTS_BY_NATIONALITY[Nationality(nationality)]
    return [i for i in interests if i not in vocabulary]
