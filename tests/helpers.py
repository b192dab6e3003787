"""Shared test data builders."""
from datetime import date, timedelta

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def years_ago(years: int, days: int = 0) -> date:
    """Birthdate that turns ``years`` old today, shifted ``days`` later (younger)."""
    today = date.today()
    try:
        anniversary = today.replace(year=today.year - years)
    except ValueError:
        # Feb 29 on a non-leap target year
        anniversary = today.replace(year=today.year - years, day=28)
    return anniversary + timedelta(days=days)


def png(name: str = "photo.png"):
    return (name, PNG_BYTES, "image/png")
