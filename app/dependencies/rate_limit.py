"""Sliding-window limiter for sign-in, document upload and admin queue routes.

Keyed on the connected peer address; `X-Forwarded-For` is client-controlled.
"""
import logging
import time
from collections import defaultdict, deque

from fastapi import Depends, Request

from app.core.config import settings
from app.core.i18n import t
from app.dependencies.language import get_language
from app.utils.errors import TooManyRequestsError
from app.utils.helpers import get_peer_ip

logger = logging.getLogger(__name__)

# "<ip>:<route>" -> request timestamps inside the current window
_windows: dict[str, deque] = defaultdict(deque)


def reset_rate_limits() -> None:
    _windows.clear()


async def rate_limit(request: Request, language: str = Depends(get_language)):
    if not settings.RATE_LIMIT_ENABLED:
        return

    period = settings.RATE_LIMIT_PERIOD_SECONDS
    route = request.scope.get("route")
    key = f"{get_peer_ip(request)}:{getattr(route, 'path', request.url.path)}"

    now = time.monotonic()
    hits = _windows[key]
    while hits and hits[0] <= now - period:
        hits.popleft()

    if len(hits) >= settings.RATE_LIMIT_REQUESTS:
        retry_after = max(1, int(hits[0] + period - now))
        logger.warning(f"Rate limit hit for {key}; retry in {retry_after}s")
        raise TooManyRequestsError(t("error.too_many_requests", language), retry_after=retry_after)

    hits.append(now)
