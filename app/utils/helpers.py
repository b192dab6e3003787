"""Helper utilities (responses, request helpers)."""
import os
import uuid
from fastapi import Request


def format_response(data=None, success=True):
    return {"success": success, "data": data}


def get_peer_ip(request: Request) -> str:
    """Address of the connected peer; forwarding headers are ignored."""
    client = getattr(request, "client", None)
    if client and getattr(client, "host", None):
        return client.host
    return "unknown"


def get_client_ip(request: Request) -> str:
    """Return client's IP address from request headers or connection info.

    Checks `X-Forwarded-For` first (comma-separated), then falls back to
    `request.client.host`. Returns 'unknown' if not found.
    """
    x_forwarded_for = request.headers.get("x-forwarded-for")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()
    return get_peer_ip(request)


def artifact_path(user_id: int, filename: str | None, folder: str | None = None) -> str:
    """Storage path ``<user_id>/[<folder>/]<uuid>.<ext>`` for an uploaded file."""
    ext = os.path.splitext(filename or "")[1].lower()
    prefix = f"{user_id}/{folder}/" if folder else f"{user_id}/"
    return f"{prefix}{uuid.uuid4().hex}{ext}"
