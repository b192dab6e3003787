"""Chat entry point. Messaging itself lives elsewhere; this only enforces the access gate."""
from fastapi import APIRouter, Depends

from app.dependencies.auth import require_chat_access
from app.utils.helpers import format_response

router = APIRouter(prefix="/chat", tags=["chat"])


@router.get("/availability")
async def chat_availability(current_user=Depends(require_chat_access)):
    return format_response({"can_access_chat": True})
