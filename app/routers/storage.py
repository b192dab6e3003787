"""Serves locally stored artifacts behind signed URLs."""
from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import FileResponse

from app.core.config import settings
from app.core.security import decode_storage_token
from app.services import storage_service

router = APIRouter(prefix="/storage", tags=["storage"])


@router.get("/{bucket}/{path:path}")
async def get_signed_object(bucket: str, path: str, token: str = Query(...)):
    if settings.STORAGE_BACKEND != "local":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    if not decode_storage_token(token, bucket, path):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired link")
    try:
        target = storage_service.read_local(bucket, path)
    except storage_service.StorageError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return FileResponse(target)
