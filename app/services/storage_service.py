"""Blob store for profile photos and identity documents.

Two backends are selected by ``settings.STORAGE_BACKEND``: ``local`` writes
under ``UPLOAD_DIR/<bucket>/<path>`` and signs URLs with a short-lived JWT,
``s3`` uses boto3 with one S3 bucket per logical bucket.
"""
import logging
import os
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings
from app.core.security import create_storage_token

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


def _get_s3_client():
    return boto3.client(
        "s3",
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID or os.getenv("AWS_ACCESS_KEY_ID"),
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or os.getenv("AWS_SECRET_ACCESS_KEY"),
        region_name=settings.AWS_REGION or os.getenv("AWS_REGION", "ap-northeast-2"),
    )


def _s3_bucket(bucket: str) -> str:
    return f"{settings.AWS_S3_BUCKET_PREFIX}{bucket}"


def _local_root() -> Path:
    return Path(settings.UPLOAD_DIR)


def _local_file(bucket: str, path: str) -> Path:
    root = (_local_root() / bucket).resolve()
    target = (root / path).resolve()
    if root not in target.parents:
        raise StorageError(f"Invalid storage path: {path}")
    return target


def list_buckets() -> list[str]:
    if settings.STORAGE_BACKEND == "local":
        root = _local_root()
        if not root.exists():
            return []
        return sorted(p.name for p in root.iterdir() if p.is_dir())

    try:
        response = _get_s3_client().list_buckets()
    except (BotoCoreError, ClientError) as e:
        logger.error(f"Failed to list buckets: {e}")
        raise StorageError("Failed to list buckets") from e
    prefix = settings.AWS_S3_BUCKET_PREFIX
    return sorted(
        b["Name"][len(prefix):]
        for b in response.get("Buckets", [])
        if b["Name"].startswith(prefix)
    )


def ensure_bucket(bucket: str) -> None:
    """Local buckets are created on demand; remote ones must already exist."""
    if settings.STORAGE_BACKEND == "local":
        (_local_root() / bucket).mkdir(parents=True, exist_ok=True)
        return
    if bucket not in list_buckets():
        logger.error(f"Bucket '{bucket}' does not exist")
        raise StorageError(f"Bucket '{bucket}' does not exist")


def upload(bucket: str, path: str, data: bytes, content_type: Optional[str] = None) -> str:
    """Store ``data`` at ``bucket/path`` and return the path as the artifact reference."""
    ensure_bucket(bucket)
    logger.info(f"Uploading {len(data)} bytes to {bucket}/{path}")

    if settings.STORAGE_BACKEND == "local":
        target = _local_file(bucket, path)
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            with target.open("wb") as f:
                f.write(data)
        except OSError as e:
            logger.exception("Local upload failed")
            raise StorageError("Upload failed") from e
        return path

    extra = {"ContentType": content_type} if content_type else {}
    try:
        _get_s3_client().put_object(Bucket=_s3_bucket(bucket), Key=path, Body=data, **extra)
    except (BotoCoreError, ClientError) as e:
        logger.exception("S3 upload failed")
        raise StorageError("Upload failed") from e
    return path


def get_signed_url(bucket: str, path: str, ttl_seconds: Optional[int] = None) -> str:
    ttl = ttl_seconds or settings.SIGNED_URL_TTL_SECONDS

    if settings.STORAGE_BACKEND == "local":
        token = create_storage_token(bucket, path, ttl)
        return f"{settings.PUBLIC_BASE_URL}/storage/{bucket}/{path}?token={token}"

    try:
        return _get_s3_client().generate_presigned_url(
            "get_object",
            Params={"Bucket": _s3_bucket(bucket), "Key": path},
            ExpiresIn=ttl,
        )
    except (BotoCoreError, ClientError) as e:
        logger.error(f"Error creating signed URL for {bucket}/{path}: {e}")
        raise StorageError("Failed to sign URL") from e


def public_url(bucket: str, path: str) -> str:
    if settings.STORAGE_BACKEND == "local":
        return f"{settings.PUBLIC_BASE_URL}/static/{bucket}/{path}"
    return f"https://{_s3_bucket(bucket)}.s3.{settings.AWS_REGION}.amazonaws.com/{path}"


def read_local(bucket: str, path: str) -> Path:
    target = _local_file(bucket, path)
    if not target.is_file():
        raise StorageError(f"{bucket}/{path} not found")
    return target


def delete(bucket: str, path: str) -> None:
    if settings.STORAGE_BACKEND == "local":
        target = _local_file(bucket, path)
        if target.exists():
            target.unlink()
        return
    try:
        _get_s3_client().delete_object(Bucket=_s3_bucket(bucket), Key=path)
    except (BotoCoreError, ClientError) as e:
        logger.error(f"Failed to delete {bucket}/{path}: {e}")
        raise StorageError("Delete failed") from e


def list_paths(bucket: str, prefix: str) -> list[str]:
    """Paths stored under ``prefix`` in ``bucket``, sorted."""
    if settings.STORAGE_BACKEND == "local":
        root = (_local_root() / bucket).resolve()
        base = _local_file(bucket, prefix)
        if not base.is_dir():
            return []
        return sorted(p.relative_to(root).as_posix() for p in base.rglob("*") if p.is_file())

    paths = []
    try:
        paginator = _get_s3_client().get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=_s3_bucket(bucket), Prefix=prefix):
            paths.extend(obj["Key"] for obj in page.get("Contents", []))
    except (BotoCoreError, ClientError) as e:
        logger.error(f"Failed to list {bucket}/{prefix}: {e}")
        raise StorageError("List failed") from e
    return sorted(paths)
