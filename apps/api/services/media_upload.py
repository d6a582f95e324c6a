"""Image and video upload pipelines."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from models.video import Video
from services.cloudinary_upload import (
    CloudinaryCredentials,
    UploadResult,
    delete_asset,
    image_upload_options,
    upload_buffer,
    video_upload_options,
)
from services.errors import AuthorizationError, ConfigurationError, PersistenceError, UploadError
from services.upload_form import VIDEO_METADATA_FIELDS, decode_upload_form
from services.video_metadata import create_video_record

if TYPE_CHECKING:
    from routers.auth_scope import AuthContext

logger = logging.getLogger(__name__)

IMAGE_UPLOAD_FAILED = "Upload image failed"
VIDEO_UPLOAD_FAILED = "Upload video failed"


def _upload_timeout() -> Optional[float]:
    timeout = float(settings.CLOUDINARY_UPLOAD_TIMEOUT_SECONDS or 0)
    return timeout if timeout > 0 else None


async def run_image_upload(
    request: Request,
    auth: Optional[AuthContext],
    credentials: Optional[CloudinaryCredentials] = None,
) -> UploadResult:
    """Authenticate, decode and upload one image. No metadata is stored."""
    if auth is None:
        raise AuthorizationError()

    upload = await decode_upload_form(request)
    credentials = credentials or CloudinaryCredentials.from_settings()

    try:
        result = await upload_buffer(
            upload.payload,
            image_upload_options(),
            credentials,
            timeout=_upload_timeout(),
        )
    except UploadError as exc:
        logger.exception("%s for user %s: %s", IMAGE_UPLOAD_FAILED, auth.user_id, exc.__cause__ or exc)
        raise UploadError(IMAGE_UPLOAD_FAILED) from exc

    logger.info("Image uploaded for user %s as %s", auth.user_id, result.public_id)
    return result


async def run_video_upload(
    request: Request,
    auth: Optional[AuthContext],
    db: AsyncSession,
    credentials: Optional[CloudinaryCredentials] = None,
) -> Video:
    """Authenticate, check credentials, decode, upload, then store one Video."""
    if auth is None and settings.REQUIRE_AUTH_FOR_VIDEO_UPLOAD:
        raise AuthorizationError()

    credentials = credentials or CloudinaryCredentials.from_settings()
    if not credentials.is_complete:
        logger.error("Video upload rejected: Cloudinary credentials are not configured")
        raise ConfigurationError()

    upload = await decode_upload_form(request, metadata_fields=VIDEO_METADATA_FIELDS)
    options = video_upload_options()

    try:
        result = await upload_buffer(upload.payload, options, credentials, timeout=_upload_timeout())
    except UploadError as exc:
        logger.exception("%s: %s", VIDEO_UPLOAD_FAILED, exc.__cause__ or exc)
        raise UploadError(VIDEO_UPLOAD_FAILED) from exc

    try:
        return await create_video_record(db, upload=upload, result=result)
    except PersistenceError as exc:
        logger.exception(
            "%s: metadata write failed for asset %s: %s",
            VIDEO_UPLOAD_FAILED,
            result.public_id,
            exc.__cause__ or exc,
        )
        if settings.DELETE_ORPHANED_VIDEO_ASSETS:
            await _delete_orphaned_asset(result.public_id, options.resource_type, credentials)
        raise PersistenceError(VIDEO_UPLOAD_FAILED) from exc


async def _delete_orphaned_asset(public_id: str, resource_type: str, credentials: CloudinaryCredentials) -> None:
    try:
        await asyncio.to_thread(delete_asset, public_id, resource_type, credentials)
        logger.info("Deleted orphaned Cloudinary asset %s", public_id)
    except Exception as exc:
        logger.warning("Could not delete orphaned Cloudinary asset %s: %s", public_id, exc)
