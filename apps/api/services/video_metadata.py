"""Persistence of uploaded video metadata."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models.video import Video
from services.cloudinary_upload import UploadResult
from services.errors import PersistenceError
from services.upload_form import UploadRequest

logger = logging.getLogger(__name__)


async def create_video_record(db: AsyncSession, *, upload: UploadRequest, result: UploadResult) -> Video:
    """Insert exactly one Video row for a completed Cloudinary upload."""
    video = Video(
        id=str(uuid.uuid4()),
        title=upload.title,
        description=upload.description,
        public_id=result.public_id,
        original_size=upload.original_size,
        compressed_size=str(result.bytes),
        duration=result.duration or 0,
    )
    try:
        db.add(video)
        await db.commit()
        await db.refresh(video)
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError() from exc

    logger.info("Stored video %s for asset %s", video.id, video.public_id)
    return video
