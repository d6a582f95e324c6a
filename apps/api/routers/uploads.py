"""
Media upload endpoints.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import AuthContext, get_optional_auth_context
from services.media_upload import run_image_upload, run_video_upload

router = APIRouter()


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ImageUploadResponse(CamelModel):
    public_id: str


class VideoRecordResponse(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    public_id: str
    original_size: str
    compressed_size: str
    duration: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@router.post("/image-upload", response_model=ImageUploadResponse)
async def upload_image(
    request: Request,
    auth: Optional[AuthContext] = Depends(get_optional_auth_context),
):
    """Upload one image to Cloudinary and return its public id."""
    result = await run_image_upload(request, auth)
    return ImageUploadResponse(public_id=result.public_id)


@router.post("/video-upload", response_model=VideoRecordResponse)
async def upload_video(
    request: Request,
    auth: Optional[AuthContext] = Depends(get_optional_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Upload one video to Cloudinary and store its metadata."""
    video = await run_video_upload(request, auth, db)
    return VideoRecordResponse.model_validate(video)
