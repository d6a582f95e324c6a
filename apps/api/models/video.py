"""Video model for uploaded video metadata."""

from sqlalchemy import Column, String, DateTime, Float, Text
from sqlalchemy.sql import func
import uuid

from database import Base


class Video(Base):
    """Metadata of a video stored in Cloudinary."""

    __tablename__ = "videos"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    public_id = Column(String, nullable=False, index=True)  # Cloudinary public_id
    original_size = Column(String, nullable=False)  # caller-declared, not verified
    compressed_size = Column(String, nullable=False)
    duration = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
