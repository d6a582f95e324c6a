"""Multipart decoding for media uploads."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from fastapi import Request
from starlette.datastructures import UploadFile

from services.errors import ValidationError

logger = logging.getLogger(__name__)

VIDEO_METADATA_FIELDS = ("title", "description", "originalSize")


@dataclass
class UploadRequest:
    payload: bytes
    filename: Optional[str] = None
    content_type: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    original_size: Optional[str] = None


_FIELD_ATTRS = {
    "title": "title",
    "description": "description",
    "originalSize": "original_size",
}


def _string_field(value) -> Optional[str]:
    # Empty strings pass through; file parts in a scalar slot do not.
    return value if isinstance(value, str) else None


async def decode_upload_form(request: Request, *, metadata_fields: Iterable[str] = ()) -> UploadRequest:
    """Read the ``file`` part and the named scalar fields from a multipart body."""
    try:
        form = await request.form()
    except Exception as exc:
        logger.warning("Could not parse upload form: %s", exc)
        raise ValidationError() from exc

    try:
        file = form.get("file")
        if not isinstance(file, UploadFile):
            raise ValidationError()

        payload = await file.read()
        upload = UploadRequest(
            payload=payload,
            filename=file.filename,
            content_type=file.content_type,
        )
        for field in metadata_fields:
            setattr(upload, _FIELD_ATTRS[field], _string_field(form.get(field)))
        return upload
    finally:
        await form.close()
