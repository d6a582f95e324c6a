"""
Cloudinary upload adapter.

Cloudinary completion is reported through a one-shot ``on_complete(error,
result)`` callback. The blocking SDK call runs on the event loop's default executor
and is bounded by the SDK request timeout. ``upload_buffer`` turns the
callback into a single awaitable result.
"""

from __future__ import annotations

import asyncio
import functools
import io
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional

import cloudinary.uploader

from config import settings
from services.errors import UploadError

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[Optional[BaseException], Optional[Dict[str, Any]]], None]

VIDEO_TRANSFORMATION = [{"quality": "auto", "fetch_format": "mp4"}]


@dataclass(frozen=True)
class CloudinaryCredentials:
    cloud_name: str
    api_key: str
    api_secret: str

    @classmethod
    def from_settings(cls) -> "CloudinaryCredentials":
        return cls(
            cloud_name=(settings.CLOUDINARY_CLOUD_NAME or "").strip(),
            api_key=(settings.CLOUDINARY_API_KEY or "").strip(),
            api_secret=(settings.CLOUDINARY_API_SECRET or "").strip(),
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def as_options(self) -> Dict[str, str]:
        return {
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "api_secret": self.api_secret,
        }


@dataclass(frozen=True)
class UploadOptions:
    folder: str
    resource_type: str = "image"
    transformation: List[Dict[str, str]] = field(default_factory=list)
    timeout: Optional[float] = None  # SDK request timeout, seconds

    def as_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {"folder": self.folder, "resource_type": self.resource_type}
        if self.transformation:
            options["transformation"] = [dict(step) for step in self.transformation]
        if self.timeout:
            options["timeout"] = self.timeout
        return options


def image_upload_options(folder: Optional[str] = None) -> UploadOptions:
    return UploadOptions(folder=folder or settings.IMAGE_UPLOAD_FOLDER)


def video_upload_options(folder: Optional[str] = None) -> UploadOptions:
    return UploadOptions(
        folder=folder or settings.VIDEO_UPLOAD_FOLDER,
        resource_type="video",
        transformation=[dict(step) for step in VIDEO_TRANSFORMATION],
    )


@dataclass
class UploadResult:
    public_id: str
    bytes: int
    duration: Optional[float] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_response(cls, response: Any) -> "UploadResult":
        if not isinstance(response, dict) or not response.get("public_id"):
            raise ValueError("Cloudinary response has no public_id")
        extras = {k: v for k, v in response.items() if k not in {"public_id", "bytes", "duration"}}
        duration = response.get("duration")
        return cls(
            public_id=str(response["public_id"]),
            bytes=int(response.get("bytes") or 0),
            duration=float(duration) if duration is not None else None,
            extras=extras,
        )


class CloudinaryUploadStream:
    """Write destination for one Cloudinary upload.

    Chunks are buffered by ``write``. ``end`` must be called on the event
    loop: it hands the buffer to the SDK on the loop's default executor and
    ``on_complete`` fires once, from the executor future's done-callback,
    with ``(error, None)`` or ``(None, result)``.
    """

    def __init__(
        self,
        options: UploadOptions,
        credentials: CloudinaryCredentials,
        on_complete: CompletionCallback,
        uploader: Optional[Callable[..., Dict[str, Any]]] = None,
    ):
        self._options = options
        self._credentials = credentials
        self._on_complete = on_complete
        self._uploader = uploader or cloudinary.uploader.upload
        self._buffer = io.BytesIO()
        self._ended = False
        self._completed = False
        self.pending: Optional[asyncio.Future] = None

    def write(self, chunk: bytes) -> None:
        if self._ended:
            raise RuntimeError("write after end")
        self._buffer.write(chunk)

    def end(self, chunk: Optional[bytes] = None) -> None:
        if chunk:
            self.write(chunk)
        if self._ended:
            raise RuntimeError("stream already ended")
        self._ended = True
        self._buffer.seek(0)

        params = {**self._options.as_options(), **self._credentials.as_options()}
        loop = asyncio.get_running_loop()
        self.pending = loop.run_in_executor(None, functools.partial(self._uploader, self._buffer, **params))
        self.pending.add_done_callback(self._upload_done)

    def _upload_done(self, pending: asyncio.Future) -> None:
        self._buffer.close()
        if pending.cancelled():
            self._complete(asyncio.CancelledError(), None)
        elif pending.exception() is not None:
            self._complete(pending.exception(), None)
        else:
            self._complete(None, pending.result())

    def _complete(self, error: Optional[BaseException], result: Optional[Dict[str, Any]]) -> None:
        if self._completed:
            return
        self._completed = True
        self._on_complete(error, result)


async def upload_buffer(
    buffer: bytes,
    options: UploadOptions,
    credentials: CloudinaryCredentials,
    *,
    timeout: Optional[float] = None,
    stream_factory: Callable[..., Any] = CloudinaryUploadStream,
) -> UploadResult:
    """Upload ``buffer`` and wait for the single completion outcome.

    ``timeout`` bounds both the wait and the SDK request. Every failure
    (synchronous stream error, reported error, malformed response, timeout)
    surfaces as UploadError. Cancelling the awaiting task raises
    CancelledError; a completion arriving afterwards is logged and dropped.
    """
    if timeout and options.timeout is None:
        options = replace(options, timeout=timeout)

    loop = asyncio.get_running_loop()
    future: asyncio.Future = loop.create_future()

    def _settle(error: Optional[BaseException], result: Optional[Dict[str, Any]]) -> None:
        if future.done():
            if result is not None:
                logger.warning(
                    "Dropped late Cloudinary result for %s; the asset has no record",
                    result.get("public_id") if isinstance(result, dict) else result,
                )
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)

    def _on_complete(error: Optional[BaseException], result: Optional[Dict[str, Any]]) -> None:
        try:
            loop.call_soon_threadsafe(_settle, error, result)
        except RuntimeError:
            logger.warning("Cloudinary upload completed after its event loop closed")

    try:
        stream = stream_factory(options, credentials, _on_complete)
        stream.end(buffer)
    except Exception as exc:
        _settle(exc, None)

    try:
        if timeout:
            response = await asyncio.wait_for(future, timeout)
        else:
            response = await future
        return UploadResult.from_response(response)
    except asyncio.TimeoutError as exc:
        raise UploadError(f"Cloudinary upload timed out after {timeout}s") from exc
    except Exception as exc:
        raise UploadError(f"Cloudinary upload failed: {exc}") from exc


def delete_asset(public_id: str, resource_type: str, credentials: CloudinaryCredentials) -> Dict[str, Any]:
    """Remove an uploaded asset from Cloudinary."""
    return cloudinary.uploader.destroy(public_id, resource_type=resource_type, **credentials.as_options())
