"""Failure outcomes of the upload pipeline.

Each error carries the HTTP status and the public message rendered as
``{"error": message}``. Causes are chained with ``raise ... from`` and
only ever logged.
"""

from __future__ import annotations


class UploadPipelineError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthorizationError(UploadPipelineError):
    status_code = 401
    default_message = "Unauthorized"


class ValidationError(UploadPipelineError):
    status_code = 400
    default_message = "File not found"


class ConfigurationError(UploadPipelineError):
    status_code = 500
    default_message = "Cloudinary credentials not found"


class UploadError(UploadPipelineError):
    status_code = 500
    default_message = "Upload failed"


class PersistenceError(UploadPipelineError):
    status_code = 500
    default_message = "Upload video failed"
