import pytest
from unittest.mock import patch

from config import settings


@pytest.fixture(autouse=True)
def cloudinary_test_credentials():
    """Give every test complete fake Cloudinary credentials and a short upload timeout."""
    with patch.multiple(
        settings,
        CLOUDINARY_CLOUD_NAME="demo-cloud",
        CLOUDINARY_API_KEY="test-key",
        CLOUDINARY_API_SECRET="test-secret",
        CLOUDINARY_UPLOAD_TIMEOUT_SECONDS=5.0,
    ):
        yield
