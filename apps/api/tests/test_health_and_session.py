from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt

from config import settings, validate_security_settings
import main
from main import app
from services.session_token import create_session_token, decode_session_token


def test_session_token_round_trip_keeps_subject_and_email():
    issued = create_session_token("user-1", "one@example.com")
    claims = decode_session_token(issued.token)
    assert claims.user_id == "user-1"
    assert claims.email == "one@example.com"
    assert claims.expires_at == issued.expires_at


def test_session_token_from_other_issuer_is_rejected():
    foreign = jwt.encode(
        {"sub": "user-1", "type": "media_session", "iss": "someone-else", "exp": 4102444800},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(ValueError):
        decode_session_token(foreign)


def test_session_token_of_other_type_is_rejected():
    other = jwt.encode(
        {"sub": "user-1", "type": "refresh", "iss": settings.JWT_ISSUER, "exp": 4102444800},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(ValueError, match="type"):
        decode_session_token(other)


def test_default_jwt_secret_fails_security_validation():
    with patch("config.settings.JWT_SECRET", "change_me_in_production"):
        with pytest.raises(ValueError):
            validate_security_settings()
    with patch("config.settings.JWT_SECRET", "x" * 32):
        validate_security_settings()


@pytest.mark.asyncio
async def test_readiness_reports_missing_cloudinary_credentials():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        ready = await client.get("/health/ready")
        assert ready.status_code == 200
        assert ready.json() == {"ready": True}

        with patch("config.settings.CLOUDINARY_API_KEY", ""):
            not_ready = await client.get("/health/ready")
        assert not_ready.status_code == 503
        assert not_ready.json() == {"ready": False, "missing": ["CLOUDINARY_API_KEY"]}

        live = await client.get("/health/live")
        assert live.json() == {"alive": True}


def test_runner_serves_app_on_configured_host_and_port():
    with (
        patch("config.settings.API_HOST", "127.0.0.1"),
        patch("config.settings.API_PORT", 9100),
        patch("main.uvicorn.run") as mock_run,
    ):
        main.run()
    mock_run.assert_called_once_with(app, host="127.0.0.1", port=9100)
