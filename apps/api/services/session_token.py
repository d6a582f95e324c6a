"""Uploader session tokens.

Tokens are HS256 JWTs carrying ``sub``, ``type``, ``iss``, ``iat``, ``exp``
and an optional ``email``. Issuing is used by trusted callers (and tests);
the upload endpoints only ever verify.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from config import settings


SESSION_TOKEN_TYPE = "media_session"


@dataclass(frozen=True)
class SessionClaims:
    user_id: str
    email: Optional[str]
    expires_at: int


@dataclass(frozen=True)
class IssuedSessionToken:
    token: str
    expires_at: int


def create_session_token(
    user_id: str,
    email: Optional[str] = None,
    expires_hours: Optional[int] = None,
) -> IssuedSessionToken:
    now = datetime.now(timezone.utc)
    ttl_hours = max(int(expires_hours or settings.JWT_EXPIRATION_HOURS or 24), 1)
    expires_at = int((now + timedelta(hours=ttl_hours)).timestamp())
    claims: Dict[str, Any] = {
        "sub": user_id,
        "type": SESSION_TOKEN_TYPE,
        "iss": settings.JWT_ISSUER,
        "iat": int(now.timestamp()),
        "exp": expires_at,
    }
    if email:
        claims["email"] = email

    token = jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return IssuedSessionToken(token=token, expires_at=expires_at)


def decode_session_token(token: str) -> SessionClaims:
    """
    Verify a session token and return its claims.

    Raises ValueError for a bad signature, an expired token, a foreign
    issuer, a token of another type or a token without subject.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            issuer=settings.JWT_ISSUER,
        )
    except JWTError as exc:
        raise ValueError("Invalid or expired session token.") from exc

    if str(payload.get("type", "")).strip() != SESSION_TOKEN_TYPE:
        raise ValueError("Invalid session token type.")

    user_id = str(payload.get("sub", "")).strip()
    if not user_id:
        raise ValueError("Session token missing subject.")

    return SessionClaims(
        user_id=user_id,
        email=str(payload.get("email") or "").strip() or None,
        expires_at=int(payload.get("exp") or 0),
    )
