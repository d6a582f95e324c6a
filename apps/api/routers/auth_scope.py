"""Authentication dependencies for uploader identity."""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from services.session_token import decode_session_token


auth_scheme = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)


@dataclass
class AuthContext:
    user_id: str
    email: Optional[str] = None


async def get_optional_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(auth_scheme),
) -> Optional[AuthContext]:
    """Resolve the uploader from a Bearer session token, or None when there is no valid session."""
    if not credentials or credentials.scheme.lower() != "bearer":
        return None

    try:
        claims = decode_session_token(credentials.credentials)
    except ValueError as exc:
        logger.info("Rejected session token: %s", exc)
        return None

    return AuthContext(user_id=claims.user_id, email=claims.email)
