"""
Request identity for the profile service.

Callers are trusted backends: they present the shared service secret as a
bearer token and name the end user in ``X-User-Id``. Imports and review
sessions are scoped to that user.
"""

import logging
import secrets
from typing import Optional

from fastapi import Header, HTTPException, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .config import settings


logger = logging.getLogger(__name__)
security = HTTPBearer()


def get_service_secret() -> str:
    """Shared secret callers must present; ValueError when unset."""
    if not settings.service_api_secret:
        raise ValueError("SERVICE_API_SECRET is not set")
    return settings.service_api_secret


async def verify_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> HTTPAuthorizationCredentials:
    """
    Check the bearer token against the service secret.

    Local development without a secret accepts any token.

    Raises:
        HTTPException: 500 when auth is required but no secret is set,
            401 when the token does not match
    """
    if not settings.auth_required:
        return credentials

    try:
        expected_secret = get_service_secret()
    except ValueError:
        logger.error("Auth required but SERVICE_API_SECRET is not set")
        raise HTTPException(status_code=500, detail="Server authentication not configured")

    if not secrets.compare_digest(credentials.credentials.encode(), expected_secret.encode()):
        raise HTTPException(status_code=401, detail="Invalid authentication token")

    return credentials


async def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """
    User the request acts for.

    Raises:
        HTTPException: 401 if the X-User-Id header is missing or blank
    """
    user_id = (x_user_id or "").strip()
    if not user_id:
        logger.warning("Rejected request without X-User-Id header")
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id
