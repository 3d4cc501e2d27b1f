"""
Auth dependencies for protected FastAPI routes.

Any problem with the Authorization header surfaces as the same generic 403.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Header

from core.errors import AuthenticationError

from . import security

AUTH_FAILED_MESSAGE = "Authentication failed!"

logger = logging.getLogger(__name__)


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise AuthenticationError(AUTH_FAILED_MESSAGE)

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise AuthenticationError(AUTH_FAILED_MESSAGE)
    return token


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    return _extract_bearer_token(authorization)


async def get_current_user(token: str = Depends(get_bearer_token)) -> security.TokenClaims:
    try:
        return security.validate_token(token)
    except security.AuthSecurityError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise AuthenticationError(AUTH_FAILED_MESSAGE) from exc
