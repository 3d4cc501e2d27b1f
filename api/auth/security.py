"""
Auth security helpers: password hashing and bearer tokens.
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from typing import Any

import bcrypt
import jwt

BCRYPT_ROUNDS = 12
BCRYPT_MAX_PASSWORD_BYTES = 72
DEFAULT_TOKEN_TTL_S = 60 * 60


class AuthSecurityError(RuntimeError):
    pass


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    email: str


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return os.environ.get("JWT_SECRET", "dev-change-this-secret").strip() or "dev-change-this-secret"


def jwt_algorithm() -> str:
    return os.environ.get("JWT_ALG", "HS256").strip() or "HS256"


def token_ttl_seconds() -> int:
    return _env_int("TOKEN_EXPIRE_MIN", DEFAULT_TOKEN_TTL_S // 60) * 60


def now_epoch_s() -> int:
    return int(time.time())


def _password_bytes(plain_password: str) -> bytes:
    # bcrypt only reads the first 72 bytes; newer releases raise instead of truncating.
    return (plain_password or "").encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]


def hash_password(plain_password: str) -> str:
    password = _password_bytes(plain_password)
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = _password_bytes(plain_password)
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def issue_token(
    *,
    user_id: int,
    email: str,
    secret: str | None = None,
    ttl_s: int | None = None,
) -> str:
    issued_at = now_epoch_s()
    expires_at = issued_at + (ttl_s if ttl_s is not None else token_ttl_seconds())

    payload = {
        "userId": user_id,
        "email": email,
        "iat": issued_at,
        "exp": expires_at,
    }
    return jwt.encode(payload, secret or jwt_secret(), algorithm=jwt_algorithm())


def validate_token(token: str, secret: str | None = None) -> TokenClaims:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Token is empty.")

    try:
        payload: dict[str, Any] = jwt.decode(
            raw,
            secret or jwt_secret(),
            algorithms=[jwt_algorithm()],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthSecurityError("Token has expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid token.") from exc

    user_id = payload.get("userId")
    email = payload.get("email")
    if isinstance(user_id, bool) or not isinstance(user_id, int) or not isinstance(email, str):
        raise AuthSecurityError("Token is missing identity claims.")

    return TokenClaims(user_id=user_id, email=email)
