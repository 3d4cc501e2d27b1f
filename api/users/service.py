"""
User business logic: listing, signup and login.
"""

from __future__ import annotations

import logging

import asyncpg
from fastapi.concurrency import run_in_threadpool

from auth import security
from core.errors import AuthenticationError, ConflictError, InternalError

from . import repository, schemas

BAD_CREDENTIALS_MESSAGE = "Could not identify user, credentials seem to be wrong."

logger = logging.getLogger(__name__)


def _auth_response(user_row: dict) -> schemas.AuthResponse:
    user_id = int(user_row["id"])
    email = str(user_row["email"])
    token = security.issue_token(user_id=user_id, email=email)
    return schemas.AuthResponse(userId=user_id, email=email, token=token)


async def list_users(db) -> schemas.UsersResponse:
    try:
        rows = await repository.list_users(db)
    except asyncpg.PostgresError as exc:
        logger.exception("Listing users failed")
        raise InternalError("Fetching users failed, please try again later.") from exc
    return schemas.UsersResponse(users=[schemas.UserResponse.from_row(r) for r in rows])


async def signup(db, *, name: str, email: str, password: str, image: str) -> schemas.AuthResponse:
    try:
        existing = await repository.get_user_by_email(db, email)
        if existing is not None:
            raise ConflictError("User exists already, please login instead.")

        # bcrypt is CPU-bound; keep it off the event loop.
        password_hash = await run_in_threadpool(security.hash_password, password)
        user_row = await repository.create_user(
            db,
            name=name,
            email=email,
            password_hash=password_hash,
            image=image,
        )
    except asyncpg.UniqueViolationError as exc:
        # Lost a race with a concurrent signup for the same email.
        raise ConflictError("User exists already, please login instead.") from exc
    except asyncpg.PostgresError as exc:
        logger.exception("Signup failed for %s", email)
        raise InternalError("Signing up failed, please try again later.") from exc

    logger.info("Created user %s", user_row["id"])
    return _auth_response(user_row)


async def login(db, payload: schemas.LoginRequest) -> schemas.AuthResponse:
    try:
        user_row = await repository.get_user_by_email(db, payload.email)
    except asyncpg.PostgresError as exc:
        logger.exception("Login lookup failed")
        raise InternalError("Logging in failed, please try again later.") from exc

    if user_row is None:
        raise AuthenticationError(BAD_CREDENTIALS_MESSAGE)

    password_hash = str(user_row.get("password_hash") or "")
    if not await run_in_threadpool(security.verify_password, payload.password, password_hash):
        raise AuthenticationError(BAD_CREDENTIALS_MESSAGE)

    return _auth_response(user_row)
