"""
User persistence helpers.

Every function takes the executor first: the `Database` handle, or a
`UnitOfWork` when the call must join an open transaction.
"""

from __future__ import annotations

from typing import Any

_PUBLIC_COLUMNS = "id, name, email, image, place_ids, created_at"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def list_users(db) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {_PUBLIC_COLUMNS}
        FROM users
        ORDER BY id
        """
    )


async def create_user(db, *, name: str, email: str, password_hash: str, image: str) -> dict[str, Any]:
    row = await db.fetch_one(
        f"""
        INSERT INTO users (name, email, password_hash, image, place_ids)
        VALUES ($1, $2, $3, $4, '{{}}')
        RETURNING {_PUBLIC_COLUMNS}
        """,
        name,
        normalize_email(email),
        password_hash,
        image,
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def get_user_by_email(db, email: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {_PUBLIC_COLUMNS}, password_hash
        FROM users
        WHERE lower(email) = lower($1)
        """,
        normalize_email(email),
    )


async def get_user_by_id(db, user_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {_PUBLIC_COLUMNS}
        FROM users
        WHERE id = $1
        """,
        user_id,
    )


async def add_place_to_user(db, user_id: int, place_id: int) -> dict[str, Any] | None:
    """
    Append `place_id` to the user's owned places. None if the user is gone.
    """
    return await db.fetch_one(
        f"""
        UPDATE users
        SET place_ids = array_append(place_ids, $2::bigint)
        WHERE id = $1
        RETURNING {_PUBLIC_COLUMNS}
        """,
        user_id,
        place_id,
    )


async def remove_place_from_user(db, user_id: int, place_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        UPDATE users
        SET place_ids = array_remove(place_ids, $2::bigint)
        WHERE id = $1
        RETURNING {_PUBLIC_COLUMNS}
        """,
        user_id,
        place_id,
    )
