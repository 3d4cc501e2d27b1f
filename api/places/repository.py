"""
Place persistence (raw SQL).

Every function takes the executor first: the `Database` handle, or a
`UnitOfWork` when the call must join an open transaction.
"""

from __future__ import annotations

from typing import Any

_PLACE_COLUMNS = """
    p.id, p.title, p.description, p.address,
    p.location_lat, p.location_lng, p.image, p.creator_id, p.created_at
"""


async def get_place_by_id(db, place_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {_PLACE_COLUMNS}
        FROM places p
        WHERE p.id = $1
        """,
        place_id,
    )


async def get_place_with_owner(db, place_id: int) -> dict[str, Any] | None:
    """
    Place row plus its owner's id and owned-places collection.

    `owner_id` is None when the creator row no longer exists.
    """
    return await db.fetch_one(
        f"""
        SELECT {_PLACE_COLUMNS},
               u.id AS owner_id,
               u.place_ids AS owner_place_ids
        FROM places p
        LEFT JOIN users u ON u.id = p.creator_id
        WHERE p.id = $1
        """,
        place_id,
    )


async def list_places_for_user(db, user_id: int) -> list[dict[str, Any]]:
    """
    A user's places in the order they were added to the user.
    """
    return await db.fetch_all(
        f"""
        SELECT {_PLACE_COLUMNS}
        FROM users u
        CROSS JOIN LATERAL unnest(u.place_ids) WITH ORDINALITY AS owned(place_id, ord)
        JOIN places p ON p.id = owned.place_id
        WHERE u.id = $1
        ORDER BY owned.ord
        """,
        user_id,
    )


async def insert_place(
    db,
    *,
    title: str,
    description: str,
    address: str,
    location: dict[str, float],
    image: str,
    creator_id: int,
) -> dict[str, Any]:
    row = await db.fetch_one(
        """
        INSERT INTO places (title, description, address, location_lat, location_lng, image, creator_id)
        VALUES ($1, $2, $3, $4, $5, $6, $7)
        RETURNING id, title, description, address,
                  location_lat, location_lng, image, creator_id, created_at
        """,
        title,
        description,
        address,
        float(location["lat"]),
        float(location["lng"]),
        image,
        creator_id,
    )
    if row is None or "id" not in row:
        raise RuntimeError("Failed to insert place.")
    return row


async def update_place(db, place_id: int, *, title: str, description: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        UPDATE places
        SET title = $2,
            description = $3
        WHERE id = $1
        RETURNING id, title, description, address,
                  location_lat, location_lng, image, creator_id, created_at
        """,
        place_id,
        title,
        description,
    )


async def delete_place(db, place_id: int) -> bool:
    row = await db.fetch_one(
        """
        DELETE FROM places
        WHERE id = $1
        RETURNING id
        """,
        place_id,
    )
    return row is not None
