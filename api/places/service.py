"""
Place business logic.

A place's `creator_id` and its owner's `users.place_ids` must always agree.
Create and delete change both sides inside one unit of work, so either both
changes commit or neither does. Update only touches the place row.
"""

from __future__ import annotations

import logging

import asyncpg

from auth import policy
from core import geocoding, uploads
from core.errors import InternalError, NotFoundError, UnauthorizedError
from users import repository as users_repository

from . import repository, schemas

logger = logging.getLogger(__name__)


async def get_place(db, place_id: int) -> schemas.PlaceResponse:
    try:
        row = await repository.get_place_by_id(db, place_id)
    except asyncpg.PostgresError as exc:
        logger.exception("Fetching place %s failed", place_id)
        raise InternalError("Something went wrong, could not find a place.") from exc

    if row is None:
        raise NotFoundError("Could not find a place for the provided id.")
    return schemas.PlaceResponse.from_row(row)


async def list_user_places(db, user_id: int) -> list[schemas.PlaceResponse]:
    """
    Places owned by `user_id`, oldest first.

    An unknown user is NotFound; a known user without places is an empty list.
    """
    try:
        user = await users_repository.get_user_by_id(db, user_id)
        if user is None:
            raise NotFoundError("Could not find a user for the provided id.")
        rows = await repository.list_places_for_user(db, user_id)
    except asyncpg.PostgresError as exc:
        logger.exception("Fetching places for user %s failed", user_id)
        raise InternalError("Fetching places failed, please try again.") from exc

    return [schemas.PlaceResponse.from_row(r) for r in rows]


async def create_place(
    db,
    *,
    title: str,
    description: str,
    address: str,
    image: str,
    creator_id: int,
) -> schemas.PlaceResponse:
    location = await geocoding.coords_for_address(address)

    try:
        user = await users_repository.get_user_by_id(db, creator_id)
        if user is None:
            raise NotFoundError("Could not find user for provided id.")

        async with db.unit_of_work() as uow:
            place = await repository.insert_place(
                uow,
                title=title,
                description=description,
                address=address,
                location=location,
                image=image,
                creator_id=creator_id,
            )
            owner = await users_repository.add_place_to_user(uow, creator_id, int(place["id"]))
            if owner is None:
                # User vanished between lookup and update; roll the insert back.
                raise NotFoundError("Could not find user for provided id.")
    except asyncpg.PostgresError as exc:
        logger.exception("Creating place for user %s failed", creator_id)
        raise InternalError("Creating place failed, please try again.") from exc

    logger.info("User %s created place %s", creator_id, place["id"])
    return schemas.PlaceResponse.from_row(place)


async def update_place(
    db,
    place_id: int,
    *,
    title: str,
    description: str,
    requester_id: int,
) -> schemas.PlaceResponse:
    try:
        place = await repository.get_place_by_id(db, place_id)
        if place is None:
            raise NotFoundError("Could not find a place for the provided id.")

        decision = policy.can_modify_place(place, requester_id, action="edit")
        if not decision.allowed:
            raise UnauthorizedError(decision.reason)

        updated = await repository.update_place(db, place_id, title=title, description=description)
        if updated is None:
            raise NotFoundError("Could not find a place for the provided id.")
    except asyncpg.PostgresError as exc:
        logger.exception("Updating place %s failed", place_id)
        raise InternalError("Something went wrong, could not update place.") from exc

    return schemas.PlaceResponse.from_row(updated)


async def delete_place(db, place_id: int, *, requester_id: int) -> None:
    try:
        place = await repository.get_place_with_owner(db, place_id)
        if place is None:
            raise NotFoundError("Could not find place for this id.")

        owner_id = place.get("owner_id")
        decision = policy.can_modify_place({"creator_id": owner_id}, requester_id, action="delete")
        if not decision.allowed:
            raise UnauthorizedError(decision.reason)

        async with db.unit_of_work() as uow:
            if not await repository.delete_place(uow, place_id):
                raise NotFoundError("Could not find place for this id.")
            owner = await users_repository.remove_place_from_user(uow, int(owner_id), place_id)
            if owner is None:
                raise InternalError("Something went wrong, could not delete place.")
    except asyncpg.PostgresError as exc:
        logger.exception("Deleting place %s failed", place_id)
        raise InternalError("Something went wrong, could not delete place.") from exc

    logger.info("User %s deleted place %s", requester_id, place_id)

    # Committed; losing the image file is not worth failing the request over.
    uploads.remove_file(str(place["image"]))
