"""
Places API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status

from auth import dependencies as auth_dependencies
from auth.security import TokenClaims
from core import uploads
from core.db import Database, get_db

from . import schemas, service

router = APIRouter(prefix="/places")


@router.get("/user/{user_id}")
async def get_places_by_user_id(
    user_id: int,
    db: Database = Depends(get_db),
) -> schemas.PlacesEnvelope:
    places = await service.list_user_places(db, user_id)
    return schemas.PlacesEnvelope(places=places)


@router.get("/{place_id}")
async def get_place_by_id(
    place_id: int,
    db: Database = Depends(get_db),
) -> schemas.PlaceEnvelope:
    place = await service.get_place(db, place_id)
    return schemas.PlaceEnvelope(place=place)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_place(
    request: Request,
    title: str = Form(..., min_length=1, max_length=200),
    description: str = Form(..., min_length=schemas.MIN_DESCRIPTION_LENGTH, max_length=5000),
    address: str = Form(..., min_length=1, max_length=500),
    image: UploadFile = File(...),
    current_user: TokenClaims = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> schemas.PlaceEnvelope:
    image_path = await uploads.save_image(image)
    # The error handlers delete this file if anything below fails.
    request.state.upload_path = image_path

    place = await service.create_place(
        db,
        title=title,
        description=description,
        address=address,
        image=image_path,
        creator_id=current_user.user_id,
    )
    return schemas.PlaceEnvelope(place=place)


@router.patch("/{place_id}")
async def update_place(
    place_id: int,
    payload: schemas.UpdatePlaceRequest,
    current_user: TokenClaims = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> schemas.PlaceEnvelope:
    place = await service.update_place(
        db,
        place_id,
        title=payload.title,
        description=payload.description,
        requester_id=current_user.user_id,
    )
    return schemas.PlaceEnvelope(place=place)


@router.delete("/{place_id}")
async def delete_place(
    place_id: int,
    current_user: TokenClaims = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> schemas.MessageResponse:
    await service.delete_place(db, place_id, requester_id=current_user.user_id)
    return schemas.MessageResponse(message="Deleted place.")
