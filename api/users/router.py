"""
User API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status

from core import uploads
from core.db import Database, get_db

from . import schemas, service

router = APIRouter(prefix="/users")


@router.get("")
async def get_users(db: Database = Depends(get_db)) -> schemas.UsersResponse:
    return await service.list_users(db)


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    request: Request,
    name: str = Form(..., min_length=1, max_length=200),
    email: str = Form(..., min_length=3, max_length=320, pattern=schemas.EMAIL_PATTERN),
    password: str = Form(..., min_length=schemas.MIN_PASSWORD_LENGTH, max_length=128),
    image: UploadFile = File(...),
    db: Database = Depends(get_db),
) -> schemas.AuthResponse:
    image_path = await uploads.save_image(image)
    # The error handlers delete this file if anything below fails.
    request.state.upload_path = image_path

    return await service.signup(
        db,
        name=name,
        email=email,
        password=password,
        image=image_path,
    )


@router.post("/login")
async def login(
    payload: schemas.LoginRequest,
    db: Database = Depends(get_db),
) -> schemas.AuthResponse:
    return await service.login(db, payload)
