"""
User API schemas (request/response models).

Signup arrives as multipart form data, so its field rules live on the
`Form(...)` parameters in `users/router.py` and reuse the constants here.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# Surrounding whitespace is tolerated; repository.normalize_email strips it.
EMAIL_PATTERN = r"^\s*[^@\s]+@[^@\s]+\.[^@\s]+\s*$"
MIN_PASSWORD_LENGTH = 6


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    image: str
    places: list[int]

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "UserResponse":
        return cls(
            id=int(row["id"]),
            name=str(row["name"]),
            email=str(row["email"]),
            image=str(row["image"]),
            places=[int(p) for p in (row.get("place_ids") or [])],
        )


class UsersResponse(BaseModel):
    users: list[UserResponse]


class AuthResponse(BaseModel):
    userId: int
    email: str
    token: str
