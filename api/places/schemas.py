"""
Pydantic schemas for place endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

MIN_DESCRIPTION_LENGTH = 5


class Location(BaseModel):
    lat: float
    lng: float


class UpdatePlaceRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=MIN_DESCRIPTION_LENGTH, max_length=5000)


class PlaceResponse(BaseModel):
    id: int
    title: str
    description: str
    address: str
    location: Location
    image: str
    creator: int

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "PlaceResponse":
        return cls(
            id=int(row["id"]),
            title=str(row["title"]),
            description=str(row["description"]),
            address=str(row["address"]),
            location=Location(lat=float(row["location_lat"]), lng=float(row["location_lng"])),
            image=str(row["image"]),
            creator=int(row["creator_id"]),
        )


class PlaceEnvelope(BaseModel):
    place: PlaceResponse


class PlacesEnvelope(BaseModel):
    places: list[PlaceResponse]


class MessageResponse(BaseModel):
    message: str
