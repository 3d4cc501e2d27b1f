"""
Address -> coordinate lookup.

Without `GOOGLE_API_KEY` every address resolves to a fixed stub coordinate.
With a key, the Google Geocoding API is used:
- GET /maps/api/geocode/json?address=...&key=...
  -> {"status": "OK", "results": [{"geometry": {"location": {"lat", "lng"}}}]}
"""

from __future__ import annotations

import os
from typing import Any

import httpx

from .errors import GeocodingError

GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

DEFAULT_COORDINATES = {"lat": 40.7484474, "lng": -73.9871516}


def google_api_key() -> str:
    return os.environ.get("GOOGLE_API_KEY", "").strip()


def geocoding_timeout_s() -> float:
    raw = os.environ.get("GEOCODING_TIMEOUT_S", "").strip()
    if not raw:
        return 10.0
    try:
        return float(raw)
    except ValueError:
        return 10.0


async def coords_for_address(address: str) -> dict[str, float]:
    api_key = google_api_key()
    if not api_key:
        return dict(DEFAULT_COORDINATES)
    return await _google_lookup(address, api_key=api_key, timeout_s=geocoding_timeout_s())


async def _google_lookup(address: str, *, api_key: str, timeout_s: float) -> dict[str, float]:
    async with httpx.AsyncClient(timeout=timeout_s) as client:
        resp = await client.get(GOOGLE_GEOCODE_URL, params={"address": address, "key": api_key})

    if resp.status_code != 200:
        body = resp.text[:500]
        raise GeocodingError(f"Geocoding request failed: {resp.status_code} {body}", 502)

    data: dict[str, Any] = resp.json()
    results = data.get("results")
    if data.get("status") == "ZERO_RESULTS" or not isinstance(results, list) or not results:
        raise GeocodingError("Could not find location for the specified address.")

    location = (results[0].get("geometry") or {}).get("location") or {}
    try:
        return {"lat": float(location["lat"]), "lng": float(location["lng"])}
    except (KeyError, TypeError, ValueError) as e:
        raise GeocodingError("Geocoding returned a malformed location.", 502) from e
