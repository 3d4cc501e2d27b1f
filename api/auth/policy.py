"""
Ownership rules for places.

Kept free of HTTP and persistence so it can be checked on plain dicts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""


def can_modify_place(place: dict[str, Any], requester_id: int, *, action: str = "edit") -> Decision:
    """
    Only the place's creator may edit or delete it.
    """
    creator_id = place.get("creator_id")
    if creator_id is None or int(creator_id) != int(requester_id):
        return Decision(allowed=False, reason=f"You are not allowed to {action} this place.")
    return Decision(allowed=True)
