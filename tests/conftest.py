"""
Shared fixtures: an in-memory store standing in for PostgreSQL.

The repository modules are swapped for functions that read and write the
store's dicts. `InMemoryStore.unit_of_work()` snapshots both tables and
restores them when the block raises, which is what a rolled back
transaction looks like from the outside.
"""
from __future__ import annotations

import copy
import itertools
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import asyncpg
import pytest

# Make the packages under api/ importable as top-level modules.
API_ROOT = Path(__file__).resolve().parents[1] / "api"
if str(API_ROOT) not in sys.path:
    sys.path.insert(0, str(API_ROOT))

os.environ.setdefault("JWT_SECRET", "test-secret")

from places import repository as places_repository  # noqa: E402
from users import repository as users_repository  # noqa: E402


class InMemoryStore:
    def __init__(self) -> None:
        self.users: dict[int, dict] = {}
        self.places: dict[int, dict] = {}
        self._user_ids = itertools.count(1)
        self._place_ids = itertools.count(1)
        self._failures: set[str] = set()
        self.committed = 0
        self.rolled_back = 0

    def fail(self, operation: str) -> None:
        self._failures.add(operation)

    def check(self, operation: str) -> None:
        if operation in self._failures:
            raise asyncpg.PostgresError(f"injected failure in {operation}")

    @asynccontextmanager
    async def unit_of_work(self):
        snapshot = copy.deepcopy((self.users, self.places))
        try:
            yield self
        except BaseException:
            self.users, self.places = snapshot
            self.rolled_back += 1
            raise
        self.committed += 1

    # Direct helpers for arranging state in tests.

    def add_user(self, *, name="Ann", email="ann@example.com", password_hash="x", image="ann.png") -> dict:
        user_id = next(self._user_ids)
        self.users[user_id] = {
            "id": user_id,
            "name": name,
            "email": users_repository.normalize_email(email),
            "password_hash": password_hash,
            "image": image,
            "place_ids": [],
        }
        return self.users[user_id]

    def add_place(self, owner_id: int, *, title="Tower", image="tower.png") -> dict:
        place_id = next(self._place_ids)
        self.places[place_id] = {
            "id": place_id,
            "title": title,
            "description": "A tall building",
            "address": "20 W 34th St",
            "location_lat": 40.7484474,
            "location_lng": -73.9871516,
            "image": image,
            "creator_id": owner_id,
        }
        self.users[owner_id]["place_ids"].append(place_id)
        return self.places[place_id]


def _public_user(row: dict) -> dict:
    user = {k: v for k, v in row.items() if k != "password_hash"}
    user["place_ids"] = list(row["place_ids"])
    return user


def install_fake_repositories(store: InMemoryStore, monkeypatch) -> None:
    async def list_users(db):
        store.check("list_users")
        return [_public_user(u) for _, u in sorted(store.users.items())]

    async def create_user(db, *, name, email, password_hash, image):
        store.check("create_user")
        row = store.add_user(name=name, email=email, password_hash=password_hash, image=image)
        return _public_user(row)

    async def get_user_by_email(db, email):
        store.check("get_user_by_email")
        wanted = users_repository.normalize_email(email)
        for row in store.users.values():
            if row["email"] == wanted:
                return dict(row, place_ids=list(row["place_ids"]))
        return None

    async def get_user_by_id(db, user_id):
        store.check("get_user_by_id")
        row = store.users.get(user_id)
        return _public_user(row) if row is not None else None

    async def add_place_to_user(db, user_id, place_id):
        store.check("add_place_to_user")
        row = store.users.get(user_id)
        if row is None:
            return None
        row["place_ids"].append(place_id)
        return _public_user(row)

    async def remove_place_from_user(db, user_id, place_id):
        store.check("remove_place_from_user")
        row = store.users.get(user_id)
        if row is None:
            return None
        row["place_ids"] = [p for p in row["place_ids"] if p != place_id]
        return _public_user(row)

    async def get_place_by_id(db, place_id):
        store.check("get_place_by_id")
        row = store.places.get(place_id)
        return dict(row) if row is not None else None

    async def get_place_with_owner(db, place_id):
        store.check("get_place_with_owner")
        row = store.places.get(place_id)
        if row is None:
            return None
        owner = store.users.get(row["creator_id"])
        return dict(
            row,
            owner_id=owner["id"] if owner else None,
            owner_place_ids=list(owner["place_ids"]) if owner else None,
        )

    async def list_places_for_user(db, user_id):
        store.check("list_places_for_user")
        owner = store.users.get(user_id)
        if owner is None:
            return []
        return [dict(store.places[p]) for p in owner["place_ids"] if p in store.places]

    async def insert_place(db, *, title, description, address, location, image, creator_id):
        store.check("insert_place")
        place_id = next(store._place_ids)
        store.places[place_id] = {
            "id": place_id,
            "title": title,
            "description": description,
            "address": address,
            "location_lat": float(location["lat"]),
            "location_lng": float(location["lng"]),
            "image": image,
            "creator_id": creator_id,
        }
        return dict(store.places[place_id])

    async def update_place(db, place_id, *, title, description):
        store.check("update_place")
        row = store.places.get(place_id)
        if row is None:
            return None
        row["title"] = title
        row["description"] = description
        return dict(row)

    async def delete_place(db, place_id):
        store.check("delete_place")
        return store.places.pop(place_id, None) is not None

    for fn in (
        list_users,
        create_user,
        get_user_by_email,
        get_user_by_id,
        add_place_to_user,
        remove_place_from_user,
    ):
        monkeypatch.setattr(users_repository, fn.__name__, fn)

    for fn in (
        get_place_by_id,
        get_place_with_owner,
        list_places_for_user,
        insert_place,
        update_place,
        delete_place,
    ):
        monkeypatch.setattr(places_repository, fn.__name__, fn)


@pytest.fixture()
def store(monkeypatch) -> InMemoryStore:
    store = InMemoryStore()
    install_fake_repositories(store, monkeypatch)
    return store


@pytest.fixture()
def upload_dir(tmp_path, monkeypatch) -> Path:
    path = tmp_path / "images"
    monkeypatch.setenv("UPLOAD_DIR", str(path))
    return path


@pytest.fixture(autouse=True)
def _no_real_geocoding(monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
