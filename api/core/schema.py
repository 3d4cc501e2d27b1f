"""
Table definitions applied on startup.

`users.place_ids` is the ordered collection of owned places. It mirrors
`places.creator_id` and both sides are only changed together, inside one
transaction (see `places/service.py`).
"""

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id            bigserial PRIMARY KEY,
    name          text NOT NULL,
    email         text NOT NULL UNIQUE,
    password_hash text NOT NULL,
    image         text NOT NULL,
    place_ids     bigint[] NOT NULL DEFAULT '{}',
    created_at    timestamptz NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS places (
    id           bigserial PRIMARY KEY,
    title        text NOT NULL,
    description  text NOT NULL,
    address      text NOT NULL,
    location_lat double precision NOT NULL,
    location_lng double precision NOT NULL,
    image        text NOT NULL,
    creator_id   bigint NOT NULL REFERENCES users(id),
    created_at   timestamptz NOT NULL DEFAULT now()
);

CREATE INDEX IF NOT EXISTS places_creator_id_idx ON places (creator_id);
"""
