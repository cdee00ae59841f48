"""
Domain models (Pydantic).

These types are the contract between the store adapters, the post services and
the API/CLI:
- the stored entity (`Post`) and its optional included author (`PostAuthor`)
- write payloads (`PostCreate`, `PostUpdate`)
- query objects (`LocationQuery`, `PageQuery`)
- result shapes (`NearbyPost`, `PostPage`, `RecentPosts`)

`Post.location` is kept exactly as the store returned it. Posts reach us from an
external datastore, so a location can be missing or malformed; `Post.geo_point()`
is the single place that decides whether it is usable for proximity search.
"""

from __future__ import annotations

import json
import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, computed_field, field_validator

from lostfound.core.geo import GeoPoint


def _coordinate(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def parse_location(raw: Any) -> GeoPoint | None:
    """Parse a stored location into a `GeoPoint`, or None when it is unusable.

    Accepts a mapping with `latitude`/`longitude` keys or a JSON string encoding one.
    Coordinates may be numbers or numeric strings. Zero is a valid coordinate.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return None
    if isinstance(raw, BaseModel):
        raw = raw.model_dump()
    if not isinstance(raw, dict):
        return None
    lat = _coordinate(raw.get("latitude"))
    lon = _coordinate(raw.get("longitude"))
    if lat is None or lon is None:
        return None
    return GeoPoint(lat=lat, lon=lon)


class Location(BaseModel):
    """A validated coordinate pair in decimal degrees (input boundary only)."""

    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)


class PostAuthor(BaseModel):
    """Non-owning view of the user who wrote a post."""

    id: int
    username: str | None = None


class Post(BaseModel):
    id: int
    title: str
    description: str
    image: str | None = None
    status: str
    location: Any = None
    created_at: datetime
    user_id: int
    user: PostAuthor | None = None

    def geo_point(self) -> GeoPoint | None:
        return parse_location(self.location)


class PlaceInfo(BaseModel):
    """Human-readable place for a coordinate (reverse geocoding result)."""

    city: str | None = None
    state: str | None = None
    country: str | None = None


class NearbyPost(Post):
    """A post returned by a radius query, annotated with its distance from the center."""

    distance_km: float
    city_info: PlaceInfo | None = None


def _non_blank(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class PostCreate(BaseModel):
    title: str
    description: str
    location: Location
    user_id: int
    image: str | None = None
    # Accepted for compatibility with older clients; new posts always start in the default status.
    status: str | None = None

    @field_validator("title", "description")
    @classmethod
    def _check_text(cls, value: str | None) -> str | None:
        return _non_blank(value)


class PostUpdate(BaseModel):
    """Partial update. Fields left out (or sent as null) keep their stored value."""

    title: str | None = None
    description: str | None = None
    image: str | None = None
    status: str | None = Field(default=None, min_length=1)
    location: Location | None = None

    @field_validator("title", "description")
    @classmethod
    def _check_text(cls, value: str | None) -> str | None:
        return _non_blank(value)

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class LocationQuery(BaseModel):
    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)
    radius_km: float | None = Field(default=None, ge=0, allow_inf_nan=False)

    def center(self) -> GeoPoint:
        return GeoPoint(lat=self.latitude, lon=self.longitude)


class PageQuery(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PostPage(BaseModel):
    posts: list[Post]
    total: int
    page: int
    limit: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class RecentPosts(BaseModel):
    posts: list[Post]
    total: int
