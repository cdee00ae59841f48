"""
API routes.

Endpoints (all under `/api/posts`):
- POST   ``:                 create a post (status always starts as the default label)
- GET    ``:                 paged listing, newest first
- GET    `/24hours`:         posts from the recency window (never 404s)
- GET    `/status`:          posts with a given status
- GET    `/user/{user_id}`:  posts by one author
- GET    `/nearby`:          radius search, nearest first, with place names
- PATCH  `/{post_id}`:       partial update
- PATCH  `/{post_id}/status`: status change
- DELETE `/{post_id}`:       delete

Authentication happens upstream; `user_id` arrives already verified.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, NoReturn

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field, ValidationError

from lostfound.config.settings import get_settings
from lostfound.core.env import resolve_project_path
from lostfound.domain.errors import BadInputError, NotFoundError
from lostfound.domain.models import LocationQuery, NearbyPost, Post, PostCreate, PostUpdate, RecentPosts
from lostfound.ingestion.geocoding_client import ReverseGeocoder
from lostfound.posts.lifecycle import PostLifecycle
from lostfound.posts.listing import PostListing, coerce_page_query
from lostfound.search.enrichment import enrich_with_places
from lostfound.search.proximity import ProximitySearch
from lostfound.store.base import PostStore
from lostfound.store.json_file import JsonFilePostStore
from lostfound.store.memory import InMemoryPostStore

router = APIRouter(prefix="/api/posts")


class StatusChange(BaseModel):
    status: str = Field(..., min_length=1)


@lru_cache
def _store() -> PostStore:
    settings = get_settings()
    if settings.store.backend == "json":
        return JsonFilePostStore(resolve_project_path(settings.store.path))
    return InMemoryPostStore()


@lru_cache
def _geocoder() -> ReverseGeocoder:
    return ReverseGeocoder(get_settings())


def _raise_http(e: Exception) -> NoReturn:
    if isinstance(e, NotFoundError):
        raise HTTPException(
            status_code=404,
            detail={"code": "NOT_FOUND", "message": e.message, "context": e.context},
        ) from e
    if isinstance(e, ValidationError):
        raise HTTPException(
            status_code=400,
            detail={
                "code": "VALIDATION_ERROR",
                "message": str(e),
                "errors": e.errors(include_url=False, include_context=False, include_input=False),
            },
        ) from e
    raise HTTPException(
        status_code=400,
        detail={"code": "VALIDATION_ERROR", "message": str(e)},
    ) from e


@router.post("", response_model=Post, status_code=201)
async def create_post(payload: PostCreate) -> Post:
    lifecycle = PostLifecycle(_store(), get_settings())
    return await lifecycle.create(payload)


@router.get("")
async def list_posts(page: str | None = None, limit: str | None = None) -> dict[str, Any]:
    """Paged listing in the `{data, meta}` envelope used by the web client."""
    settings = get_settings()
    try:
        query = coerce_page_query(page, limit, listing=settings.listing)
    except BadInputError as e:
        _raise_http(e)
    result = await PostListing(_store(), settings).list_all(query)
    return {
        "data": [p.model_dump(mode="json") for p in result.posts],
        "meta": {
            "total": result.total,
            "page": result.page,
            "limit": result.limit,
            "totalPages": result.total_pages,
        },
    }


@router.get("/24hours", response_model=RecentPosts)
async def list_last_24_hours() -> RecentPosts:
    return await PostListing(_store(), get_settings()).list_last_24_hours()


@router.get("/status", response_model=list[Post])
async def list_by_status(status: str = Query(..., min_length=1)) -> list[Post]:
    try:
        return await PostListing(_store(), get_settings()).list_by_status(status)
    except NotFoundError as e:
        _raise_http(e)


@router.get("/user/{user_id}", response_model=list[Post])
async def list_by_user(user_id: int) -> list[Post]:
    try:
        return await PostListing(_store(), get_settings()).list_by_user(user_id)
    except NotFoundError as e:
        _raise_http(e)


@router.get("/nearby", response_model=list[NearbyPost])
async def find_nearby(lat: float, lon: float, radius: float | None = None) -> list[NearbyPost]:
    """Radius search (km) around `lat`/`lon`; place names are best-effort."""
    settings = get_settings()
    try:
        query = LocationQuery(latitude=lat, longitude=lon, radius_km=radius)
        posts = await ProximitySearch(_store(), settings).find_nearby(query)
    except (ValidationError, NotFoundError) as e:
        _raise_http(e)
    if not settings.geocoding.enabled:
        return posts
    return await enrich_with_places(posts, _geocoder(), max_concurrency=settings.geocoding.max_concurrency)


@router.patch("/{post_id}", response_model=Post)
async def update_post(post_id: int, payload: PostUpdate) -> Post:
    try:
        return await PostLifecycle(_store(), get_settings()).update(post_id, payload)
    except (NotFoundError, BadInputError) as e:
        _raise_http(e)


@router.patch("/{post_id}/status", response_model=Post)
async def change_status(post_id: int, payload: StatusChange) -> Post:
    try:
        return await PostLifecycle(_store(), get_settings()).set_status(post_id, payload.status)
    except (NotFoundError, BadInputError) as e:
        _raise_http(e)


@router.delete("/{post_id}", response_model=Post)
async def delete_post(post_id: int) -> Post:
    try:
        return await PostLifecycle(_store(), get_settings()).remove(post_id)
    except NotFoundError as e:
        _raise_http(e)
