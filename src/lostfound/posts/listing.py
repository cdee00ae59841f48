"""
Post listing: offset pagination plus status, recency and owner filters.

Empty-result policy:
- `list_by_status` and `list_by_user` raise `NotFoundError` when nothing matches.
- `list_last_24_hours` returns an empty `RecentPosts`; "nothing new today" is normal.
- `list_all` returns an empty page past the end (the total still tells the caller why).
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Callable

from lostfound.config.settings import ListingSettings, Settings
from lostfound.core.time import utc_now
from lostfound.domain.errors import BadInputError, NotFoundError
from lostfound.domain.models import PageQuery, Post, PostPage, RecentPosts
from lostfound.store.base import PostFilter, PostStore

logger = logging.getLogger(__name__)


def _positive_int(value: Any, *, name: str, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        # Non-numeric values fall back to the default rather than failing.
        return default
    if number < 1:
        raise BadInputError(f"{name} must be a positive integer, got {value!r}")
    return number


def coerce_page_query(page: Any = None, limit: Any = None, *, listing: ListingSettings) -> PageQuery:
    """Build a `PageQuery` from raw (possibly string) query parameters.

    Absent or non-numeric values take the configured defaults; numbers below 1
    (or above `max_limit`, when one is configured) raise `BadInputError`.
    """
    page_n = _positive_int(page, name="page", default=listing.default_page)
    limit_n = _positive_int(limit, name="limit", default=listing.default_limit)
    if listing.max_limit is not None and limit_n > listing.max_limit:
        raise BadInputError(f"limit must be at most {listing.max_limit}, got {limit_n}")
    return PageQuery(page=page_n, limit=limit_n)


class PostListing:
    def __init__(
        self,
        store: PostStore,
        settings: Settings,
        *,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._settings = settings
        self._clock = clock

    async def list_all(self, query: PageQuery | None = None) -> PostPage:
        """One page of posts, newest first, plus the unfiltered total."""
        query = query or coerce_page_query(listing=self._settings.listing)
        posts, total = await asyncio.gather(
            self._store.find_many(
                order_by="created_at_desc",
                skip=query.offset,
                take=query.limit,
                include_user=True,
            ),
            self._store.count(),
        )
        logger.debug("Listed page=%d limit=%d: %d of %d posts", query.page, query.limit, len(posts), total)
        return PostPage(posts=posts, total=total, page=query.page, limit=query.limit)

    async def list_by_status(self, status: str) -> list[Post]:
        posts = await self._store.find_many(PostFilter(status=status))
        if not posts:
            raise NotFoundError(f"No posts found with status: {status}", status=status)
        return posts

    async def list_last_24_hours(self) -> RecentPosts:
        """Posts created within the recency window (24h by default), inclusive."""
        window = timedelta(hours=self._settings.listing.recent_window_hours)
        since = self._clock() - window
        posts = await self._store.find_many(PostFilter(created_since=since), include_user=True)
        return RecentPosts(posts=posts, total=len(posts))

    async def list_by_user(self, user_id: int) -> list[Post]:
        posts = await self._store.find_many(PostFilter(user_id=user_id))
        if not posts:
            raise NotFoundError(f"No posts found for user with ID: {user_id}", user_id=user_id)
        return posts
