"""
Post store adapter.

A narrow async interface over whatever datastore holds the posts. Services only
talk to `PostStore`; swapping the in-memory or JSON adapters for a database-backed
one does not touch search, listing or lifecycle code.

`find_candidates_near` is the seam for radius queries. The default returns every
post and lets the proximity engine filter in memory; an adapter with a geospatial
index can override it to pre-filter, as long as it keeps its enumeration order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

from lostfound.core.geo import GeoPoint
from lostfound.core.time import ensure_tz
from lostfound.domain.models import Post

OrderBy = Literal["created_at_desc"]


@dataclass(frozen=True)
class PostFilter:
    """Conjunction of optional equality/range conditions."""

    status: str | None = None
    user_id: int | None = None
    created_since: datetime | None = None

    def matches(self, post: Post) -> bool:
        if self.status is not None and post.status != self.status:
            return False
        if self.user_id is not None and post.user_id != self.user_id:
            return False
        if self.created_since is not None and ensure_tz(post.created_at) < ensure_tz(self.created_since):
            return False
        return True


class PostStore(ABC):
    @abstractmethod
    async def create(self, fields: dict[str, Any]) -> Post:
        """Insert a post; the store assigns `id` and `created_at`."""

    @abstractmethod
    async def find_by_id(self, post_id: int) -> Post | None: ...

    @abstractmethod
    async def find_many(
        self,
        filter: PostFilter | None = None,
        *,
        order_by: OrderBy | None = None,
        skip: int = 0,
        take: int | None = None,
        include_user: bool = False,
    ) -> list[Post]:
        """Return matching posts. Without `order_by`, the store's own enumeration order is kept."""

    @abstractmethod
    async def count(self, filter: PostFilter | None = None) -> int: ...

    @abstractmethod
    async def update(self, post_id: int, fields: dict[str, Any]) -> Post | None:
        """Apply `fields` to an existing post; returns None if the id does not exist."""

    @abstractmethod
    async def delete(self, post_id: int) -> Post | None:
        """Remove a post and return it; returns None if the id does not exist."""

    async def find_candidates_near(self, center: GeoPoint, radius_km: float) -> list[Post]:
        return await self.find_many(include_user=True)
