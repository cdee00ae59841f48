"""
In-process post store.

Keeps posts in an insertion-ordered dict keyed by id. Used by the tests, by the
API when no database is configured, and as the base for `JsonFilePostStore`.
Every read returns copies so callers cannot mutate stored state. Mutations build
the new state first and hand it to `_commit`, so a failed write leaves the
previous state in place.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Iterable

from pydantic import BaseModel

from lostfound.core.time import ensure_tz, utc_now
from lostfound.domain.models import Post, PostAuthor
from lostfound.store.base import OrderBy, PostFilter, PostStore

logger = logging.getLogger(__name__)

# Store-assigned fields callers may not set or change.
_READ_ONLY_FIELDS = {"id", "created_at", "user"}


def _plain(fields: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in fields.items():
        if key in _READ_ONLY_FIELDS:
            continue
        out[key] = value.model_dump() if isinstance(value, BaseModel) else value
    return out


class InMemoryPostStore(PostStore):
    def __init__(
        self,
        posts: Iterable[Post] = (),
        *,
        authors: Iterable[PostAuthor] = (),
        clock: Callable[[], datetime] = utc_now,
    ):
        self._clock = clock
        self._posts: dict[int, Post] = {}
        self._authors: dict[int, PostAuthor] = {a.id: a for a in authors}
        for post in posts:
            self._posts[post.id] = post.model_copy(update={"user": None}, deep=True)
        self._next_id = max(self._posts, default=0) + 1

    def add_author(self, author: PostAuthor) -> None:
        self._commit(self._posts, {**self._authors, author.id: author}, self._next_id)

    def _commit(self, posts: dict[int, Post], authors: dict[int, PostAuthor], next_id: int) -> None:
        """Replace the stored state. Persistent subclasses write first, then call this."""
        self._posts = posts
        self._authors = authors
        self._next_id = next_id

    def _view(self, post: Post, *, include_user: bool) -> Post:
        user = self._authors.get(post.user_id) if include_user else None
        return post.model_copy(update={"user": user}, deep=True)

    async def create(self, fields: dict[str, Any]) -> Post:
        post = Post.model_validate({**_plain(fields), "id": self._next_id, "created_at": self._clock()})
        self._commit({**self._posts, post.id: post}, self._authors, self._next_id + 1)
        logger.debug("Created post id=%s", post.id)
        return self._view(post, include_user=False)

    async def find_by_id(self, post_id: int) -> Post | None:
        post = self._posts.get(post_id)
        return self._view(post, include_user=False) if post else None

    async def find_many(
        self,
        filter: PostFilter | None = None,
        *,
        order_by: OrderBy | None = None,
        skip: int = 0,
        take: int | None = None,
        include_user: bool = False,
    ) -> list[Post]:
        rows = [p for p in self._posts.values() if filter is None or filter.matches(p)]
        if order_by == "created_at_desc":
            rows.sort(key=lambda p: (ensure_tz(p.created_at), p.id), reverse=True)
        end = None if take is None else skip + take
        return [self._view(p, include_user=include_user) for p in rows[skip:end]]

    async def count(self, filter: PostFilter | None = None) -> int:
        if filter is None:
            return len(self._posts)
        return sum(1 for p in self._posts.values() if filter.matches(p))

    async def update(self, post_id: int, fields: dict[str, Any]) -> Post | None:
        current = self._posts.get(post_id)
        if current is None:
            return None
        post = Post.model_validate({**current.model_dump(), **_plain(fields)})
        self._commit({**self._posts, post_id: post}, self._authors, self._next_id)
        return self._view(post, include_user=False)

    async def delete(self, post_id: int) -> Post | None:
        post = self._posts.get(post_id)
        if post is None:
            return None
        remaining = {k: v for k, v in self._posts.items() if k != post_id}
        self._commit(remaining, self._authors, self._next_id)
        return self._view(post, include_user=False)
