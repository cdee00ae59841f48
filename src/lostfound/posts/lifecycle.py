"""
Post lifecycle: creation, status changes, partial updates and deletion.

Status is a free-form label. The conventional values are "lost", "found" and
"deceased", and any label may replace any other, unless `posts.allowed_statuses`
is configured, in which case other labels are rejected with `BadInputError`.

Updates read the post first and then write it; there is no version check, so two
concurrent writers can overwrite each other (last write wins).
"""

from __future__ import annotations

import logging

from lostfound.config.settings import Settings
from lostfound.domain.errors import BadInputError, NotFoundError
from lostfound.domain.models import Post, PostCreate, PostUpdate
from lostfound.store.base import PostStore

logger = logging.getLogger(__name__)


class PostLifecycle:
    def __init__(self, store: PostStore, settings: Settings):
        self._store = store
        self._settings = settings

    def _check_status(self, status: str) -> None:
        allowed = self._settings.posts.allowed_statuses
        if allowed is not None and status not in allowed:
            raise BadInputError(f"Unsupported status {status!r}; expected one of {sorted(allowed)}")

    async def _require(self, post_id: int) -> Post:
        post = await self._store.find_by_id(post_id)
        if post is None:
            raise NotFoundError(f"Post with ID {post_id} not found", post_id=post_id)
        return post

    async def create(self, payload: PostCreate) -> Post:
        """Store a new post. The status always starts at `posts.default_status`."""
        if payload.status and payload.status != self._settings.posts.default_status:
            logger.debug("Ignoring caller-supplied status %r on create", payload.status)
        post = await self._store.create(
            {
                "title": payload.title,
                "description": payload.description,
                "image": payload.image,
                "status": self._settings.posts.default_status,
                "location": payload.location.model_dump(),
                "user_id": payload.user_id,
            }
        )
        logger.info("Created post id=%s for user_id=%s", post.id, post.user_id)
        return post

    async def set_status(self, post_id: int, status: str) -> Post:
        await self._require(post_id)
        self._check_status(status)
        updated = await self._store.update(post_id, {"status": status})
        if updated is None:
            raise NotFoundError(f"Post with ID {post_id} not found", post_id=post_id)
        logger.info("Post id=%s status -> %r", post_id, status)
        return updated

    async def update(self, post_id: int, payload: PostUpdate) -> Post:
        """Apply only the fields the caller supplied; absent/null fields are kept."""
        changes = payload.changes()
        current = await self._require(post_id)
        if "status" in changes:
            self._check_status(changes["status"])
        if not changes:
            return current
        updated = await self._store.update(post_id, changes)
        if updated is None:
            raise NotFoundError(f"Post with ID {post_id} not found", post_id=post_id)
        logger.info("Updated post id=%s fields=%s", post_id, sorted(changes))
        return updated

    async def remove(self, post_id: int) -> Post:
        await self._require(post_id)
        deleted = await self._store.delete(post_id)
        if deleted is None:
            raise NotFoundError(f"Post with ID {post_id} not found", post_id=post_id)
        logger.info("Deleted post id=%s", post_id)
        return deleted
