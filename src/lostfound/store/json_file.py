"""
JSON-file post store.

Same semantics as `InMemoryPostStore`, persisted to a single JSON document:

    {"next_id": 4, "authors": [...], "posts": [...]}

Writes go through a temporary file + atomic replace so a crash mid-write never
leaves a truncated store behind. The file is written before the in-memory state
changes, so a failed write (e.g., a full disk) raises and leaves both untouched.
Writes are synchronous file I/O inside the async methods; fine for the small
demo-sized stores this adapter is meant for.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable

from pydantic import TypeAdapter

from lostfound.core.time import utc_now
from lostfound.domain.models import Post, PostAuthor
from lostfound.store.memory import InMemoryPostStore

logger = logging.getLogger(__name__)

_POSTS_ADAPTER = TypeAdapter(list[Post])
_AUTHORS_ADAPTER = TypeAdapter(list[PostAuthor])


class JsonFilePostStore(InMemoryPostStore):
    def __init__(self, path: str | Path, *, clock: Callable[[], datetime] = utc_now):
        self._path = Path(path)
        posts: list[Post] = []
        authors: list[PostAuthor] = []
        next_id = 1
        if self._path.exists():
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                raise ValueError(f"Invalid post store {self._path}; expected a JSON object.")
            posts = _POSTS_ADAPTER.validate_python(raw.get("posts") or [])
            authors = _AUTHORS_ADAPTER.validate_python(raw.get("authors") or [])
            next_id = int(raw.get("next_id") or 1)
            logger.info("Loaded %d posts from %s", len(posts), self._path)
        super().__init__(posts, authors=authors, clock=clock)
        # Never hand out an id that was used by a since-deleted post.
        self._next_id = max(self._next_id, next_id)

    @property
    def path(self) -> Path:
        return self._path

    def _commit(self, posts: dict[int, Post], authors: dict[int, PostAuthor], next_id: int) -> None:
        payload = {
            "next_id": next_id,
            "authors": [a.model_dump(mode="json") for a in authors.values()],
            "posts": [p.model_dump(mode="json", exclude={"user"}) for p in posts.values()],
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self._path)
        super()._commit(posts, authors, next_id)
