import asyncio
import json
from pathlib import Path
from datetime import datetime, timezone

import pytest

from lostfound.domain.models import PostAuthor
from lostfound.store.base import PostFilter
from lostfound.store.json_file import JsonFilePostStore

NOW = datetime(2026, 4, 2, 8, 0, tzinfo=timezone.utc)


def _fields(title: str, status: str = "lost") -> dict:
    return {
        "title": title,
        "description": "Black backpack",
        "status": status,
        "location": {"latitude": 40.41, "longitude": -3.70},
        "user_id": 3,
    }


def test_json_store_survives_reload(tmp_path):
    path = tmp_path / "store" / "posts.json"
    store = JsonFilePostStore(path, clock=lambda: NOW)
    store.add_author(PostAuthor(id=3, username="jo"))

    first = asyncio.run(store.create(_fields("Backpack")))
    second = asyncio.run(store.create(_fields("Umbrella")))
    asyncio.run(store.update(first.id, {"status": "found"}))
    asyncio.run(store.delete(second.id))

    reloaded = JsonFilePostStore(path)
    posts = asyncio.run(reloaded.find_many(include_user=True))

    assert [(p.id, p.status) for p in posts] == [(first.id, "found")]
    assert posts[0].created_at == NOW
    assert posts[0].user == PostAuthor(id=3, username="jo")
    assert asyncio.run(reloaded.count(PostFilter(status="found"))) == 1

    # Deleted ids are never reused.
    third = asyncio.run(reloaded.create(_fields("Scarf")))
    assert third.id == 3

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["next_id"] == 4
    assert "user" not in raw["posts"][0]


def test_store_ignores_attempts_to_set_store_assigned_fields(tmp_path):
    store = JsonFilePostStore(tmp_path / "posts.json", clock=lambda: NOW)

    post = asyncio.run(store.create({**_fields("Wallet"), "id": 99, "created_at": "2000-01-01T00:00:00Z"}))
    updated = asyncio.run(store.update(post.id, {"id": 50, "title": "Brown wallet"}))

    assert post.id == 1
    assert post.created_at == NOW
    assert updated.id == 1
    assert updated.title == "Brown wallet"
    assert asyncio.run(store.update(42, {"title": "x"})) is None


def test_failed_write_leaves_store_unchanged(monkeypatch, tmp_path):
    store = JsonFilePostStore(tmp_path / "posts.json", clock=lambda: NOW)
    post = asyncio.run(store.create(_fields("Gloves")))

    def failing_replace(self, target):
        raise OSError("disk full")

    monkeypatch.setattr(Path, "replace", failing_replace)

    with pytest.raises(OSError, match="disk full"):
        asyncio.run(store.update(post.id, {"status": "found"}))
    with pytest.raises(OSError, match="disk full"):
        asyncio.run(store.create(_fields("Hat")))

    assert asyncio.run(store.find_by_id(post.id)).status == "lost"
    assert asyncio.run(store.count()) == 1
    monkeypatch.undo()
    assert asyncio.run(store.create(_fields("Hat"))).id == 2
