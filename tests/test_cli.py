import asyncio
import json

from lostfound.cli import main
from lostfound.store.json_file import JsonFilePostStore


def _seed(path, *posts: tuple[str, float, float, str]) -> None:
    store = JsonFilePostStore(path)
    for title, lat, lon, status in posts:
        asyncio.run(
            store.create(
                {
                    "title": title,
                    "description": "Seen near the park",
                    "status": status,
                    "location": {"latitude": lat, "longitude": lon},
                    "user_id": 1,
                }
            )
        )


def test_nearby_on_empty_store_exits_with_not_found(tmp_path, capsys):
    path = tmp_path / "posts.json"

    code = main(["--store", str(path), "nearby", "--lat", "0", "--lon", "0", "--no-geocode"])

    assert code == 1
    assert "No posts found" in capsys.readouterr().err


def test_list_with_page_zero_exits_with_bad_input(tmp_path, capsys):
    path = tmp_path / "posts.json"
    _seed(path, ("Keys", 0.0, 0.0, "lost"))

    code = main(["--store", str(path), "list", "--page", "0"])

    assert code == 2
    assert capsys.readouterr().err.startswith("error:")


def test_list_recent_and_status_print_json(tmp_path, capsys):
    path = tmp_path / "posts.json"
    _seed(path, ("Keys", 0.0, 0.0, "lost"), ("Wallet", 0.0, 0.0, "found"))

    assert main(["--store", str(path), "list", "--limit", "1"]) == 0
    page = json.loads(capsys.readouterr().out)
    assert (page["total"], page["page"], page["limit"], page["total_pages"]) == (2, 1, 1, 2)
    assert len(page["posts"]) == 1

    assert main(["--store", str(path), "recent"]) == 0
    assert json.loads(capsys.readouterr().out)["total"] == 2

    assert main(["--store", str(path), "status", "found"]) == 0
    assert [p["title"] for p in json.loads(capsys.readouterr().out)] == ["Wallet"]


def test_nearby_json_is_sorted_by_distance(tmp_path, capsys):
    path = tmp_path / "posts.json"
    _seed(
        path,
        ("far", 0.03, 0.0, "lost"),
        ("near", 0.001, 0.0, "found"),
        ("outside", 5.0, 0.0, "lost"),
    )

    code = main(
        ["--store", str(path), "nearby", "--lat", "0", "--lon", "0", "--radius", "10", "--no-geocode", "--json"]
    )

    assert code == 0
    posts = json.loads(capsys.readouterr().out)
    assert [p["title"] for p in posts] == ["near", "far"]
    assert posts[0]["distance_km"] < posts[1]["distance_km"]
    assert all(p["city_info"] is None for p in posts)
