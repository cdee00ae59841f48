"""
LostFound CLI entrypoint.

Read-only queries against the configured JSON post store, for local demos and
debugging without the API. Delegates to the same services the API uses.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from lostfound.config.settings import Settings, get_settings
from lostfound.core.env import resolve_project_path
from lostfound.core.logging import configure_logging
from lostfound.domain.errors import LostFoundError, NotFoundError
from lostfound.domain.models import LocationQuery, NearbyPost
from lostfound.ingestion.geocoding_client import ReverseGeocoder
from lostfound.posts.listing import PostListing, coerce_page_query
from lostfound.search.enrichment import enrich_with_places
from lostfound.search.proximity import ProximitySearch
from lostfound.store.json_file import JsonFilePostStore


def _store(args: argparse.Namespace, settings: Settings) -> JsonFilePostStore:
    return JsonFilePostStore(resolve_project_path(args.store or settings.store.path))


def _dump(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


async def _cmd_nearby(args: argparse.Namespace, settings: Settings) -> int:
    query = LocationQuery(latitude=args.lat, longitude=args.lon, radius_km=args.radius)
    posts: list[NearbyPost] = await ProximitySearch(_store(args, settings), settings).find_nearby(query)
    if settings.geocoding.enabled and not args.no_geocode:
        posts = await enrich_with_places(
            posts, ReverseGeocoder(settings), max_concurrency=settings.geocoding.max_concurrency
        )

    if args.json:
        _dump([p.model_dump(mode="json") for p in posts])
        return 0

    for i, post in enumerate(posts, start=1):
        place = ""
        if post.city_info:
            place = ", ".join(x for x in (post.city_info.city, post.city_info.country) if x)
        print(f"{i:>2}. [{post.status}] {post.title}  {post.distance_km:.2f} km  {place}".rstrip())
    return 0


async def _cmd_list(args: argparse.Namespace, settings: Settings) -> int:
    query = coerce_page_query(args.page, args.limit, listing=settings.listing)
    page = await PostListing(_store(args, settings), settings).list_all(query)
    _dump(page.model_dump(mode="json"))
    return 0


async def _cmd_recent(args: argparse.Namespace, settings: Settings) -> int:
    recent = await PostListing(_store(args, settings), settings).list_last_24_hours()
    _dump(recent.model_dump(mode="json"))
    return 0


async def _cmd_status(args: argparse.Namespace, settings: Settings) -> int:
    posts = await PostListing(_store(args, settings), settings).list_by_status(args.status)
    _dump([p.model_dump(mode="json") for p in posts])
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the LostFound CLI."""
    parser = argparse.ArgumentParser(prog="lostfound")
    parser.add_argument("--store", type=str, default=None, help="Path to the JSON post store.")
    sub = parser.add_subparsers(dest="command", required=True)

    near = sub.add_parser("nearby", help="Posts within a radius of a coordinate, nearest first.")
    near.add_argument("--lat", required=True, type=float)
    near.add_argument("--lon", required=True, type=float)
    near.add_argument("--radius", type=float, default=None, help="Radius in km (default from config).")
    near.add_argument("--no-geocode", action="store_true", help="Skip place-name lookups.")
    near.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    near.set_defaults(func=_cmd_nearby)

    lst = sub.add_parser("list", help="Paged listing, newest first.")
    lst.add_argument("--page", default=None)
    lst.add_argument("--limit", default=None)
    lst.set_defaults(func=_cmd_list)

    rec = sub.add_parser("recent", help="Posts created in the last 24 hours.")
    rec.set_defaults(func=_cmd_recent)

    st = sub.add_parser("status", help="Posts with a given status label.")
    st.add_argument("status")
    st.set_defaults(func=_cmd_status)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m lostfound.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    try:
        return int(asyncio.run(func(args, get_settings())))
    except NotFoundError as e:
        print(e.message, file=sys.stderr)
        return 1
    except (LostFoundError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
