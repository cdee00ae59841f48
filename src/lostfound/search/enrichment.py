"""
Place-name enrichment for radius query results.

One reverse-geocoding call per result, issued concurrently (bounded by
`geocoding.max_concurrency`) and joined before returning. Results keep the
distance order they came in with; each `city_info` is matched back to its post by
position, not by completion order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from lostfound.domain.models import NearbyPost, PlaceInfo

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    async def reverse_geocode(self, lat: float, lon: float) -> PlaceInfo | None: ...


async def enrich_with_places(
    posts: list[NearbyPost],
    geocoder: Geocoder,
    *,
    max_concurrency: int = 4,
) -> list[NearbyPost]:
    semaphore = asyncio.Semaphore(max(1, int(max_concurrency)))

    async def lookup(post: NearbyPost) -> PlaceInfo | None:
        point = post.geo_point()
        if point is None:
            return None
        async with semaphore:
            return await geocoder.reverse_geocode(point.lat, point.lon)

    outcomes = await asyncio.gather(*(lookup(p) for p in posts), return_exceptions=True)
    places: list[PlaceInfo | None] = []
    for post, outcome in zip(posts, outcomes):
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, Exception):
            logger.warning("Place lookup for post id=%s failed: %r", post.id, outcome)
            outcome = None
        places.append(outcome)
    logger.debug("Enriched %d/%d posts with place info", sum(1 for p in places if p), len(posts))
    return [post.model_copy(update={"city_info": place}) for post, place in zip(posts, places)]
