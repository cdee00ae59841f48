from __future__ import annotations

# Radius search over posts:
# 1. ask the store for candidates (all posts unless the adapter has an index),
# 2. drop posts whose location cannot be parsed,
# 3. keep posts within the radius, annotated with their distance,
# 4. sort by distance (stable, so ties keep store order),
# 5. report an empty result as NotFoundError.

import logging
from typing import Iterable

from lostfound.config.settings import Settings
from lostfound.core.geo import GeoPoint, haversine_km
from lostfound.domain.errors import NotFoundError
from lostfound.domain.models import LocationQuery, NearbyPost, Post
from lostfound.store.base import PostStore

logger = logging.getLogger(__name__)


def rank_by_distance(posts: Iterable[Post], center: GeoPoint, radius_km: float) -> list[NearbyPost]:
    """Return posts within `radius_km` of `center`, nearest first."""
    ranked: list[NearbyPost] = []
    skipped = 0
    for post in posts:
        point = post.geo_point()
        if point is None:
            skipped += 1
            continue
        d = haversine_km(center, point)
        if d <= radius_km:
            ranked.append(NearbyPost(**post.model_dump(), distance_km=d))
    if skipped:
        logger.debug("Skipped %d posts without a usable location", skipped)
    ranked.sort(key=lambda p: p.distance_km)
    return ranked


class ProximitySearch:
    def __init__(self, store: PostStore, settings: Settings):
        self._store = store
        self._settings = settings

    def effective_radius_km(self, query: LocationQuery) -> float:
        if query.radius_km is None:
            return float(self._settings.search.default_radius_km)
        return float(query.radius_km)

    async def find_nearby(self, query: LocationQuery) -> list[NearbyPost]:
        """Posts within the query radius ordered by distance.

        Raises:
            NotFoundError: If no post lies within the radius.
        """
        center = query.center()
        radius_km = self.effective_radius_km(query)

        candidates = await self._store.find_candidates_near(center, radius_km)
        ranked = rank_by_distance(candidates, center, radius_km)
        logger.info(
            "Nearby search lat=%.5f lon=%.5f radius_km=%.2f: %d of %d candidates",
            center.lat,
            center.lon,
            radius_km,
            len(ranked),
            len(candidates),
        )
        if not ranked:
            raise NotFoundError(
                f"No posts found within {radius_km:g}km of location: {center.lat}, {center.lon}",
                radius_km=radius_km,
                latitude=center.lat,
                longitude=center.lon,
            )
        return ranked
