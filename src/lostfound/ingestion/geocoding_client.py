"""
Reverse geocoding client (OpenStreetMap Nominatim).

Turns a coordinate into a small `PlaceInfo` (city/state/country) for display next
to search results. Enrichment is best-effort: transport errors, timeouts, bad JSON
and responses without an address all come back as `None` instead of raising, so a
search never fails because the geocoder did.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from lostfound.config.settings import Settings
from lostfound.core.http import get_json
from lostfound.domain.errors import EnrichmentUnavailable
from lostfound.domain.models import PlaceInfo

logger = logging.getLogger(__name__)


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_place(payload: Any) -> PlaceInfo:
    """Extract a `PlaceInfo` from a Nominatim reverse response.

    Raises:
        EnrichmentUnavailable: If the payload has no usable address.
    """
    if not isinstance(payload, dict):
        raise EnrichmentUnavailable("reverse geocoding response is not an object")
    address = payload.get("address")
    if not isinstance(address, dict):
        raise EnrichmentUnavailable(payload.get("error") or "reverse geocoding response has no address")

    city = _text(address.get("city")) or _text(address.get("town")) or _text(address.get("village"))
    return PlaceInfo(city=city, state=_text(address.get("state")), country=_text(address.get("country")))


class ReverseGeocoder:
    """Fetches reverse-geocoding results and converts failures to `None`."""

    def __init__(self, settings: Settings):
        self._settings = settings

    async def _fetch(self, lat: float, lon: float) -> Any:
        cfg = self._settings.geocoding
        params = {"format": "json", "lat": lat, "lon": lon}
        return await get_json(
            cfg.base_url,
            params=params,
            headers={"User-Agent": cfg.user_agent},
            timeout_seconds=cfg.timeout_seconds,
        )

    async def reverse_geocode(self, lat: float, lon: float) -> PlaceInfo | None:
        """Return the place for (`lat`, `lon`), or None if it cannot be determined."""
        if not self._settings.geocoding.enabled:
            return None
        try:
            try:
                payload = await self._fetch(lat, lon)
            except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
                raise EnrichmentUnavailable(str(e) or type(e).__name__) from e
            return parse_place(payload)
        except EnrichmentUnavailable as e:
            logger.warning("Reverse geocoding failed for lat=%.4f lon=%.4f: %s", lat, lon, e)
            return None
