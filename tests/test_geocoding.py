import asyncio
from datetime import datetime, timezone

import httpx

from lostfound.config.settings import get_settings
from lostfound.domain.models import NearbyPost, PlaceInfo
from lostfound.ingestion.geocoding_client import ReverseGeocoder
from lostfound.search.enrichment import enrich_with_places


def _nearby(post_id: int, lat: float, lon: float, distance: float) -> NearbyPost:
    return NearbyPost(
        id=post_id,
        title="Found keys",
        description="Set of three keys",
        status="found",
        location={"latitude": lat, "longitude": lon},
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        user_id=1,
        distance_km=distance,
    )


def test_reverse_geocode_falls_back_from_city_to_town(monkeypatch):
    seen = {}

    async def fake_get_json(url, *, params=None, headers=None, timeout_seconds=5):
        seen.update(url=url, params=params, headers=headers, timeout=timeout_seconds)
        return {"address": {"town": "Tepoztlán", "state": "Morelos", "country": "México"}}

    monkeypatch.setattr("lostfound.ingestion.geocoding_client.get_json", fake_get_json)
    settings = get_settings()

    place = asyncio.run(ReverseGeocoder(settings).reverse_geocode(18.98, -99.09))

    assert place == PlaceInfo(city="Tepoztlán", state="Morelos", country="México")
    assert seen["params"] == {"format": "json", "lat": 18.98, "lon": -99.09}
    assert seen["headers"]["User-Agent"] == settings.geocoding.user_agent
    assert seen["timeout"] == settings.geocoding.timeout_seconds


def test_reverse_geocode_returns_none_on_transport_error(monkeypatch):
    async def fake_get_json(url, **_kwargs):
        raise httpx.ConnectTimeout("timed out", request=httpx.Request("GET", url))

    monkeypatch.setattr("lostfound.ingestion.geocoding_client.get_json", fake_get_json)

    assert asyncio.run(ReverseGeocoder(get_settings()).reverse_geocode(0, 0)) is None


def test_reverse_geocode_returns_none_without_address(monkeypatch):
    async def fake_get_json(url, **_kwargs):
        return {"error": "Unable to geocode"}

    monkeypatch.setattr("lostfound.ingestion.geocoding_client.get_json", fake_get_json)

    assert asyncio.run(ReverseGeocoder(get_settings()).reverse_geocode(0, 0)) is None


def test_reverse_geocode_disabled_makes_no_call(monkeypatch):
    async def fake_get_json(url, **_kwargs):
        raise AssertionError("geocoder should not be called")

    monkeypatch.setattr("lostfound.ingestion.geocoding_client.get_json", fake_get_json)
    settings = get_settings()
    geocoding = settings.geocoding.model_copy(update={"enabled": False})
    settings = settings.model_copy(update={"geocoding": geocoding})

    assert asyncio.run(ReverseGeocoder(settings).reverse_geocode(0, 0)) is None


def test_enrichment_keeps_distance_order_and_absorbs_failures():
    class SlowFirstGeocoder:
        async def reverse_geocode(self, lat: float, lon: float):
            # The nearest post resolves last; results must still line up by position.
            if lat == 1.0:
                await asyncio.sleep(0.02)
                return PlaceInfo(city="Uno")
            if lat == 2.0:
                raise RuntimeError("upstream exploded")
            return PlaceInfo(city="Tres")

    posts = [_nearby(10, 1.0, 0.0, 0.1), _nearby(20, 2.0, 0.0, 0.2), _nearby(30, 3.0, 0.0, 0.3)]

    enriched = asyncio.run(enrich_with_places(posts, SlowFirstGeocoder()))

    assert [p.id for p in enriched] == [10, 20, 30]
    assert [p.city_info.city if p.city_info else None for p in enriched] == ["Uno", None, "Tres"]
    assert [p.distance_km for p in enriched] == [0.1, 0.2, 0.3]


def test_enrichment_runs_lookups_concurrently():
    in_flight = 0
    peak = 0

    class CountingGeocoder:
        async def reverse_geocode(self, lat: float, lon: float):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return None

    posts = [_nearby(i, float(i), 0.0, float(i)) for i in range(6)]

    asyncio.run(enrich_with_places(posts, CountingGeocoder(), max_concurrency=3))

    assert peak == 3


def test_reverse_geocode_returns_none_for_malformed_base_url():
    settings = get_settings()
    geocoding = settings.geocoding.model_copy(update={"base_url": "http://[::1/reverse"})
    settings = settings.model_copy(update={"geocoding": geocoding})

    assert asyncio.run(ReverseGeocoder(settings).reverse_geocode(0, 0)) is None
