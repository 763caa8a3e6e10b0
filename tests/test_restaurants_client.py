import httpx
import pytest

import flavormap.ingestion.restaurants_client as restaurants_client
from flavormap.config.settings import get_settings
from flavormap.core.cache import FileCache, record_cache_stats
from flavormap.ingestion.restaurants_client import RestaurantsClient

ROWS = [
    {"id": 1, "name": "Malolos Heritage Kitchen", "lat": "14.8443", "lng": "120.8114", "cuisine_types": "[]"},
    {"id": 2, "name": "No Location", "lat": None, "lng": None},
    {"name": "missing id"},
]


def test_get_markers_uses_express_query_names(monkeypatch, tmp_path):
    calls = []

    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):
        calls.append((url, dict(params or {})))
        return ROWS

    monkeypatch.setattr(restaurants_client, "get_json", fake_get_json)
    client = RestaurantsClient(get_settings(), FileCache(tmp_path))

    markers = client.get_markers(municipality_id=3, kind="restaurant", limit=50)

    assert [m.id for m in markers] == [1, 2]
    url, params = calls[0]
    assert url.endswith("/api/restaurants")
    assert params == {"limit": 50, "municipalityId": 3, "kind": "restaurant"}


def test_second_call_is_served_from_cache(monkeypatch, tmp_path):
    calls = []

    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):
        calls.append(url)
        return ROWS

    monkeypatch.setattr(restaurants_client, "get_json", fake_get_json)
    client = RestaurantsClient(get_settings(), FileCache(tmp_path))

    client.get_markers()
    with record_cache_stats() as stats:
        client.get_markers()
    assert len(calls) == 1
    assert stats.hits == 1


def test_stale_cache_is_served_when_api_fails(monkeypatch, tmp_path):
    settings = get_settings()
    cache = FileCache(tmp_path)
    client = RestaurantsClient(settings, cache)

    monkeypatch.setattr(restaurants_client, "get_json", lambda *a, **kw: ROWS)
    client.get_markers()

    def failing_get_json(*args, **kwargs):
        raise httpx.ConnectError("backend down")

    monkeypatch.setattr(restaurants_client, "get_json", failing_get_json)
    # Force expiry: every entry is older than a negative TTL.
    monkeypatch.setattr(settings.ingestion.api, "cache_ttl_seconds", -1)

    with record_cache_stats() as stats:
        markers = client.get_markers()
    assert [m.id for m in markers] == [1, 2]
    assert stats.stale_fallbacks == 1


def test_api_failure_without_cache_propagates(monkeypatch, tmp_path):
    def failing_get_json(*args, **kwargs):
        raise httpx.ConnectError("backend down")

    monkeypatch.setattr(restaurants_client, "get_json", failing_get_json)
    client = RestaurantsClient(get_settings(), FileCache(tmp_path))
    with pytest.raises(httpx.HTTPError):
        client.get_markers()


def test_non_array_payload_is_rejected(monkeypatch, tmp_path):
    monkeypatch.setattr(restaurants_client, "get_json", lambda *a, **kw: {"error": "Failed to fetch restaurants"})
    client = RestaurantsClient(get_settings(), FileCache(tmp_path))
    with pytest.raises(ValueError):
        client.get_markers()
