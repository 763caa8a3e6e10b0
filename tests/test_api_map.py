from starlette.testclient import TestClient

from flavormap.api.app import app
from flavormap.core.geo import GeoPoint, destination_point

ORIGIN = GeoPoint(lat=0.0, lon=0.0)


def _row(id_, bearing, km):
    p = destination_point(ORIGIN, bearing, km)
    return {"id": id_, "name": f"Stall {id_}", "lat": p.lat, "lng": p.lon}


def test_map_view_filters_by_cone_and_returns_sector():
    payload = {
        "markers": [_row("ahead", 90, 5), _row("behind", 200, 5), {"id": "nowhere", "name": "No coords"}],
        "user_location": {"lat": 0.0, "lon": 0.0},
        "filters": {"radius_km": 10, "direction_enabled": True, "bearing_deg": 90, "cone_width_deg": 60},
    }
    with TestClient(app) as c:
        resp = c.post("/api/map/view", json=payload)
    assert resp.status_code == 200
    data = resp.json()
    assert [r["marker"]["id"] for r in data["results"]] == ["ahead"]
    assert data["results"][0]["distance_label"] == "5km"
    assert data["sector"]["geometry"]["type"] == "Polygon"
    ring = data["sector"]["geometry"]["coordinates"][0]
    assert ring[0] == ring[-1] == [0.0, 0.0]
    assert data["meta"]["input_count"] == 3
    assert data["meta"]["dropped_invalid"] == 1


def test_map_view_without_location_uses_catalog_defaults():
    with TestClient(app) as c:
        resp = c.post("/api/map/view", json={})
    assert resp.status_code == 200
    data = resp.json()
    assert data["meta"]["source"] == "catalog"
    # The sample catalog has one restaurant without coordinates.
    assert len(data["results"]) == 7
    assert data["sector"] is None
    assert data["filters"]["radius_km"] == 5


def test_map_view_sorts_by_distance():
    payload = {
        "markers": [_row("far", 0, 4), _row("near", 180, 1)],
        "user_location": {"lat": 0.0, "lon": 0.0},
        "filters": {"radius_km": 10, "sort_by_distance": True},
    }
    with TestClient(app) as c:
        data = c.post("/api/map/view", json=payload).json()
    assert [r["marker"]["id"] for r in data["results"]] == ["near", "far"]


def test_map_view_rejects_disallowed_overrides():
    payload = {"markers": [], "settings_overrides": {"catalog": {"path": "/etc/passwd"}}}
    with TestClient(app) as c:
        resp = c.post("/api/map/view", json=payload)
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "VALIDATION_ERROR"


def test_map_view_rejects_invalid_filter_state():
    payload = {"markers": [], "filters": {"cone_width_deg": 0}}
    with TestClient(app) as c:
        resp = c.post("/api/map/view", json=payload)
    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["code"] == "VALIDATION_ERROR"
    assert any("cone_width_deg" in err["loc"] for err in detail["errors"])


def test_map_view_rejects_out_of_range_user_location():
    payload = {"markers": [], "user_location": {"lat": 100, "lon": 0}}
    with TestClient(app) as c:
        resp = c.post("/api/map/view", json=payload)
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "VALIDATION_ERROR"


def test_sector_endpoint():
    payload = {"center": {"lat": 14.8527, "lon": 120.816}, "bearing_deg": 45, "width_deg": 90, "steps": 8}
    with TestClient(app) as c:
        resp = c.post("/api/map/sector", json=payload)
    assert resp.status_code == 200
    coords = resp.json()["geometry"]["coordinates"][0]
    assert len(coords) == 8 + 3
    assert coords[0] == coords[-1] == [120.816, 14.8527]


def test_geo_helpers():
    with TestClient(app) as c:
        d = c.get("/api/geo/distance", params={"lat1": 0, "lon1": 0, "lat2": 1, "lon2": 0}).json()
        b = c.get("/api/geo/bearing", params={"lat1": 0, "lon1": 0, "lat2": 0, "lon2": 1}).json()
        same = c.get("/api/geo/bearing", params={"lat1": 1, "lon1": 1, "lat2": 1, "lon2": 1}).json()
    assert 110 < d["distance_km"] < 112
    assert d["label"].endswith("km")
    assert abs(b["bearing_deg"] - 90) < 1e-9
    assert same["bearing_deg"] is None


def test_markers_and_settings_endpoints():
    with TestClient(app) as c:
        markers = c.get("/api/markers").json()
        settings = c.get("/api/settings").json()
    assert markers["source"] == "catalog"
    assert markers["count"] == 8
    assert settings["map"]["radius_presets_km"] == [1, 2, 5, 10, 20]
    assert "ingestion" not in settings
