import json

import pytest

from flavormap.catalog.loader import load_markers, parse_marker_rows, save_markers
from flavormap.domain.models import Marker


def test_load_markers_coerces_decimal_strings(tmp_path):
    path = tmp_path / "markers.json"
    path.write_text(
        json.dumps(
            [
                {"id": 1, "name": "A", "lat": "14.8443", "lng": "120.8114", "rating": "4.5"},
                {"id": 2, "name": "B", "lat": None, "lng": None},
            ]
        ),
        encoding="utf-8",
    )
    markers = load_markers(path)
    assert [m.id for m in markers] == [1, 2]
    assert markers[0].lat == pytest.approx(14.8443)
    assert markers[0].rating == pytest.approx(4.5)
    assert markers[1].lat is None


def test_load_markers_accepts_wrapped_payload(tmp_path):
    path = tmp_path / "markers.json"
    path.write_text(json.dumps({"markers": [{"id": "x", "name": "X", "lat": 1, "lng": 2}]}), encoding="utf-8")
    assert [m.id for m in load_markers(path)] == ["x"]


def test_load_markers_rejects_non_array(tmp_path):
    path = tmp_path / "markers.json"
    path.write_text(json.dumps({"rows": []}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_markers(path)


def test_parse_marker_rows_skips_unusable_rows():
    rows = [{"id": 1, "name": "ok"}, {"name": "no id"}, "garbage", {"id": 2, "name": "also ok", "lat": "x"}]
    markers = parse_marker_rows(rows)
    assert [m.id for m in markers] == [1, 2]
    assert markers[1].lat is None


def test_save_then_load(tmp_path):
    path = tmp_path / "nested" / "markers.json"
    save_markers(path, [Marker(id=1, name="A", lat=14.8, lng=120.8, address="Malolos")])
    (m,) = load_markers(path)
    assert m.name == "A"
    assert m.address == "Malolos"


def test_packaged_sample_catalog_loads():
    markers = load_markers("data/catalogs/markers.json")
    assert len(markers) == 8
    assert sum(1 for m in markers if m.lat is None) == 1
