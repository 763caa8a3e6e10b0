import json

from flavormap.cli import main


def test_cli_distance(capsys):
    assert main(["distance", "0", "0", "0", "1"]) == 0
    out = capsys.readouterr().out
    assert "bearing=90.0" in out
    assert "km" in out


def test_cli_filter_json_sorted_by_distance(capsys):
    # Malolos town proper; the sample catalog's Malolos restaurant is nearest.
    assert main(["filter", "--lat", "14.8443", "--lon", "120.8114", "--radius", "20", "--sort", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    ids = [r["marker"]["id"] for r in data["results"]]
    assert ids[0] == 1
    distances = [r["distance_km"] for r in data["results"]]
    assert distances == sorted(distances)


def test_cli_sector_prints_geojson(capsys):
    assert main(["sector", "--lat", "14.8527", "--lon", "120.816", "--bearing", "90", "--steps", "4"]) == 0
    feature = json.loads(capsys.readouterr().out)
    assert len(feature["geometry"]["coordinates"][0]) == 4 + 3


def test_cli_reports_invalid_sector_arguments():
    assert main(["sector", "--lat", "0", "--lon", "0", "--bearing", "0", "--width", "400"]) == 2
