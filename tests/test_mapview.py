import pytest

from fleet.client import ApiError
from fleet.mapview import MapView, heat_points, station_markers


class _FakeClient:
    def __init__(self, stations=(), pairs=(), fail=()):
        self.stations = list(stations)
        self.pairs = list(pairs)
        self.fail = fail

    def list(self, entity):
        if "stations" in self.fail:
            raise ApiError("Database query failed", status=500)
        return self.stations

    def heatmap(self):
        if "heatmap" in self.fail:
            raise ApiError("Database query error", status=500)
        return self.pairs


STATIONS = [
    {"StationID": 1, "StationName": "Central", "Latitude": 18.79, "Longitude": 98.95,
     "Capacity": 10, "CurrentStock": 1},
    {"StationID": 2, "StationName": "Campus Gate", "Latitude": 18.80, "Longitude": 98.95,
     "Capacity": 8, "CurrentStock": 0},
]

PAIRS = [{
    "StartStationID": 1, "StartLatitude": 18.79, "StartLongitude": 98.95,
    "DestinationStationID": 2, "DestinationLatitude": 18.80, "DestinationLongitude": 98.95,
}]


class TestLayers:
    @pytest.mark.unit
    def test_station_markers(self):
        assert station_markers(STATIONS) == [
            {"id": 1, "name": "Central", "geocode": (18.79, 98.95)},
            {"id": 2, "name": "Campus Gate", "geocode": (18.80, 98.95)},
        ]

    @pytest.mark.unit
    def test_each_pair_gives_two_points(self):
        assert heat_points(PAIRS) == [(18.79, 98.95, 1), (18.80, 98.95, 1)]
        assert heat_points([]) == []


class TestMapView:
    @pytest.mark.unit
    def test_refresh(self):
        view = MapView(_FakeClient(STATIONS, PAIRS)).refresh()
        assert [m["id"] for m in view.markers] == [1, 2]
        assert len(view.heat) == 2
        assert view.errors == []

    @pytest.mark.unit
    def test_layers_load_independently(self):
        view = MapView(_FakeClient(STATIONS, PAIRS, fail=("heatmap",))).refresh()
        assert len(view.markers) == 2
        assert view.heat == []
        assert view.errors == ["heatmap: Database query error"]

    @pytest.mark.unit
    def test_render_text(self):
        text = MapView(_FakeClient(STATIONS, PAIRS), zoom=14).refresh().render_text()
        lines = text.splitlines()
        assert lines[0] == "Center 18.796635, 98.953274 (zoom 14)"
        assert "  #2 Campus Gate at 18.8, 98.95" in lines
        assert lines[-1] == "  18.8, 98.95 x1"

    @pytest.mark.component
    def test_against_api(self, api, client, network):
        rid = client.post("/api/rental-histories", json={
            "AccountID": network["account"], "UmbrellaID": network["umbrella"],
            "StartStationID": network["central"], "DestinationStationID": network["campus"],
            "StartRentalTime": "2024-06-01T03:00:00Z", "EndRentalTime": "2024-06-01T04:00:00Z",
            "Price": 20}).get_json()["id"]
        assert rid

        view = MapView(api).refresh()
        assert [m["name"] for m in view.markers] == ["Central", "Campus Gate"]
        assert view.heat == [(18.79, 98.95, 1), (18.80, 98.95, 1)]
