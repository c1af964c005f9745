import pytest

import fleet.cli
from conftest import API_URL
from fleet.client import FleetClient


@pytest.fixture
def runner(app, http, monkeypatch):
    monkeypatch.setattr(fleet.cli, "_client", lambda: FleetClient(API_URL, session=http))
    return app.test_cli_runner()


class TestCommands:
    @pytest.mark.component
    def test_init_db(self, runner):
        result = runner.invoke(args=["init-db"])
        assert result.exit_code == 0
        assert "Database tables created." in result.output

    @pytest.mark.component
    def test_seed_then_table(self, runner, client):
        result = runner.invoke(args=["seed-db"])
        assert result.exit_code == 0, result.output

        stations = client.get("/api/stations").get_json()
        assert {s["StationName"]: s["CurrentStock"] for s in stations} == {
            "Central": 2, "Campus Gate": 1, "Night Market": 0}

        result = runner.invoke(args=["table", "rental-histories", "--tz", "UTC"])
        assert result.exit_code == 0, result.output
        assert "Not returned" in result.output
        assert "Active" in result.output
        assert "Showing 1 to 2 of 2 entries" in result.output

    @pytest.mark.component
    def test_table_search_and_hide(self, runner, network):
        result = runner.invoke(args=["table", "stations", "--search", "campus",
                                     "--hide", "Latitude"])
        assert result.exit_code == 0, result.output
        assert "Campus Gate" in result.output
        assert "Central" not in result.output
        assert "Latitude" not in result.output
        assert "Showing 1 to 1 of 1 entries" in result.output

    @pytest.mark.component
    def test_table_unknown_column(self, runner, network):
        result = runner.invoke(args=["table", "stations", "--hide", "Colour"])
        assert result.exit_code != 0

    @pytest.mark.component
    def test_remove_asks_first(self, runner, client, network):
        result = runner.invoke(args=["remove", "umbrellas", str(network["umbrella"])],
                               input="n\n")
        assert "Are you sure you want to delete selected umbrella?" in result.output
        assert "Cancelled." in result.output
        assert client.get(f"/api/umbrellas/{network['umbrella']}").status_code == 200

        result = runner.invoke(args=["remove", "umbrellas", str(network["umbrella"])],
                               input="y\n")
        assert result.exit_code == 0, result.output
        assert "Showing 0 to 0 of 0 entries" in result.output
        assert client.get(f"/api/umbrellas/{network['umbrella']}").status_code == 404

    @pytest.mark.component
    def test_remove_missing_row(self, runner):
        result = runner.invoke(args=["remove", "stations", "42", "--yes"])
        assert result.exit_code != 0
        assert "Station not found" in result.output

    @pytest.mark.component
    def test_new_and_edit(self, runner, client, network):
        result = runner.invoke(args=["new", "umbrellas", "Size=Large", "Color=Black",
                                     f"CurrentStationID={network['campus']}"])
        assert result.exit_code == 0, result.output
        assert "Black" in result.output

        result = runner.invoke(args=["edit", "stations", str(network["campus"]),
                                     "Capacity=3"])
        assert result.exit_code == 0, result.output
        station = client.get(f"/api/stations/{network['campus']}").get_json()
        assert station["Capacity"] == 3
        assert station["StationName"] == "Campus Gate"
        assert station["CurrentStock"] == 1

    @pytest.mark.component
    def test_new_with_bad_pair(self, runner):
        result = runner.invoke(args=["new", "stations", "StationName"])
        assert result.exit_code != 0

    @pytest.mark.component
    def test_seed_refreshes_cached_heatmap(self, runner, client):
        assert client.get("/api/heatmap-data").get_json() == []

        result = runner.invoke(args=["seed-db"])
        assert result.exit_code == 0, result.output

        returned = [r for r in client.get("/api/rental-histories").get_json()
                    if r["EndRentalTime"] is not None]
        pairs = client.get("/api/heatmap-data").get_json()
        assert len(returned) == 1
        assert len(pairs) == 1
        assert pairs[0]["DestinationLatitude"] == 18.8037

    @pytest.mark.component
    def test_map(self, runner):
        runner.invoke(args=["seed-db"])
        result = runner.invoke(args=["map"])
        assert result.exit_code == 0, result.output
        assert "Stations: 3" in result.output
        assert "Night Market at 18.7851, 99.0006" in result.output
        assert "Heat points: 2" in result.output
        assert "18.8037, 98.9524 x1" in result.output
