import pytest

from app_factory import create_app, db
from fleet.client import FleetClient
from fleet.config import TestConfig
from fleet.queries import Store

API_URL = "http://fleet.test/api"


@pytest.fixture
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    with app.app_context():
        yield Store(db.session)


class _Response:
    def __init__(self, resp):
        self._resp = resp
        self.status_code = resp.status_code

    def json(self):
        data = self._resp.get_json(silent=True)
        if data is None:
            raise ValueError("response body is not JSON")
        return data


class FlaskTestSession:
    """Routes ``requests.Session.request`` calls into a Flask test client."""

    def __init__(self, test_client, host="http://fleet.test"):
        self.test_client = test_client
        self.host = host
        self.calls = []

    def request(self, method, url, json=None, timeout=None):
        path = url[len(self.host):]
        self.calls.append((method, path))
        return _Response(self.test_client.open(path, method=method, json=json))


@pytest.fixture
def http(client):
    return FlaskTestSession(client)


@pytest.fixture
def api(http):
    return FleetClient(API_URL, session=http)


# ---- payloads ----
def station_payload(**overrides):
    data = {"StationName": "Central", "Latitude": 18.79, "Longitude": 98.95, "Capacity": 10}
    data.update(overrides)
    return data


def umbrella_payload(station_id, **overrides):
    data = {"Size": "Medium", "Color": "Red", "CurrentStationID": station_id}
    data.update(overrides)
    return data


def payment_payload(**overrides):
    data = {"CardNumber": "4111111111111111", "CardName": "Somchai Jaidee",
            "CVV": "123", "ExpireDate": "2028-12-31"}
    data.update(overrides)
    return data


def account_payload(card_id=None, **overrides):
    data = {"FirstName": "Somchai", "LastName": "Jaidee", "Email": "somchai@example.com",
            "DateOfBirth": "1995-04-02T00:00:00.000Z", "Phone": "0812345678",
            "Street": "12 Huay Kaew Rd", "City": "Chiang Mai", "Province": "Chiang Mai",
            "ZIPCode": "50200", "CardID": card_id}
    data.update(overrides)
    return data


def maintainer_payload(**overrides):
    data = {"FirstName": "Malee", "LastName": "Srisuk", "Phone": "0898765432",
            "Email": "malee@example.com", "DateOfBirth": "1988-09-15",
            "Street": "3 Nimman Rd", "City": "Chiang Mai", "Province": "Chiang Mai",
            "ZIPCode": "50200", "Salary": 18000}
    data.update(overrides)
    return data


def rental_payload(account_id, umbrella_id, start_id, dest_id=None, **overrides):
    data = {"AccountID": account_id, "UmbrellaID": umbrella_id, "CardID": None,
            "StartStationID": start_id, "DestinationStationID": dest_id,
            "StartRentalTime": "2024-06-01T10:00:00+07:00", "EndRentalTime": None,
            "Price": 0}
    data.update(overrides)
    return data


@pytest.fixture
def network(client):
    """Two stations, one docked umbrella, one account and one maintainer."""
    ids = {}
    ids["central"] = client.post("/api/stations", json=station_payload()).get_json()["id"]
    ids["campus"] = client.post(
        "/api/stations",
        json=station_payload(StationName="Campus Gate", Latitude=18.80, Longitude=98.95),
    ).get_json()["id"]
    ids["umbrella"] = client.post(
        "/api/umbrellas", json=umbrella_payload(ids["central"])).get_json()["id"]
    ids["account"] = client.post("/api/accounts", json=account_payload()).get_json()["accountId"]
    ids["maintainer"] = client.post(
        "/api/maintainers", json=maintainer_payload()).get_json()["maintainerId"]
    return ids
