# fleet/client.py
import logging

import requests

logger = logging.getLogger(__name__)

ENTITY_PATHS = {
    "stations": "/stations",
    "umbrellas": "/umbrellas",
    "accounts": "/accounts",
    "payments": "/payments",
    "maintainers": "/maintainers",
    "maintenance-histories": "/maintenance-histories",
    "rental-histories": "/rental-histories",
}


class ApiError(Exception):
    """A call to the fleet API failed (transport error or non-2xx status)."""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


class FleetClient:
    """
    Thin JSON client for the fleet API.

    Each method issues exactly one request; nothing is retried or cached.
    ``session`` can be any object with a ``requests.Session``-style
    ``request(method, url, json=..., timeout=...)``.
    """

    def __init__(self, base_url, session=None, timeout=10):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _call(self, method, path, payload=None):
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise ApiError(f"Could not reach {url}") from e

        if not 200 <= resp.status_code < 300:
            try:
                body = resp.json() or {}
                message = body.get("error") or body.get("message")
            except ValueError:
                message = None
            raise ApiError(message or f"{method} {path} returned {resp.status_code}",
                           status=resp.status_code)
        return resp.json()

    @staticmethod
    def _path(entity):
        try:
            return ENTITY_PATHS[entity]
        except KeyError:
            raise ValueError(f"Unknown entity: {entity}")

    def list(self, entity):
        return self._call("GET", self._path(entity))

    def get(self, entity, entity_id):
        return self._call("GET", f"{self._path(entity)}/{entity_id}")

    def create(self, entity, payload):
        return self._call("POST", self._path(entity), payload)

    def update(self, entity, entity_id, payload):
        return self._call("PUT", f"{self._path(entity)}/{entity_id}", payload)

    def delete(self, entity, entity_id):
        return self._call("DELETE", f"{self._path(entity)}/{entity_id}")

    def card_ids(self):
        return self._call("GET", "/cardIDs")

    def heatmap(self):
        return self._call("GET", "/heatmap-data")
