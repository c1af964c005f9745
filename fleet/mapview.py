# fleet/mapview.py
"""
Data behind the home map: one marker per station plus a heat layer built from
the heatmap pairs. Every returned rental adds two points of weight 1, one where
it started and one where it ended, so busy stations glow brighter.

The two layers load independently. If one request fails the other is still
shown and the failure is kept in ``errors``.
"""
import logging

from fleet.client import ApiError

logger = logging.getLogger(__name__)

DEFAULT_CENTER = (18.796635262099006, 98.95327438130093)
DEFAULT_ZOOM = 16


def station_markers(stations):
    return [
        {"id": s["StationID"], "name": s["StationName"],
         "geocode": (s["Latitude"], s["Longitude"])}
        for s in stations
    ]


def heat_points(pairs):
    points = []
    for pair in pairs:
        points.append((pair["StartLatitude"], pair["StartLongitude"], 1))
        points.append((pair["DestinationLatitude"], pair["DestinationLongitude"], 1))
    return points


class MapView:
    def __init__(self, client, center=DEFAULT_CENTER, zoom=DEFAULT_ZOOM):
        self.client = client
        self.center = center
        self.zoom = zoom
        self.markers = []
        self.heat = []
        self.errors = []

    def refresh(self):
        self.errors = []
        try:
            self.markers = station_markers(self.client.list("stations"))
        except ApiError as e:
            logger.error("Error fetching station data: %s", e)
            self.errors.append(f"stations: {e}")
        try:
            self.heat = heat_points(self.client.heatmap())
        except ApiError as e:
            logger.error("Error fetching heatmap data: %s", e)
            self.errors.append(f"heatmap: {e}")
        return self

    def render_text(self):
        lat, lon = self.center
        lines = [f"Center {lat:.6f}, {lon:.6f} (zoom {self.zoom})",
                 f"Stations: {len(self.markers)}"]
        for m in self.markers:
            lines.append(f"  #{m['id']} {m['name']} at {m['geocode'][0]}, {m['geocode'][1]}")
        lines.append(f"Heat points: {len(self.heat)}")
        for p_lat, p_lon, weight in self.heat:
            lines.append(f"  {p_lat}, {p_lon} x{weight}")
        return "\n".join(lines)
