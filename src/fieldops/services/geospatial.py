"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import NamedTuple, Optional

from shapely.geometry import Polygon

from .geometry import PolygonGeometry

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = EARTH_RADIUS_KM * math.pi / 180.0
# Widen boxes slightly so points sitting exactly on the radius survive float rounding.
BOUNDING_BOX_MARGIN = 1.001


class BoundingBox(NamedTuple):
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def contains(self, lat: float, lon: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lon <= lon <= self.max_lon


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Clamp so rounding never pushes sqrt outside its domain for antipodal points.
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def bounding_box(lat: float, lon: float, radius_km: float) -> Optional[BoundingBox]:
    """Return a lat/lon box enclosing every point within ``radius_km`` of the center.

    Returns None when the circle reaches a pole or crosses the antimeridian, where a
    simple box is not a safe pre-filter.
    """
    if radius_km < 0:
        return None

    d_lat = radius_km * BOUNDING_BOX_MARGIN / KM_PER_DEGREE_LAT
    min_lat, max_lat = lat - d_lat, lat + d_lat
    if min_lat <= -90.0 or max_lat >= 90.0:
        return None

    widest = math.radians(max(abs(min_lat), abs(max_lat)))
    d_lon = d_lat / math.cos(widest)
    min_lon, max_lon = lon - d_lon, lon + d_lon
    if min_lon < -180.0 or max_lon > 180.0:
        return None
    return BoundingBox(min_lat, max_lat, min_lon, max_lon)


def polygon_centroid(geometry: PolygonGeometry) -> Optional[tuple[float, float]]:
    """Return the (lat, lon) centroid of a parsed polygon, or None when degenerate."""

    polygon = Polygon(geometry.exterior, holes=list(geometry.holes))
    if polygon.is_empty or polygon.area == 0:
        return None
    centroid = polygon.centroid
    return centroid.y, centroid.x
