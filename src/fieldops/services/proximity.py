"""Nearby point-of-interest queries."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..config import settings
from ..models.domain import PointOfInterest
from ..persistence.base import RecordStore
from .geospatial import bounding_box, distance_km

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_KM = 5.0


def rank_by_distance(
    center_lat: float,
    center_lon: float,
    radius_km: float,
    pois: Iterable[PointOfInterest],
) -> list[tuple[float, PointOfInterest]]:
    """Return ``(distance_km, poi)`` pairs inside the radius, nearest first.

    The boundary is inclusive. ``sorted`` is stable, so equidistant POIs keep
    their input order.
    """
    within: list[tuple[float, PointOfInterest]] = []
    for poi in pois:
        distance = distance_km(center_lat, center_lon, poi.latitude, poi.longitude)
        if distance <= radius_km:
            within.append((distance, poi))
    return sorted(within, key=lambda item: item[0])


def find_nearby(
    center_lat: float,
    center_lon: float,
    radius_km: float = DEFAULT_RADIUS_KM,
    pois: Iterable[PointOfInterest] = (),
) -> list[PointOfInterest]:
    """Filter ``pois`` to those within ``radius_km`` of the center, nearest first."""
    return [poi for _, poi in rank_by_distance(center_lat, center_lon, radius_km, pois)]


def nearby_pois(
    store: RecordStore,
    latitude: float,
    longitude: float,
    radius_km: Optional[float] = None,
) -> list[tuple[float, PointOfInterest]]:
    """Query the store for POIs around a coordinate.

    A bounding box narrows the candidates the store returns; the exact distance
    filter is then applied here.
    """
    radius = settings.default_nearby_radius_km if radius_km is None else radius_km
    bbox = bounding_box(latitude, longitude, radius)
    candidates = store.list_pois(bbox=bbox)
    ranked = rank_by_distance(latitude, longitude, radius, candidates)
    logger.debug(
        "Nearby query (%s, %s) r=%skm: %d candidates, %d within radius",
        latitude,
        longitude,
        radius,
        len(candidates),
        len(ranked),
    )
    return ranked
