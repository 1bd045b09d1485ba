"""Point-of-interest administration."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..errors import CoordinateOutOfRange, NotAdmin, PoiNotFound, UserNotFound, ValidationError
from ..models.domain import PoiType, PointOfInterest
from ..persistence.base import RecordStore
from . import clock

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"name", "description", "latitude", "longitude", "poi_type"})
NULLABLE_FIELDS = frozenset({"description"})


def validate_coordinates(latitude: Optional[float] = None, longitude: Optional[float] = None) -> None:
    """Check geographic bounds (inclusive) for whichever coordinates are given."""
    if latitude is not None and not -90.0 <= latitude <= 90.0:
        raise CoordinateOutOfRange("Latitude must be between -90 and 90")
    if longitude is not None and not -180.0 <= longitude <= 180.0:
        raise CoordinateOutOfRange("Longitude must be between -180 and 180")


def create_poi(
    store: RecordStore,
    *,
    name: str,
    latitude: float,
    longitude: float,
    poi_type: PoiType | str,
    created_by: int,
    description: Optional[str] = None,
) -> PointOfInterest:
    """Validate and persist a new POI. Only administrators may create POIs."""
    user = store.get_user(created_by)
    if user is None:
        raise UserNotFound(created_by)
    if not user.is_admin:
        logger.warning("User %s attempted to create a POI without admin role", created_by)
        raise NotAdmin(created_by, "create POIs")

    validate_coordinates(latitude, longitude)

    now = clock.utcnow()
    poi = store.insert_poi(
        {
            "name": name,
            "description": description,
            "latitude": float(latitude),
            "longitude": float(longitude),
            "poi_type": PoiType(poi_type),
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
        }
    )
    logger.info("POI %s '%s' created at (%s, %s)", poi.id, poi.name, poi.latitude, poi.longitude)
    return poi


def update_poi(store: RecordStore, poi_id: int, changes: dict[str, Any]) -> PointOfInterest:
    """Apply a partial update; coordinates are range-checked when supplied."""
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update POI fields: {', '.join(sorted(unknown))}")
    cleared = sorted(key for key, value in changes.items() if value is None and key not in NULLABLE_FIELDS)
    if cleared:
        raise ValidationError(f"POI fields cannot be null: {', '.join(cleared)}")

    if store.get_poi(poi_id) is None:
        raise PoiNotFound(poi_id)
    validate_coordinates(changes.get("latitude"), changes.get("longitude"))

    values = dict(changes)
    if "poi_type" in values:
        values["poi_type"] = PoiType(values["poi_type"])
    for key in ("latitude", "longitude"):
        if key in values:
            values[key] = float(values[key])
    values["updated_at"] = clock.utcnow()

    updated = store.update_poi(poi_id, values)
    if updated is None:
        raise PoiNotFound(poi_id)
    logger.info("POI %s updated (%s)", poi_id, ", ".join(sorted(changes)) or "timestamp only")
    return updated


def list_pois(store: RecordStore) -> list[PointOfInterest]:
    return store.list_pois()
