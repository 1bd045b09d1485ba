"""Pydantic request/response models for zone endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..errors import GeometryError
from ..models.domain import Zone
from ..services.geometry import parse_polygon
from ..services.geospatial import polygon_centroid


class CreateZoneRequest(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    geometry: str = Field(..., description="GeoJSON Polygon encoded as a string.")
    estimated_houses: int = Field(..., ge=0)
    created_by: int = Field(..., description="Id of the administrator creating the zone.")


class UpdateZoneRequest(BaseModel):
    """Partial update; only fields present in the payload are changed."""

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    geometry: Optional[str] = None
    estimated_houses: Optional[int] = Field(default=None, ge=0)


class ZoneResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    geometry: str
    estimated_houses: int
    created_by: int
    created_at: datetime
    updated_at: datetime
    centroid: Optional[tuple[float, float]] = Field(
        default=None, description="Label point as (latitude, longitude)."
    )

    @classmethod
    def from_record(cls, zone: Zone) -> "ZoneResponse":
        try:
            centroid = polygon_centroid(parse_polygon(zone.geometry))
        except GeometryError:
            # rows written before validation existed
            centroid = None
        return cls(
            id=zone.id,
            name=zone.name,
            description=zone.description,
            geometry=zone.geometry,
            estimated_houses=zone.estimated_houses,
            created_by=zone.created_by,
            created_at=zone.created_at,
            updated_at=zone.updated_at,
            centroid=centroid,
        )
