"""Pydantic request/response models for point-of-interest endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import PoiType


class CreatePoiRequest(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    latitude: float
    longitude: float
    poi_type: PoiType
    created_by: int = Field(..., description="Id of the administrator creating the POI.")


class UpdatePoiRequest(BaseModel):
    """Partial update; only fields present in the payload are changed."""

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    poi_type: Optional[PoiType] = None


class PoiResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str]
    latitude: float
    longitude: float
    poi_type: PoiType
    created_by: int
    created_at: datetime
    updated_at: datetime


class NearbyPoiResponse(PoiResponse):
    distance_km: float
