"""Pydantic request/response models for zone assignments and POI tasks."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import AssignmentStatus, TaskStatus
from .pois import PoiResponse


class AssignZoneRequest(BaseModel):
    zone_id: int
    user_id: int


class UpdateProgressRequest(BaseModel):
    progress_houses: int = Field(..., ge=0, description="Houses visited so far.")


class ZoneAssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    zone_id: int
    user_id: int
    status: AssignmentStatus
    progress_houses: int
    assigned_at: datetime
    completed_at: Optional[datetime] = None


class AssignPoiRequest(BaseModel):
    poi_id: int
    user_id: int


class PoiTaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    poi_id: int
    user_id: int
    status: TaskStatus
    assigned_at: datetime
    completed_at: Optional[datetime] = None


class PoiTaskWithPoiResponse(PoiTaskResponse):
    poi: PoiResponse
