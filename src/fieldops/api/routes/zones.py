"""API routes for zone administration."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ...errors import FieldOpsError
from ...persistence.base import RecordStore
from ...persistence.store import get_store
from ...schemas.zones import CreateZoneRequest, UpdateZoneRequest, ZoneResponse
from ...services import zones as zone_service
from ..errors import to_http_exception

router = APIRouter(prefix="/zones", tags=["zones"])


@router.post("", response_model=ZoneResponse, status_code=status.HTTP_201_CREATED)
def create_zone(payload: CreateZoneRequest, store: RecordStore = Depends(get_store)) -> ZoneResponse:
    """Create a zone after checking the creator is an admin and the geometry is a valid polygon."""
    try:
        zone = zone_service.create_zone(store, **payload.model_dump())
    except (FieldOpsError, ConnectionError) as exc:
        raise to_http_exception(exc) from exc
    return ZoneResponse.from_record(zone)


@router.get("", response_model=List[ZoneResponse], status_code=status.HTTP_200_OK)
def list_zones(store: RecordStore = Depends(get_store)) -> List[ZoneResponse]:
    try:
        zones = zone_service.list_zones(store)
    except ConnectionError as exc:
        raise to_http_exception(exc) from exc
    return [ZoneResponse.from_record(zone) for zone in zones]


@router.patch("/{zone_id}", response_model=ZoneResponse, status_code=status.HTTP_200_OK)
def update_zone(
    zone_id: int,
    payload: UpdateZoneRequest,
    store: RecordStore = Depends(get_store),
) -> ZoneResponse:
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")
    try:
        zone = zone_service.update_zone(store, zone_id, changes)
    except (FieldOpsError, ConnectionError) as exc:
        raise to_http_exception(exc) from exc
    return ZoneResponse.from_record(zone)
