"""API routes for points of interest and proximity queries."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...errors import FieldOpsError
from ...persistence.base import RecordStore
from ...persistence.store import get_store
from ...schemas.pois import CreatePoiRequest, NearbyPoiResponse, PoiResponse, UpdatePoiRequest
from ...services import pois as poi_service
from ...services.proximity import nearby_pois
from ..errors import to_http_exception

router = APIRouter(prefix="/pois", tags=["pois"])


@router.post("", response_model=PoiResponse, status_code=status.HTTP_201_CREATED)
def create_poi(payload: CreatePoiRequest, store: RecordStore = Depends(get_store)) -> PoiResponse:
    try:
        poi = poi_service.create_poi(store, **payload.model_dump())
    except (FieldOpsError, ConnectionError) as exc:
        raise to_http_exception(exc) from exc
    return PoiResponse.model_validate(poi)


@router.get("", response_model=List[PoiResponse], status_code=status.HTTP_200_OK)
def list_pois(store: RecordStore = Depends(get_store)) -> List[PoiResponse]:
    try:
        pois = poi_service.list_pois(store)
    except ConnectionError as exc:
        raise to_http_exception(exc) from exc
    return [PoiResponse.model_validate(poi) for poi in pois]


@router.get("/nearby", response_model=List[NearbyPoiResponse], status_code=status.HTTP_200_OK)
def get_nearby_pois(
    latitude: float = Query(..., ge=-90, le=90, description="Latitude of the search center"),
    longitude: float = Query(..., ge=-180, le=180, description="Longitude of the search center"),
    radius_km: float | None = Query(
        default=None,
        ge=0,
        description="Search radius in kilometers (defaults to the configured radius, 5 km).",
    ),
    store: RecordStore = Depends(get_store),
) -> List[NearbyPoiResponse]:
    """Return POIs within the radius, nearest first."""
    try:
        ranked = nearby_pois(store, latitude, longitude, radius_km)
    except ConnectionError as exc:
        raise to_http_exception(exc) from exc
    return [
        NearbyPoiResponse(**PoiResponse.model_validate(poi).model_dump(), distance_km=round(distance, 3))
        for distance, poi in ranked
    ]


@router.patch("/{poi_id}", response_model=PoiResponse, status_code=status.HTTP_200_OK)
def update_poi(
    poi_id: int,
    payload: UpdatePoiRequest,
    store: RecordStore = Depends(get_store),
) -> PoiResponse:
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")
    try:
        poi = poi_service.update_poi(store, poi_id, changes)
    except (FieldOpsError, ConnectionError) as exc:
        raise to_http_exception(exc) from exc
    return PoiResponse.model_validate(poi)
