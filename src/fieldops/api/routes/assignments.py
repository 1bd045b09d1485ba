"""API routes for zone assignments and POI tasks."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from ...errors import FieldOpsError
from ...persistence.base import RecordStore
from ...persistence.store import get_store
from ...schemas.assignments import (
    AssignPoiRequest,
    AssignZoneRequest,
    PoiTaskResponse,
    PoiTaskWithPoiResponse,
    UpdateProgressRequest,
    ZoneAssignmentResponse,
)
from ...schemas.pois import PoiResponse
from ...services import assignments as assignment_service
from ..errors import to_http_exception

router = APIRouter(tags=["assignments"])


@router.post("/assignments", response_model=ZoneAssignmentResponse, status_code=status.HTTP_201_CREATED)
def assign_zone(payload: AssignZoneRequest, store: RecordStore = Depends(get_store)) -> ZoneAssignmentResponse:
    """Assign a zone to a user. Fails with 409 while the zone has an active assignment."""
    try:
        assignment = assignment_service.assign_zone(store, payload.zone_id, payload.user_id)
    except (FieldOpsError, ConnectionError) as exc:
        raise to_http_exception(exc) from exc
    return ZoneAssignmentResponse.model_validate(assignment)


@router.post(
    "/assignments/{assignment_id}/progress",
    response_model=ZoneAssignmentResponse,
    status_code=status.HTTP_200_OK,
)
def update_progress(
    assignment_id: int,
    payload: UpdateProgressRequest,
    store: RecordStore = Depends(get_store),
) -> ZoneAssignmentResponse:
    try:
        assignment = assignment_service.update_progress(store, assignment_id, payload.progress_houses)
    except (FieldOpsError, ConnectionError) as exc:
        raise to_http_exception(exc) from exc
    return ZoneAssignmentResponse.model_validate(assignment)


@router.post(
    "/assignments/{assignment_id}/complete",
    response_model=ZoneAssignmentResponse,
    status_code=status.HTTP_200_OK,
)
def complete_zone(assignment_id: int, store: RecordStore = Depends(get_store)) -> ZoneAssignmentResponse:
    try:
        assignment = assignment_service.complete_zone(store, assignment_id)
    except (FieldOpsError, ConnectionError) as exc:
        raise to_http_exception(exc) from exc
    return ZoneAssignmentResponse.model_validate(assignment)


@router.get(
    "/users/{user_id}/assignments",
    response_model=List[ZoneAssignmentResponse],
    status_code=status.HTTP_200_OK,
)
def list_user_assignments(user_id: int, store: RecordStore = Depends(get_store)) -> List[ZoneAssignmentResponse]:
    try:
        assignments = assignment_service.list_user_assignments(store, user_id)
    except ConnectionError as exc:
        raise to_http_exception(exc) from exc
    return [ZoneAssignmentResponse.model_validate(item) for item in assignments]


@router.post("/poi-tasks", response_model=PoiTaskResponse, status_code=status.HTTP_201_CREATED)
def assign_poi(payload: AssignPoiRequest, store: RecordStore = Depends(get_store)) -> PoiTaskResponse:
    try:
        task = assignment_service.assign_poi(store, payload.poi_id, payload.user_id)
    except (FieldOpsError, ConnectionError) as exc:
        raise to_http_exception(exc) from exc
    return PoiTaskResponse.model_validate(task)


@router.post("/poi-tasks/{task_id}/complete", response_model=PoiTaskResponse, status_code=status.HTTP_200_OK)
def complete_poi_task(task_id: int, store: RecordStore = Depends(get_store)) -> PoiTaskResponse:
    """Mark a poster task done. Safe to repeat; each call refreshes ``completed_at``."""
    try:
        task = assignment_service.complete_poi_task(store, task_id)
    except (FieldOpsError, ConnectionError) as exc:
        raise to_http_exception(exc) from exc
    return PoiTaskResponse.model_validate(task)


@router.get(
    "/users/{user_id}/poi-tasks",
    response_model=List[PoiTaskWithPoiResponse],
    status_code=status.HTTP_200_OK,
)
def list_user_poi_tasks(user_id: int, store: RecordStore = Depends(get_store)) -> List[PoiTaskWithPoiResponse]:
    try:
        entries = assignment_service.list_user_poi_tasks(store, user_id)
    except ConnectionError as exc:
        raise to_http_exception(exc) from exc
    return [
        PoiTaskWithPoiResponse(
            **PoiTaskResponse.model_validate(entry.task).model_dump(),
            poi=PoiResponse.model_validate(entry.poi),
        )
        for entry in entries
    ]
