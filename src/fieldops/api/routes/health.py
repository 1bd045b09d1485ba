"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...persistence.base import RecordStore
from ...persistence.store import get_store

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database(store: RecordStore = Depends(get_store)) -> dict:
    """Report which store backs the API and whether it answers queries."""
    if store.name == "memory":
        return {
            "configured": False,
            "store": store.name,
            "message": "Supabase not configured. Set FIELDOPS_SUPABASE_URL and FIELDOPS_SUPABASE_KEY environment variables.",
        }

    try:
        zones = store.list_zones()
    except Exception as exc:
        return {
            "configured": True,
            "store": store.name,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
    return {
        "configured": True,
        "store": store.name,
        "connected": True,
        "zones_count": len(zones),
        "message": f"Database connected. Found {len(zones)} zones in database.",
    }
