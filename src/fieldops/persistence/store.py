"""Selects the record store backing the API."""

from __future__ import annotations

import logging
from functools import lru_cache

from ..db.supabase import get_supabase_client
from .base import RecordStore
from .database import SupabaseStore
from .memory import InMemoryStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_store() -> RecordStore:
    """Return the Supabase store when configured, otherwise a process-local store."""
    client = get_supabase_client()
    if client is None:
        logger.warning("Supabase not configured - records are kept in memory only")
        return InMemoryStore()
    return SupabaseStore(client)
