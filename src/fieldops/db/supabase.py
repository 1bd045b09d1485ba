"""Supabase client factory."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from supabase import Client, create_client

from ..config import settings

logger = logging.getLogger(__name__)


def build_supabase_client(url: Optional[str], key: Optional[str]) -> Client | None:
    """Create a client for the given project, or None when it cannot be built.

    Building a client performs no request, so a bad URL or key only shows up on
    the first query.
    """
    missing = [name for name, value in (("FIELDOPS_SUPABASE_URL", url), ("FIELDOPS_SUPABASE_KEY", key)) if not value]
    if missing:
        logger.warning("Supabase disabled: %s not set", ", ".join(missing))
        return None

    try:
        return create_client(url, key)
    except Exception as exc:
        logger.error("Could not build Supabase client for %s: %s", url, exc)
        return None


@lru_cache()
def get_supabase_client() -> Client | None:
    """Client for the configured project, built once per process."""
    return build_supabase_client(settings.supabase_url, settings.supabase_key)
