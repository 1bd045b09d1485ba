"""Database clients and utilities."""

from .supabase import build_supabase_client, get_supabase_client

__all__ = ["build_supabase_client", "get_supabase_client"]
