"""
ServiceFlow - Database Client.

Provides Supabase access (PostgREST tables and storage buckets).
"""

from serviceflow.db.client import get_authenticated_client, get_service_client

__all__ = [
    "get_service_client",
    "get_authenticated_client",
]
