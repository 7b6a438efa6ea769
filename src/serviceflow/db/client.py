"""
ServiceFlow - Supabase Client.

Low-level platform access. Request handlers receive an authenticated client
so row-level security applies to every query they make.
"""

from supabase import Client, ClientOptions, create_client

from serviceflow.config import settings

# Singleton client instance
_service_client: Client | None = None


def get_service_client() -> Client:
    """
    Get the service-role Supabase client.

    Uses singleton pattern to reuse connection. Bypasses RLS: only used to
    validate access tokens, for admin overviews and by CLI tooling.
    """
    global _service_client

    if _service_client is None:
        _service_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )

    return _service_client


def get_authenticated_client(access_token: str) -> Client:
    """
    Build a client that acts as the caller.

    The caller's JWT is sent on every table and storage request, so the
    platform evaluates its policies against auth.uid().
    """
    return create_client(
        settings.supabase_url,
        settings.supabase_anon_key,
        options=ClientOptions(headers={"Authorization": f"Bearer {access_token}"}),
    )
