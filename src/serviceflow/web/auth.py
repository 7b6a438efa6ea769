"""
Authentication utilities for FastAPI routes.

Shared auth dependencies used by all route modules. Sessions are validated
against Supabase Auth; the role claim comes from the user_roles table.
"""

import logging
from enum import Enum

from fastapi import Depends, Header, HTTPException
from pydantic import BaseModel
from supabase import Client

from onboarding.store import run_query
from serviceflow.db.client import get_authenticated_client, get_service_client

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """The three portals of the platform."""
    INFLUENCER = "influencer"
    CREATOR = "creator"
    ADMIN = "admin"

    @classmethod
    def from_claim(cls, claim: str | None) -> "Role | None":
        """Parse a stored role claim, accepting the legacy customer/team names."""
        if not claim:
            return None
        return _CLAIM_TO_ROLE.get(claim.lower())


# Stored app_role values -> portal roles
_CLAIM_TO_ROLE = {
    "customer": Role.INFLUENCER,
    "influencer": Role.INFLUENCER,
    "team": Role.CREATOR,
    "creator": Role.CREATOR,
    "admin": Role.ADMIN,
}

# Where each portal sends a visitor without a matching session
AUTH_PAGES = {
    Role.INFLUENCER: "/influencer/auth",
    Role.CREATOR: "/creator/auth",
    Role.ADMIN: "/admin/login",
}


class AuthenticatedUser(BaseModel):
    """Authenticated user info from Supabase JWT."""
    id: str
    email: str | None
    access_token: str
    role: Role | None = None


def load_role(client: Client, user_id: str) -> Role | None:
    """Read the user's role claim. First stored role wins."""
    result = run_query(
        client.table("user_roles")
        .select("role")
        .eq("user_id", user_id)
        .order("created_at")
        .limit(1),
        "Could not verify your account.",
    )
    if not result.data:
        return None
    return Role.from_claim(result.data[0].get("role"))


async def get_optional_user(authorization: str = Header(None)) -> AuthenticatedUser | None:
    """
    Validate Supabase JWT and extract user info.

    Expects Authorization header: "Bearer <access_token>".
    Returns None when no valid session is present. A failed role lookup
    for a valid session raises PersistenceError.
    """
    if not authorization or not authorization.startswith("Bearer "):
        return None

    access_token = authorization[7:]  # Remove "Bearer " prefix
    client = get_service_client()

    try:
        user_response = client.auth.get_user(access_token)
    except Exception as e:
        logger.warning(f"Auth validation failed: {e}")
        return None
    if not user_response or not user_response.user:
        return None

    user = user_response.user
    return AuthenticatedUser(
        id=user.id,
        email=user.email,
        access_token=access_token,
        role=load_role(client, user.id),
    )


async def get_current_user(
    user: AuthenticatedUser | None = Depends(get_optional_user),
) -> AuthenticatedUser:
    """Require a valid session, whatever the role."""
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return user


def check_role_access(user: AuthenticatedUser | None, expected: Role) -> str | None:
    """
    Route guard predicate.

    Returns the auth page to redirect to when access is refused, or None
    when the session is present and its role matches.
    """
    if user is None or user.role != expected:
        return AUTH_PAGES[expected]
    return None


def require_role(expected: Role):
    """Build a dependency that admits only sessions with the given role."""

    async def dependency(
        user: AuthenticatedUser | None = Depends(get_optional_user),
    ) -> AuthenticatedUser:
        redirect_to = check_role_access(user, expected)
        if redirect_to is not None:
            status_code = 401 if user is None else 403
            message = "Sign in required" if user is None else f"{expected.value.title()} access only"
            raise HTTPException(
                status_code=status_code,
                detail={"message": message, "redirect_to": redirect_to},
            )
        return user

    return dependency


require_influencer = require_role(Role.INFLUENCER)
require_creator = require_role(Role.CREATOR)
require_admin = require_role(Role.ADMIN)


def get_user_client(user: AuthenticatedUser = Depends(get_current_user)) -> Client:
    """Per-request Supabase client acting as the caller."""
    return get_authenticated_client(user.access_token)
