"""
Admin overview API.

Read-only views across all creators. The caller's admin role is checked
by the route guard; queries then run on the service-role client because
no row-level policy grants admins the cross-user counts.
"""

from fastapi import APIRouter, Depends
from supabase import Client

from onboarding.forms import mask_account_number
from onboarding.store import run_query
from serviceflow.db.client import get_service_client
from serviceflow.web.auth import AuthenticatedUser, require_admin

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_client(user: AuthenticatedUser = Depends(require_admin)) -> Client:
    """Service-role client, only ever handed to verified admins."""
    return get_service_client()


def enrich_creator(client: Client, creator: dict) -> dict:
    """Attach the step data an admin reviews for one creator."""
    creator_id = creator["id"]

    profile = run_query(
        client.table("profiles").select("full_name, email").eq("user_id", creator["user_id"]).limit(1),
        "Could not load creators.",
    )
    specializations = run_query(
        client.table("creator_specializations").select("category, skill_level").eq("creator_id", creator_id),
        "Could not load creators.",
    )
    pricing = run_query(
        client.table("creator_pricing")
        .select("package_name, hours_range, price, includes")
        .eq("creator_id", creator_id),
        "Could not load creators.",
    )
    portfolio = run_query(
        client.table("creator_portfolio").select("id", count="exact").eq("creator_id", creator_id),
        "Could not load creators.",
    )
    banking = run_query(
        client.table("creator_banking")
        .select("bank_name, upi_id, account_number")
        .eq("creator_id", creator_id)
        .limit(1),
        "Could not load creators.",
    )
    availability = run_query(
        client.table("creator_availability")
        .select("day_of_week, start_time, end_time, is_available")
        .eq("creator_id", creator_id),
        "Could not load creators.",
    )

    banking_summary = None
    if banking.data:
        row = banking.data[0]
        banking_summary = {
            "bank_name": row.get("bank_name"),
            "upi_id": row.get("upi_id"),
            "account_number": mask_account_number(row.get("account_number")),
        }

    portfolio_count = portfolio.count if portfolio.count is not None else len(portfolio.data)

    return {
        **creator,
        "profile": profile.data[0] if profile.data else None,
        "specializations": specializations.data,
        "pricing": pricing.data,
        "portfolio_count": portfolio_count,
        "banking": banking_summary,
        "availability": sorted(availability.data, key=lambda d: d["day_of_week"]),
    }


@router.get("/creators")
async def list_creators(client: Client = Depends(get_admin_client)):
    """All creator profiles, newest first, with their onboarding data."""
    result = run_query(
        client.table("creator_profiles").select("*").order("created_at", desc=True),
        "Could not load creators.",
    )
    creators = [enrich_creator(client, creator) for creator in result.data]
    return {"creators": creators, "count": len(creators)}


@router.get("/stats")
async def get_stats(client: Client = Depends(get_admin_client)):
    bookings = run_query(client.table("bookings").select("status"), "Could not load stats.")
    influencers = run_query(
        client.table("user_roles").select("id").eq("role", "customer"),
        "Could not load stats.",
    )
    creators = run_query(
        client.table("user_roles").select("id").eq("role", "team"),
        "Could not load stats.",
    )

    statuses = [b.get("status") for b in bookings.data]
    return {
        "total_bookings": len(statuses),
        "pending_bookings": statuses.count("pending"),
        "completed_bookings": statuses.count("completed"),
        "total_influencers": len(influencers.data),
        "total_creators": len(creators.data),
    }
