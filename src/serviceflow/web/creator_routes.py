"""
Creator dashboard entry point.

Decides between the onboarding wizard and the main dashboard. Once a
creator has completed onboarding the wizard is never shown again.
"""

from fastapi import APIRouter, Depends
from supabase import Client

from onboarding import portfolio, store
from onboarding.api import load_sequencer
from onboarding.forms import DAYS, specialization_label
from serviceflow.web.auth import AuthenticatedUser, get_user_client, require_creator

router = APIRouter(prefix="/creator", tags=["creator"])


@router.get("/dashboard")
async def get_creator_dashboard(
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
):
    """
    Returns either:
        {"view": "onboarding", "onboarding": <wizard state>}
    or
        {"view": "dashboard", "profile": ..., "summary": ...}
    """
    sequencer = await load_sequencer(user, client)

    if not sequencer.completed:
        return {"view": "onboarding", "onboarding": sequencer.snapshot()}

    profile = sequencer.profile
    specializations = await store.list_specializations(client, profile.id)
    items = await portfolio.list_portfolio(client, profile.id)
    packages = await store.list_pricing(client, profile.id)
    days = await store.list_availability(client, profile.id)

    day_names = {d["id"]: d["short"] for d in DAYS}

    return {
        "view": "dashboard",
        "profile": profile.to_dict(),
        "summary": {
            "specializations": [
                {**s, "label": specialization_label(s["category"])} for s in specializations
            ],
            "portfolio_count": len(items),
            "packages": [
                {"package_name": p["package_name"], "hours_range": p["hours_range"], "price": p["price"]}
                for p in packages
            ],
            "available_days": [day_names[d["day_of_week"]] for d in days if d["is_available"]],
        },
    }
