"""
Onboarding persistence.

All reads and writes for the wizard go through here. Every function takes
the caller's Supabase client explicitly so row-level security applies.
Platform failures are logged and re-raised as PersistenceError with a
user-facing message; nothing is retried.
"""

import logging
from typing import Any

from supabase import Client

from .forms import (
    DEFAULT_SKILL_LEVEL,
    BankingForm,
    DayAvailabilityUpdate,
    PricingPackageForm,
    default_day,
    normalize_time,
)
from .state import LAST_STEP, CreatorProfile

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """A platform call failed. `message` is safe to show to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def run_query(query: Any, failure_message: str) -> Any:
    """Run a PostgREST query, converting any failure to PersistenceError."""
    try:
        return query.execute()
    except Exception as e:
        logger.error(f"{failure_message}: {e}")
        raise PersistenceError(failure_message) from e


# =============================================================================
# Creator Profile
# =============================================================================


async def get_profile(client: Client, user_id: str) -> CreatorProfile | None:
    """Load the creator profile for a user, if it exists."""
    result = run_query(
        client.table("creator_profiles").select("*").eq("user_id", user_id).limit(1),
        "Could not load your creator profile.",
    )
    if not result.data:
        return None
    return CreatorProfile.from_row(result.data[0])


async def get_or_create_profile(client: Client, user_id: str) -> CreatorProfile:
    """
    Load the creator profile or create it at step 1.

    Called whenever the wizard is opened. Two first visits can race on the
    insert; the loser picks up the winner's row.
    """
    profile = await get_profile(client, user_id)
    if profile is not None:
        return profile

    try:
        result = run_query(
            client.table("creator_profiles").insert({
                "user_id": user_id,
                "onboarding_step": 1,
                "onboarding_completed": False,
            }),
            "Could not initialize your profile.",
        )
    except PersistenceError:
        profile = await get_profile(client, user_id)
        if profile is None:
            raise
        return profile

    logger.info(f"Created creator profile for user {user_id}")
    return CreatorProfile.from_row(result.data[0])


class SupabaseProgressStore:
    """Writes the wizard's step pointer and completion flag."""

    def __init__(self, client: Client):
        self.client = client

    async def save_step(self, profile_id: str, step: int) -> None:
        run_query(
            self.client.table("creator_profiles")
            .update({"onboarding_step": step})
            .eq("id", profile_id),
            "Could not save your progress.",
        )

    async def mark_completed(self, profile_id: str) -> None:
        run_query(
            self.client.table("creator_profiles")
            .update({"onboarding_completed": True, "onboarding_step": int(LAST_STEP)})
            .eq("id", profile_id),
            "Could not complete onboarding.",
        )
        logger.info(f"Onboarding completed for creator profile {profile_id}")


# =============================================================================
# Step 1: Profile
# =============================================================================


async def get_base_profile(client: Client, user_id: str) -> dict:
    """Name and email from the shared profiles table (read-only here)."""
    result = run_query(
        client.table("profiles").select("full_name, email").eq("user_id", user_id).limit(1),
        "Could not load your profile.",
    )
    if not result.data:
        return {"full_name": None, "email": None}
    return result.data[0]


async def update_profile_field(client: Client, creator_id: str, field: str, value: Any) -> None:
    """Autosave one Step 1 field."""
    run_query(
        client.table("creator_profiles").update({field: value}).eq("id", creator_id),
        "Could not save your profile.",
    )


# =============================================================================
# Step 2: Specialization
# =============================================================================


async def list_specializations(client: Client, creator_id: str) -> list[dict]:
    result = run_query(
        client.table("creator_specializations")
        .select("category, skill_level")
        .eq("creator_id", creator_id),
        "Could not load your specializations.",
    )
    return result.data


async def toggle_specialization(client: Client, creator_id: str, category: str) -> bool:
    """
    Add the category at the default level, or remove it if present.

    Returns True when the category is selected after the call.
    """
    existing = run_query(
        client.table("creator_specializations")
        .select("id")
        .eq("creator_id", creator_id)
        .eq("category", category),
        "Could not update your specializations.",
    )

    if existing.data:
        run_query(
            client.table("creator_specializations")
            .delete()
            .eq("creator_id", creator_id)
            .eq("category", category),
            "Could not update your specializations.",
        )
        return False

    run_query(
        client.table("creator_specializations").insert({
            "creator_id": creator_id,
            "category": category,
            "skill_level": DEFAULT_SKILL_LEVEL,
        }),
        "Could not update your specializations.",
    )
    return True


async def set_skill_level(client: Client, creator_id: str, category: str, skill_level: str) -> bool:
    """Change the level of a selected category. False if it isn't selected."""
    result = run_query(
        client.table("creator_specializations")
        .update({"skill_level": skill_level})
        .eq("creator_id", creator_id)
        .eq("category", category),
        "Could not update your skill level.",
    )
    return bool(result.data)


# =============================================================================
# Step 4: Pricing
# =============================================================================


async def list_pricing(client: Client, creator_id: str) -> list[dict]:
    result = run_query(
        client.table("creator_pricing").select("*").eq("creator_id", creator_id).order("price"),
        "Could not load your pricing packages.",
    )
    return result.data


async def save_pricing_package(client: Client, creator_id: str, package: PricingPackageForm) -> dict | None:
    """
    Insert a new package or update an existing one.

    Returns the stored row, or None if `package.id` doesn't belong to
    this creator.
    """
    if package.id:
        result = run_query(
            client.table("creator_pricing")
            .update(package.to_row())
            .eq("id", package.id)
            .eq("creator_id", creator_id),
            "Could not save your pricing package.",
        )
        return result.data[0] if result.data else None

    result = run_query(
        client.table("creator_pricing").insert({"creator_id": creator_id, **package.to_row()}),
        "Could not save your pricing package.",
    )
    return result.data[0]


async def delete_pricing_package(client: Client, creator_id: str, package_id: str) -> bool:
    result = run_query(
        client.table("creator_pricing")
        .delete()
        .eq("id", package_id)
        .eq("creator_id", creator_id),
        "Could not delete your pricing package.",
    )
    return bool(result.data)


# =============================================================================
# Step 5: Availability
# =============================================================================


def _day_record(row: dict) -> dict:
    return {
        "day_of_week": row["day_of_week"],
        "start_time": normalize_time(row["start_time"]),
        "end_time": normalize_time(row["end_time"]),
        "is_available": bool(row.get("is_available")),
    }


async def list_availability(client: Client, creator_id: str) -> list[dict]:
    """All seven weekdays, stored rows merged over the defaults."""
    result = run_query(
        client.table("creator_availability").select("*").eq("creator_id", creator_id),
        "Could not load your availability.",
    )
    stored = {row["day_of_week"]: _day_record(row) for row in result.data}
    return [stored.get(day, default_day(day)) for day in range(7)]


async def upsert_availability(
    client: Client,
    creator_id: str,
    day_of_week: int,
    update: DayAvailabilityUpdate,
) -> dict:
    """Write one weekday. Keyed by (creator_id, day_of_week)."""
    result = run_query(
        client.table("creator_availability").upsert(
            {
                "creator_id": creator_id,
                "day_of_week": day_of_week,
                "start_time": update.start_time,
                "end_time": update.end_time,
                "is_available": update.is_available,
            },
            on_conflict="creator_id,day_of_week",
        ),
        "Could not save availability.",
    )
    return _day_record(result.data[0])


# =============================================================================
# Step 6: Banking
# =============================================================================


async def get_banking(client: Client, creator_id: str) -> dict | None:
    result = run_query(
        client.table("creator_banking").select("*").eq("creator_id", creator_id).limit(1),
        "Could not load banking details.",
    )
    return result.data[0] if result.data else None


async def save_banking(client: Client, creator_id: str, form: BankingForm) -> tuple[dict, bool]:
    """
    Update the banking row if one exists, otherwise insert it.

    Returns (row, created).
    """
    existing = await get_banking(client, creator_id)
    details = form.model_dump()

    if existing:
        result = run_query(
            client.table("creator_banking").update(details).eq("creator_id", creator_id),
            "Could not save banking details.",
        )
        return result.data[0], False

    result = run_query(
        client.table("creator_banking").insert({"creator_id": creator_id, **details}),
        "Could not save banking details.",
    )
    return result.data[0], True
