"""
Onboarding API Endpoints.

Creator-only router for the 6-step wizard. The frontend holds the step in
view and sends it with every transition; the server holds the furthest
step reached.

PersistenceError and TransitionError raised here are turned into HTTP
responses by the handlers registered in serviceflow.web.app.
"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, Field
from supabase import Client

from serviceflow.config import settings
from serviceflow.web.auth import AuthenticatedUser, get_user_client, require_creator

from . import portfolio, store
from .forms import (
    VALID_SPECIALIZATIONS,
    BankingForm,
    DayAvailabilityUpdate,
    PricingPackageForm,
    ProfileFieldUpdate,
    SkillLevelUpdate,
    get_form_options,
    mask_account_number,
    portfolio_hint,
    specialization_label,
)
from .state import CreatorProfile, OnboardingSequencer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/creator/onboarding", tags=["onboarding"])


# =============================================================================
# Request/Response Models
# =============================================================================


class StepRequest(BaseModel):
    """The step the wizard is currently showing."""
    current_step: int = Field(ge=1, le=6)


class StateResponse(BaseModel):
    """Wizard state for rendering the progress bar and navigation."""
    profile_id: str
    current_step: int
    furthest_step: int
    completed: bool
    can_retreat: bool
    can_advance: bool
    can_complete: bool
    steps: list[dict]


class CompleteResponse(BaseModel):
    success: bool
    completed: bool
    message: str = ""


# =============================================================================
# Helpers
# =============================================================================


async def load_sequencer(
    user: AuthenticatedUser,
    client: Client,
    current_step: int | None = None,
) -> OnboardingSequencer:
    """Open the wizard for this creator, creating the profile on first visit."""
    profile = await store.get_or_create_profile(client, user.id)
    return OnboardingSequencer(profile, store.SupabaseProgressStore(client), current_step)


async def _creator_profile(user: AuthenticatedUser, client: Client) -> CreatorProfile:
    return await store.get_or_create_profile(client, user.id)


# =============================================================================
# Endpoints: Sequencer
# =============================================================================


@router.get("/state", response_model=StateResponse)
async def get_onboarding_state(
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
) -> StateResponse:
    """Resume point: the furthest step reached."""
    sequencer = await load_sequencer(user, client)
    return StateResponse(**sequencer.snapshot())


@router.post("/advance", response_model=StateResponse)
async def advance_step(
    request: StepRequest,
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
) -> StateResponse:
    """Save & Continue. The view only moves once the new pointer is stored."""
    sequencer = await load_sequencer(user, client, request.current_step)
    await sequencer.advance()
    return StateResponse(**sequencer.snapshot())


@router.post("/retreat", response_model=StateResponse)
async def retreat_step(
    request: StepRequest,
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
) -> StateResponse:
    """Back. Nothing is written."""
    sequencer = await load_sequencer(user, client, request.current_step)
    sequencer.retreat()
    return StateResponse(**sequencer.snapshot())


@router.post("/complete", response_model=CompleteResponse)
async def complete_onboarding(
    request: StepRequest,
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
) -> CompleteResponse:
    """Complete Setup & Go to Dashboard."""
    sequencer = await load_sequencer(user, client, request.current_step)
    changed = await sequencer.complete()

    if changed:
        logger.info(f"Creator {user.id} finished onboarding")
        message = "Welcome aboard! Your creator profile is now complete."
    else:
        message = "Onboarding was already complete."

    return CompleteResponse(success=True, completed=True, message=message)


@router.get("/options")
async def get_onboarding_options():
    """Option lists for every step (states, languages, categories, hours...)."""
    return get_form_options()


# =============================================================================
# Endpoints: Step 1 - Profile
# =============================================================================


@router.get("/profile")
async def get_profile_step(
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
):
    profile = await _creator_profile(user, client)
    base = await store.get_base_profile(client, user.id)
    return {
        "full_name": base.get("full_name"),
        "email": base.get("email") or user.email,
        "bio": profile.bio or "",
        "state": profile.state or "",
        "city": profile.city or "",
        "location": profile.location or "",
        "languages": profile.languages,
    }


@router.patch("/profile")
async def autosave_profile_field(
    request: ProfileFieldUpdate,
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
):
    """Autosave a single field as it changes."""
    profile = await _creator_profile(user, client)
    await store.update_profile_field(client, profile.id, request.field, request.value)
    return {"success": True, "field": request.field, "value": request.value}


# =============================================================================
# Endpoints: Step 2 - Specialization
# =============================================================================


def _check_category(category: str) -> None:
    if category not in VALID_SPECIALIZATIONS:
        raise HTTPException(status_code=400, detail=f"Unknown specialization: {category}")


@router.get("/specializations")
async def get_specializations(
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
):
    profile = await _creator_profile(user, client)
    selected = await store.list_specializations(client, profile.id)
    summary = ", ".join(specialization_label(s["category"]) for s in selected)
    return {
        "selected": selected,
        "summary": summary or "No specializations selected yet",
    }


@router.post("/specializations/{category}/toggle")
async def toggle_specialization(
    category: str,
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
):
    """Select (at beginner level) or deselect a category."""
    _check_category(category)
    profile = await _creator_profile(user, client)
    selected = await store.toggle_specialization(client, profile.id, category)
    return {"category": category, "selected": selected}


@router.put("/specializations/{category}")
async def update_skill_level(
    category: str,
    request: SkillLevelUpdate,
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
):
    _check_category(category)
    profile = await _creator_profile(user, client)
    updated = await store.set_skill_level(client, profile.id, category, request.skill_level)
    if not updated:
        raise HTTPException(status_code=404, detail=f"{specialization_label(category)} is not selected")
    return {"category": category, "skill_level": request.skill_level}


# =============================================================================
# Endpoints: Step 3 - Portfolio
# =============================================================================


def _portfolio_response(items: list[dict], **extra) -> dict:
    return {
        "items": items,
        "count": len(items),
        "hint": portfolio_hint(len(items)),
        **extra,
    }


@router.get("/portfolio")
async def get_portfolio(
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
):
    profile = await _creator_profile(user, client)
    items = await portfolio.list_portfolio(client, profile.id)
    return _portfolio_response(items)


@router.post("/portfolio")
async def upload_portfolio(
    files: list[UploadFile] = File(...),
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
):
    """Bulk upload images/videos. Files that fail are listed in `failed`."""
    if not files:
        raise HTTPException(status_code=400, detail="No files selected")

    profile = await _creator_profile(user, client)
    uploads = [
        portfolio.PortfolioUpload(
            filename=f.filename or "upload",
            content_type=f.content_type or "application/octet-stream",
            data=await f.read(),
        )
        for f in files
    ]

    report = await portfolio.upload_portfolio_items(
        client,
        creator_id=profile.id,
        user_id=user.id,
        files=uploads,
        bucket=settings.portfolio_bucket,
    )
    items = await portfolio.list_portfolio(client, profile.id)
    return _portfolio_response(items, uploaded=len(report.uploaded), failed=report.failed)


@router.delete("/portfolio/{item_id}")
async def remove_portfolio_item(
    item_id: str,
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
):
    profile = await _creator_profile(user, client)
    removed = await portfolio.remove_portfolio_item(client, profile.id, item_id, settings.portfolio_bucket)
    if not removed:
        raise HTTPException(status_code=404, detail="Portfolio item not found")
    items = await portfolio.list_portfolio(client, profile.id)
    return _portfolio_response(items)


# =============================================================================
# Endpoints: Step 4 - Pricing
# =============================================================================


@router.get("/pricing")
async def get_pricing(
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
):
    profile = await _creator_profile(user, client)
    packages = await store.list_pricing(client, profile.id)
    # Start the form with one empty package
    if not packages:
        packages = [PricingPackageForm().model_dump()]
    return {"packages": packages}


@router.post("/pricing")
async def save_pricing_package(
    request: PricingPackageForm,
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
):
    """Save one package (insert when new, update when it has an id)."""
    if request.missing_fields():
        raise HTTPException(status_code=400, detail="Please fill in package name, hours, and price.")

    profile = await _creator_profile(user, client)
    saved = await store.save_pricing_package(client, profile.id, request)
    if saved is None:
        raise HTTPException(status_code=404, detail="Pricing package not found")
    return {"success": True, "package": saved, "message": "Your pricing package has been saved."}


@router.delete("/pricing/{package_id}")
async def delete_pricing_package(
    package_id: str,
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
):
    profile = await _creator_profile(user, client)
    deleted = await store.delete_pricing_package(client, profile.id, package_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Pricing package not found")
    return {"success": True}


# =============================================================================
# Endpoints: Step 5 - Availability
# =============================================================================


@router.get("/availability")
async def get_availability(
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
):
    profile = await _creator_profile(user, client)
    days = await store.list_availability(client, profile.id)
    return {
        "days": days,
        "available_days": sum(1 for d in days if d["is_available"]),
    }


@router.put("/availability/{day_of_week}")
async def update_availability(
    day_of_week: int,
    request: DayAvailabilityUpdate,
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
):
    """Upsert one weekday (0 = Sunday)."""
    if not 0 <= day_of_week <= 6:
        raise HTTPException(status_code=400, detail="day_of_week must be 0-6")

    profile = await _creator_profile(user, client)
    day = await store.upsert_availability(client, profile.id, day_of_week, request)
    return {"success": True, "day": day}


# =============================================================================
# Endpoints: Step 6 - Banking
# =============================================================================


def _masked_banking(row: dict | None) -> dict:
    row = row or {}
    return {
        "account_holder_name": row.get("account_holder_name") or "",
        "bank_name": row.get("bank_name") or "",
        "account_number": mask_account_number(row.get("account_number")) or "",
        "ifsc_code": row.get("ifsc_code") or "",
        "upi_id": row.get("upi_id") or "",
        "saved": bool(row),
    }


@router.get("/banking")
async def get_banking(
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
):
    profile = await _creator_profile(user, client)
    return _masked_banking(await store.get_banking(client, profile.id))


@router.put("/banking")
async def save_banking(
    request: BankingForm,
    user: AuthenticatedUser = Depends(require_creator),
    client: Client = Depends(get_user_client),
):
    """Save payout details. Independent of completing onboarding."""
    profile = await _creator_profile(user, client)
    row, created = await store.save_banking(client, profile.id, request)
    message = "Banking details saved." if created else "Banking details updated."
    return {"success": True, "message": message, "banking": _masked_banking(row)}
