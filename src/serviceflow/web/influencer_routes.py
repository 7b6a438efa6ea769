"""
Influencer dashboard API.

Own profile, bookings and notifications. Row-level security limits every
query to the caller's rows; the explicit user filters keep results scoped
even so.
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from supabase import Client

from onboarding.store import run_query
from serviceflow.web.auth import AuthenticatedUser, get_user_client, require_influencer

router = APIRouter(prefix="/influencer", tags=["influencer"])


class ProfileUpdate(BaseModel):
    full_name: str = Field(default="", max_length=200)
    phone: str = Field(default="", max_length=32)


@router.get("/profile")
async def get_profile(
    user: AuthenticatedUser = Depends(require_influencer),
    client: Client = Depends(get_user_client),
):
    result = run_query(
        client.table("profiles").select("full_name, email, phone").eq("user_id", user.id).limit(1),
        "Could not load your profile.",
    )
    if not result.data:
        return {"full_name": None, "email": user.email, "phone": None}
    return result.data[0]


@router.put("/profile")
async def update_profile(
    request: ProfileUpdate,
    user: AuthenticatedUser = Depends(require_influencer),
    client: Client = Depends(get_user_client),
):
    result = run_query(
        client.table("profiles")
        .update({"full_name": request.full_name.strip(), "phone": request.phone.strip()})
        .eq("user_id", user.id),
        "Could not update profile.",
    )
    if not result.data:
        raise HTTPException(status_code=404, detail="Profile not found")
    return {"success": True, "profile": result.data[0], "message": "Your changes have been saved."}


@router.get("/bookings")
async def list_bookings(
    user: AuthenticatedUser = Depends(require_influencer),
    client: Client = Depends(get_user_client),
):
    """Own bookings with the booked service, newest date first."""
    result = run_query(
        client.table("bookings")
        .select("id, booking_date, booking_time, status, notes, services(name, duration_minutes, price)")
        .eq("customer_id", user.id)
        .order("booking_date", desc=True),
        "Could not load your bookings.",
    )
    return {"bookings": result.data, "count": len(result.data)}


@router.get("/notifications")
async def list_notifications(
    user: AuthenticatedUser = Depends(require_influencer),
    client: Client = Depends(get_user_client),
):
    result = run_query(
        client.table("notifications")
        .select("*")
        .eq("user_id", user.id)
        .order("created_at", desc=True),
        "Could not load notifications.",
    )
    notifications = result.data
    return {
        "notifications": notifications,
        "unread_count": sum(1 for n in notifications if not n.get("is_read")),
    }


@router.post("/notifications/{notification_id}/read")
async def mark_notification_read(
    notification_id: str,
    user: AuthenticatedUser = Depends(require_influencer),
    client: Client = Depends(get_user_client),
):
    result = run_query(
        client.table("notifications")
        .update({"is_read": True})
        .eq("id", notification_id)
        .eq("user_id", user.id),
        "Could not update notification.",
    )
    if not result.data:
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"success": True}
