"""
Tests for the influencer, creator and admin dashboard APIs.
"""

import pytest


class TestInfluencerDashboard:
    """Own profile, bookings and notifications."""

    @pytest.fixture
    def influencer(self, api_client, influencer_user, fake_db):
        fake_db.add_row("profiles", {
            "user_id": "influencer-1",
            "full_name": "Ria Sen",
            "email": "ria@example.com",
            "phone": "",
        })
        return api_client(influencer_user)

    def test_profile(self, influencer):
        body = influencer.get("/api/influencer/profile").json()
        assert body["full_name"] == "Ria Sen"

    def test_update_profile(self, influencer, fake_db):
        response = influencer.put("/api/influencer/profile", json={"full_name": " Ria S ", "phone": "98200"})
        assert response.json()["message"] == "Your changes have been saved."
        assert fake_db.rows("profiles")[0]["full_name"] == "Ria S"

    def test_bookings_newest_first(self, influencer, fake_db):
        fake_db.add_row("bookings", {"customer_id": "influencer-1", "booking_date": "2026-03-01", "status": "pending"})
        fake_db.add_row("bookings", {"customer_id": "influencer-1", "booking_date": "2026-04-01", "status": "completed"})
        fake_db.add_row("bookings", {"customer_id": "someone-else", "booking_date": "2026-05-01", "status": "pending"})

        body = influencer.get("/api/influencer/bookings").json()
        assert body["count"] == 2
        assert [b["booking_date"] for b in body["bookings"]] == ["2026-04-01", "2026-03-01"]

    def test_notifications(self, influencer, fake_db):
        note = fake_db.add_row("notifications", {"user_id": "influencer-1", "title": "Booked", "is_read": False})
        fake_db.add_row("notifications", {"user_id": "influencer-1", "title": "Hello", "is_read": True})

        assert influencer.get("/api/influencer/notifications").json()["unread_count"] == 1
        assert influencer.post(f"/api/influencer/notifications/{note['id']}/read").json() == {"success": True}
        assert influencer.get("/api/influencer/notifications").json()["unread_count"] == 0

    def test_mark_missing_notification(self, influencer):
        assert influencer.post("/api/influencer/notifications/nope/read").status_code == 404

    def test_creator_cannot_use_influencer_portal(self, api_client, creator_user):
        response = api_client(creator_user).get("/api/influencer/bookings")
        assert response.status_code == 403
        assert response.json()["detail"]["redirect_to"] == "/influencer/auth"


class TestCreatorDashboard:
    def test_incomplete_creator_sees_wizard(self, api_client, creator_user, fake_db):
        fake_db.add_row("creator_profiles", {"user_id": "creator-1", "onboarding_step": 3})

        body = api_client(creator_user).get("/api/creator/dashboard").json()

        assert body["view"] == "onboarding"
        assert body["onboarding"]["current_step"] == 3

    def test_completed_creator_sees_dashboard(self, api_client, creator_user, fake_db):
        profile = fake_db.add_row("creator_profiles", {
            "user_id": "creator-1",
            "onboarding_step": 6,
            "onboarding_completed": True,
            "bio": "Food reels",
        })
        fake_db.add_row("creator_pricing", {
            "creator_id": profile["id"],
            "package_name": "Basic",
            "hours_range": "1 hour",
            "price": 5000,
        })

        body = api_client(creator_user).get("/api/creator/dashboard").json()

        assert body["view"] == "dashboard"
        assert body["profile"]["bio"] == "Food reels"
        assert body["summary"]["packages"] == [{"package_name": "Basic", "hours_range": "1 hour", "price": 5000}]
        assert body["summary"]["available_days"] == ["Mon", "Tue", "Wed", "Thu", "Fri"]


class TestAdminDashboard:
    """Cross-creator views for admins."""

    @pytest.fixture
    def admin(self, api_client, admin_user):
        return api_client(admin_user)

    def test_stats(self, admin, fake_db):
        for status in ("pending", "pending", "completed", "cancelled"):
            fake_db.add_row("bookings", {"status": status})
        for role in ("customer", "customer", "team", "admin"):
            fake_db.add_row("user_roles", {"role": role})

        assert admin.get("/api/admin/stats").json() == {
            "total_bookings": 4,
            "pending_bookings": 2,
            "completed_bookings": 1,
            "total_influencers": 2,
            "total_creators": 1,
        }

    def test_creators_enriched(self, admin, fake_db):
        profile = fake_db.add_row("creator_profiles", {"user_id": "creator-1", "onboarding_step": 6})
        fake_db.add_row("profiles", {"user_id": "creator-1", "full_name": "Maya Rao", "email": "maya@example.com"})
        fake_db.add_row("creator_banking", {
            "creator_id": profile["id"],
            "bank_name": "SBI",
            "account_number": "123456789012",
        })
        for n in range(3):
            fake_db.add_row("creator_portfolio", {"creator_id": profile["id"], "display_order": n})
        fake_db.add_row("creator_availability", {"creator_id": profile["id"], "day_of_week": 3})
        fake_db.add_row("creator_availability", {"creator_id": profile["id"], "day_of_week": 1})

        body = admin.get("/api/admin/creators").json()

        assert body["count"] == 1
        creator = body["creators"][0]
        assert creator["profile"]["full_name"] == "Maya Rao"
        assert creator["portfolio_count"] == 3
        assert creator["banking"]["account_number"] == "********9012"
        assert [d["day_of_week"] for d in creator["availability"]] == [1, 3]

    def test_creators_newest_first(self, admin, fake_db):
        fake_db.add_row("creator_profiles", {"user_id": "a"})
        fake_db.add_row("creator_profiles", {"user_id": "b"})

        users = [c["user_id"] for c in admin.get("/api/admin/creators").json()["creators"]]
        assert users == ["b", "a"]

    def test_platform_failure(self, admin, fake_db):
        fake_db.fail("bookings", "select")
        response = admin.get("/api/admin/stats")
        assert response.status_code == 502
        assert response.json()["detail"] == "Could not load stats."

    def test_creator_cannot_see_admin(self, api_client, creator_user):
        assert api_client(creator_user).get("/api/admin/creators").status_code == 403
