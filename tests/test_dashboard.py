# =============================================================================
# tests/test_dashboard.py - Dashboard Statistics Tests
# =============================================================================
# The aggregate helpers run against plain customer dicts with a fixed clock;
# get_stats is exercised once against the fake Supabase client.
#
# Run with: pytest tests/test_dashboard.py -v
# =============================================================================

from datetime import datetime, timezone
from unittest.mock import patch

from core.services.dashboard_service import (
    DashboardService,
    overdue_tasks,
    project_health,
    revenue_summary,
    upcoming_activities,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

CUSTOMERS = [
    {
        "id": "c-won",
        "name": "Won Co",
        "stage": "closed_won",
        "agreed_implementation_cost": 6000,
        "payment_confirmed_date": "2026-03-01T10:00:00Z",
        "next_action_due_date": "2026-10-01",
    },
    {
        "id": "c-won-old",
        "name": "Last Year Co",
        "stage": "closed_won",
        "agreed_implementation_cost": "4000",
        "payment_confirmed_date": "2025-12-15T10:00:00+00:00",
    },
    {
        "id": "c-sent",
        "name": "Sent Co",
        "stage": "proposal_sent",
        "agreed_implementation_cost": 2500.5,
        "proposal_presentation_datetime": "2026-10-21T15:00:00+00:00",
        "next_action_required": "Follow up",
        "next_action_due_date": "2026-10-20",
    },
    {
        "id": "c-active",
        "name": "Active Co",
        "stage": "project_active",
        "project_status": "at_risk",
        "agreed_implementation_cost": None,
        "solution_due_date": "2026-11-30",
        "next_action_due_date": "2026-10-10",
        "current_blockers": "Waiting on API access",
    },
    {
        "id": "c-delivered",
        "name": "Delivered Co",
        "stage": "delivered",
        "project_status": "on_track",
        "solution_due_date": "2026-10-25",
    },
    {
        "id": "c-lost",
        "name": "Lost Co",
        "stage": "closed_lost",
        "next_action_due_date": "2026-10-05",
        "proposal_presentation_datetime": "2026-10-22T09:00:00+00:00",
    },
]


class TestRevenueSummary:
    """Tests for revenue_summary()."""

    def test_totals(self):
        revenue = revenue_summary(CUSTOMERS, consultation_count=8, year=2026)

        assert revenue == {
            "ytd": 6000.0,
            "pipeline": 2500.5,
            "conversion": 25.0,
            "avg_deal": 5000.0,
        }

    def test_no_consultations(self):
        revenue = revenue_summary([], consultation_count=0, year=2026)

        assert revenue == {"ytd": 0.0, "pipeline": 0.0, "conversion": 0.0, "avg_deal": 0.0}


class TestActivities:
    """Tests for upcoming_activities() and overdue_tasks()."""

    def test_upcoming_sorted_soonest_first(self):
        activities = upcoming_activities(CUSTOMERS, NOW)

        assert [(a["id"], a["type"]) for a in activities] == [
            ("c-sent", "action"),
            ("c-sent", "presentation"),
            ("c-lost", "presentation"),
        ]
        assert activities[0]["description"] == "Follow up"
        assert activities[1]["description"] == "Proposal Presentation"
        assert "_sort" not in activities[0]

    def test_overdue_skips_closed(self):
        overdue = overdue_tasks(CUSTOMERS, NOW)

        assert [task["id"] for task in overdue] == ["c-active"]


class TestProjectHealth:
    """Tests for project_health()."""

    def test_active_projects_by_due_date(self):
        health = project_health(CUSTOMERS)

        assert [p["id"] for p in health["active"]] == ["c-delivered", "c-active"]
        assert health["active"][1]["current_blockers"] == "Waiting on API access"
        assert health["on_track_count"] == 1
        assert health["at_risk_count"] == 1
        assert health["delayed_count"] == 0
        assert health["blocked_count"] == 0


class TestGetStats:
    """Tests for DashboardService.get_stats()."""

    def test_assembles_blocks(self, fake_db):
        fake_db.queue("customers", data=CUSTOMERS)
        fake_db.queue("consultation_requests", data=[], count=4)
        fake_db.queue("consultation_requests", data=[], count=1)
        fake_db.queue("customer_interactions", data=[{"id": "int-1"}])

        with patch("core.services.dashboard_service.utc_now", return_value=NOW):
            stats = DashboardService.get_stats()

        assert stats["revenue"]["conversion"] == 50.0
        assert stats["activity"]["recent_consultations"] == 1
        assert stats["activity"]["overdue_count"] == 1
        assert stats["interactions"] == [{"id": "int-1"}]

        recent_filter = fake_db.queries_for("consultation_requests")[1].called("gte")
        assert recent_filter == [(("created_at", "2026-10-18T12:00:00+00:00"), {})]

    def test_route_requires_staff(self, api_client, login, viewer_profile):
        login(viewer_profile)

        response = api_client.get("/api/v1/dashboard/stats")

        assert response.status_code == 403
