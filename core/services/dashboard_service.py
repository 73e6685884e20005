# =============================================================================
# core/services/dashboard_service.py - Admin Dashboard Statistics
# =============================================================================
# Aggregates for the admin home page:
#
#   revenue      - year-to-date, open pipeline, average won deal, conversion
#   activity     - presentations/next actions due within 7 days, overdue
#                  actions, consultations in the last 24h
#   projects     - health of active projects
#   interactions - latest 20 interactions of the past week
#
# Customer aggregates are computed in Python from a single select; the
# customers table is small (one row per client).
# =============================================================================

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from core.models.customer import ACTIVE_PROJECT_STAGES, PIPELINE_STAGES, CustomerStage, ProjectStatus
from lib.supabase_client import SupabaseClient
from lib.utils import parse_timestamp, utc_now

logger = logging.getLogger(__name__)

UPCOMING_WINDOW_DAYS = 7
RECENT_INTERACTIONS_LIMIT = 20
CLOSED_STAGES = frozenset({CustomerStage.CLOSED_WON.value, CustomerStage.CLOSED_LOST.value})

CUSTOMER_COLUMNS = (
    "id, name, stage, project_status, agreed_implementation_cost, payment_confirmed_date, "
    "proposal_presentation_datetime, next_action_required, next_action_due_date, "
    "solution_due_date, current_blockers"
)
INTERACTION_COLUMNS = (
    "id, interaction_type, subject, notes, interaction_date, customer_id, "
    "customer:customers(id, name), created_by_profile:profiles!created_by(id, full_name)"
)


def _as_utc(value: str | None) -> datetime | None:
    parsed = parse_timestamp(value)
    if parsed is not None and parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _amount(customer: dict[str, Any]) -> float:
    try:
        return float(customer.get("agreed_implementation_cost") or 0)
    except (TypeError, ValueError):
        return 0.0


def revenue_summary(customers: list[dict[str, Any]], consultation_count: int, year: int) -> dict[str, float]:
    """Revenue block; money rounded to cents, conversion to 0.1%."""
    ytd = sum(
        _amount(c) for c in customers
        if (paid := _as_utc(c.get("payment_confirmed_date"))) is not None and paid.year == year
    )
    pipeline_stages = {stage.value for stage in PIPELINE_STAGES}
    pipeline = sum(_amount(c) for c in customers if c.get("stage") in pipeline_stages)

    won = [c for c in customers if c.get("stage") == CustomerStage.CLOSED_WON.value]
    avg_deal = sum(_amount(c) for c in won) / len(won) if won else 0.0
    conversion = len(won) / consultation_count * 100 if consultation_count > 0 else 0.0

    return {
        "ytd": round(ytd, 2),
        "pipeline": round(pipeline, 2),
        "conversion": round(conversion, 1),
        "avg_deal": round(avg_deal, 2),
    }


def upcoming_activities(customers: list[dict[str, Any]], now: datetime) -> list[dict[str, Any]]:
    """Presentations and open next actions due in the coming week, soonest first."""
    horizon = now + timedelta(days=UPCOMING_WINDOW_DAYS)
    today = now.date()
    activities = []

    for customer in customers:
        presentation = _as_utc(customer.get("proposal_presentation_datetime"))
        if presentation is not None and now <= presentation <= horizon:
            activities.append({
                "id": customer["id"],
                "name": customer.get("name"),
                "type": "presentation",
                "datetime": customer["proposal_presentation_datetime"],
                "description": "Proposal Presentation",
                "stage": customer.get("stage"),
                "_sort": presentation,
            })

        due = _as_utc(customer.get("next_action_due_date"))
        if (
            due is not None
            and customer.get("stage") not in CLOSED_STAGES
            and today <= due.date() <= horizon.date()
        ):
            activities.append({
                "id": customer["id"],
                "name": customer.get("name"),
                "type": "action",
                "datetime": customer["next_action_due_date"],
                "description": customer.get("next_action_required") or "Next Action",
                "stage": customer.get("stage"),
                "_sort": due,
            })

    activities.sort(key=lambda item: item["_sort"])
    for item in activities:
        del item["_sort"]
    return activities


def overdue_tasks(customers: list[dict[str, Any]], now: datetime) -> list[dict[str, Any]]:
    today = now.date()
    return [
        {
            "id": c["id"],
            "name": c.get("name"),
            "next_action_required": c.get("next_action_required"),
            "next_action_due_date": c.get("next_action_due_date"),
        }
        for c in customers
        if (due := _as_utc(c.get("next_action_due_date"))) is not None
        and due.date() < today
        and c.get("stage") not in CLOSED_STAGES
    ]


def project_health(customers: list[dict[str, Any]]) -> dict[str, Any]:
    active_stages = {stage.value for stage in ACTIVE_PROJECT_STAGES}
    active = sorted(
        (c for c in customers if c.get("stage") in active_stages),
        key=lambda c: (c.get("solution_due_date") is None, c.get("solution_due_date") or ""),
    )

    def count(status: ProjectStatus) -> int:
        return sum(1 for c in active if c.get("project_status") == status.value)

    return {
        "active": [
            {key: c.get(key) for key in (
                "id", "name", "stage", "project_status", "solution_due_date", "current_blockers",
            )}
            for c in active
        ],
        "on_track_count": count(ProjectStatus.ON_TRACK),
        "at_risk_count": count(ProjectStatus.AT_RISK),
        "delayed_count": count(ProjectStatus.DELAYED),
        "blocked_count": count(ProjectStatus.BLOCKED),
    }


class DashboardService:
    """Service for admin dashboard statistics."""

    @staticmethod
    def get_stats() -> dict[str, Any]:
        client = SupabaseClient.get_client()
        now = utc_now()

        customers = client.table("customers").select(CUSTOMER_COLUMNS).execute().data or []
        total_consultations = SupabaseClient.count_rows("consultation_requests")
        recent_consultations = SupabaseClient.count_rows(
            "consultation_requests",
            lambda q: q.gte("created_at", (now - timedelta(hours=24)).isoformat()),
        )

        interactions = (
            client.table("customer_interactions")
            .select(INTERACTION_COLUMNS)
            .gte("interaction_date", (now - timedelta(days=UPCOMING_WINDOW_DAYS)).isoformat())
            .order("interaction_date", desc=True)
            .limit(RECENT_INTERACTIONS_LIMIT)
            .execute()
        ).data or []

        overdue = overdue_tasks(customers, now)
        logger.debug(f"Dashboard stats over {len(customers)} customers")

        return {
            "revenue": revenue_summary(customers, total_consultations, now.year),
            "activity": {
                "upcoming_activities": upcoming_activities(customers, now),
                "overdue_count": len(overdue),
                "overdue_tasks": overdue,
                "recent_consultations": recent_consultations,
            },
            "projects": project_health(customers),
            "interactions": interactions,
        }
