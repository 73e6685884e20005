# =============================================================================
# core/services/roi_service.py - ROI Assessments
# =============================================================================
# Public calculator endpoints (calculate, submit) and the admin lead
# pipeline for roi_assessments (list, follow-up, delete, convert).
# =============================================================================

import logging
import time
from typing import Any

from app.auth.models import UserProfile
from app.exceptions import (
    AlreadyConvertedError,
    DatabaseError,
    NotFoundError,
    ValidationFailedError,
)
from core.models.customer import CustomerStage, InteractionType, ProjectStatus
from core.models.roi import ROIAssessmentUpdate, ROICalculateRequest, ROISubmitRequest
from core.services.customer_service import CustomerService
from core.services.notification_service import NotificationService
from lib.roi import INDUSTRY_TO_BUSINESS_TYPE, calculate_roi, compute_derived_pricing, describe_workflows
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "roi_assessments"


def _format_number(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return "N/A"
    return f"{value:,.0f}"


class ROIService:
    """Service for the ROI calculator and its leads."""

    # -------------------------------------------------------------------------
    # Public calculator
    # -------------------------------------------------------------------------

    @staticmethod
    def calculate(request: ROICalculateRequest) -> dict[str, Any]:
        """Run the calculator and quote fees for the projected monthly value."""
        results = calculate_roi(request.state)
        pricing = compute_derived_pricing(
            results.total_benefit_per_month,
            customer_selected_tier=request.state.novique.selected_plan,
            settings=request.pricing_settings,
        )
        return {
            "results": results.model_dump(mode="json", by_alias=True),
            "derived_pricing": pricing.model_dump(mode="json", by_alias=True),
        }

    @staticmethod
    def submit(data: ROISubmitRequest) -> dict[str, Any] | None:
        """
        Store a calculator lead and alert Discord.

        A failed insert is logged, not raised: the lead still reaches
        Discord.

        Returns:
            The stored assessment, or None when the insert failed

        Raises:
            ValidationFailedError: Email missing or without "@"
        """
        if not data.email or "@" not in data.email:
            raise ValidationFailedError("Valid email required")

        pricing = data.derived_pricing or {}
        record = {
            "email": data.email,
            "calculated_results": {
                **data.results,
                "monthlyFee": pricing.get("monthlyFee"),
                "setupFee": pricing.get("setupFee"),
                "recommendedTier": pricing.get("recommendedTier"),
            },
            "industry": data.industry or None,
            "employees_impacted": data.employees_impacted or None,
            "selected_workflows": data.selected_workflows or [],
            "created_at": utc_now_iso(),
        }

        assessment = None
        client = SupabaseClient.get_client()
        try:
            response = client.table(TABLE).insert(record).execute()
            assessment = response.data[0] if response.data else None
        except Exception as e:
            logger.error(f"Failed to store ROI assessment for {data.email}: {e}")

        record_id = assessment["id"] if assessment else f"roi_{int(time.time() * 1000)}"
        NotificationService.roi_assessment(record_id, data.email, data.results, industry=data.industry)
        return assessment

    # -------------------------------------------------------------------------
    # Admin pipeline
    # -------------------------------------------------------------------------

    @staticmethod
    def list_assessments(
        contacted: bool | None = None,
        converted: bool | None = None,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        query = (
            client.table(TABLE)
            .select("*", count="exact")
            .order("created_at", desc=True)
        )
        if contacted is not None:
            query = query.eq("contacted", contacted)
        if converted is True:
            query = query.eq("converted", True)
        elif converted is False:
            query = query.or_("converted.is.null,converted.eq.false")
        if search:
            query = query.ilike("email", f"%{search}%")

        response = query.range(offset, offset + limit - 1).execute()
        return {
            "data": response.data or [],
            "pagination": {"total": response.count or 0, "limit": limit, "offset": offset},
        }

    @staticmethod
    def get_assessment(assessment_id: str) -> dict[str, Any]:
        assessment = SupabaseClient.fetch_by_id(TABLE, assessment_id)
        if not assessment:
            raise NotFoundError("ROI assessment", assessment_id)
        return assessment

    @staticmethod
    def update_assessment(assessment_id: str, data: ROIAssessmentUpdate) -> dict[str, Any]:
        """Record follow-up; marking contacted stamps contacted_at."""
        changes: dict[str, Any] = {}
        if data.contacted is not None:
            changes["contacted"] = data.contacted
            if data.contacted:
                changes["contacted_at"] = utc_now_iso()
        if data.notes is not None:
            changes["notes"] = data.notes
        if not changes:
            raise ValidationFailedError("No valid fields to update", suggestion="Send contacted and/or notes")

        client = SupabaseClient.get_client()
        try:
            response = client.table(TABLE).update(changes).eq("id", assessment_id).execute()
        except Exception as e:
            logger.error(f"Failed to update ROI assessment {assessment_id}: {e}")
            raise DatabaseError("update ROI assessment", str(e))

        if not response.data:
            raise NotFoundError("ROI assessment", assessment_id)
        return response.data[0]

    @staticmethod
    def delete_assessment(assessment_id: str) -> None:
        """Unlink customers pointing at the assessment, then delete it."""
        client = SupabaseClient.get_client()
        try:
            client.table("customers").update({"roi_assessment_id": None}).eq("roi_assessment_id", assessment_id).execute()
        except Exception as e:
            logger.error(f"Failed to unlink customers from {assessment_id}: {e}")
            raise DatabaseError("unlink associated customers", str(e))

        try:
            client.table(TABLE).delete().eq("id", assessment_id).execute()
        except Exception as e:
            logger.error(f"Failed to delete ROI assessment {assessment_id}: {e}")
            raise DatabaseError("delete ROI assessment", str(e))
        logger.info(f"Deleted ROI assessment {assessment_id}")

    @staticmethod
    def convert_to_customer(assessment_id: str, admin: UserProfile) -> dict[str, Any]:
        """
        Create a customer from a calculator lead.

        The customer is named after the email's local part; the industry
        is mapped onto a business type.

        Raises:
            NotFoundError: No such assessment
            AlreadyConvertedError: Assessment already linked to a customer
        """
        assessment = ROIService.get_assessment(assessment_id)
        if assessment.get("converted_to_customer_id"):
            raise AlreadyConvertedError("ROI assessment", assessment["converted_to_customer_id"])

        industry = assessment.get("industry")
        business_type = INDUSTRY_TO_BUSINESS_TYPE.get(industry, "other") if industry else None

        workflows = assessment.get("selected_workflows") or []
        initial_challenges = f"Interested in automation for: {describe_workflows(workflows)}" if workflows else ""

        email = assessment["email"]
        results = assessment.get("calculated_results")
        customer = CustomerService.insert_customer({
            "roi_assessment_id": assessment["id"],
            "name": email.split("@")[0],
            "email": email,
            "business_type": business_type,
            "initial_challenges": initial_challenges,
            "roi_estimate": results,
            "assigned_admin_id": admin.user_id,
            "stage": CustomerStage.PROPOSAL_DEVELOPMENT.value,
            "project_status": ProjectStatus.ON_TRACK.value,
        })

        if results:
            summary = (
                f"Est. monthly benefit: ${_format_number(results.get('totalBenefitPerMonth'))}, "
                f"ROI: {_format_number(results.get('roiPercent'))}%"
            )
        else:
            summary = "ROI assessment submitted"

        CustomerService.add_interaction(
            customer["id"],
            {
                "interaction_type": InteractionType.NOTE.value,
                "subject": "ROI Assessment Conversion",
                "notes": f"Customer created from ROI assessment. {summary}",
                "interaction_date": assessment.get("created_at"),
            },
            created_by=admin.user_id,
        )

        client = SupabaseClient.get_client()
        try:
            client.table(TABLE).update({
                "converted": True,
                "converted_at": utc_now_iso(),
                "converted_to_customer_id": customer["id"],
            }).eq("id", assessment_id).execute()
        except Exception as e:
            logger.error(f"Failed to mark ROI assessment {assessment_id} converted: {e}")

        logger.info(f"Converted ROI assessment {assessment_id} to customer {customer['id']}")
        return customer
