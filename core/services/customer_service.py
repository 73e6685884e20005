# =============================================================================
# core/services/customer_service.py - CRM Business Logic
# =============================================================================
# Customers and their interaction timeline. Consultation and ROI lead
# conversions also create customers through this service.
# =============================================================================

import logging
from typing import Any

from app.auth.models import UserProfile
from app.exceptions import DatabaseError, MissingFieldsError, NotFoundError
from core.models.customer import (
    PROTECTED_CUSTOMER_FIELDS,
    CustomerCreate,
    CustomerStage,
    InteractionCreate,
    InteractionType,
    ProjectStatus,
)
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "customers"
INTERACTIONS_TABLE = "customer_interactions"
CUSTOMER_COLUMNS = "*, assigned_admin:profiles!assigned_admin_id(id, full_name, email)"
INTERACTION_COLUMNS = "*, created_by_profile:profiles!created_by(id, full_name, email)"


class CustomerService:
    """Service for customers and interactions."""

    @staticmethod
    def list_customers(
        stage: str | None = None,
        status: str | None = None,
        assigned_admin_id: str | None = None,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        query = (
            client.table(TABLE)
            .select(CUSTOMER_COLUMNS, count="exact")
            .order("created_at", desc=True)
        )

        if stage and stage != "all":
            query = query.eq("stage", stage)
        if status and status != "all":
            query = query.eq("project_status", status)
        if assigned_admin_id:
            query = query.eq("assigned_admin_id", assigned_admin_id)
        if search:
            query = query.or_(f"name.ilike.%{search}%,email.ilike.%{search}%,business_type.ilike.%{search}%")

        response = query.range(offset, offset + limit - 1).execute()
        return {
            "data": response.data or [],
            "pagination": {"total": response.count or 0, "limit": limit, "offset": offset},
        }

    @staticmethod
    def get_customer(customer_id: str) -> dict[str, Any]:
        """Customer with its interactions, newest first."""
        customer = SupabaseClient.fetch_by_id(TABLE, customer_id, columns=CUSTOMER_COLUMNS)
        if not customer:
            raise NotFoundError("Customer", customer_id)

        customer["interactions"] = CustomerService.list_interactions(customer_id)
        return customer

    @staticmethod
    def insert_customer(record: dict[str, Any]) -> dict[str, Any]:
        """Insert a customers row; shared by manual creation and lead conversion."""
        client = SupabaseClient.get_client()
        try:
            response = client.table(TABLE).insert(record).execute()
        except Exception as e:
            logger.error(f"Failed to create customer: {e}")
            raise DatabaseError("create customer", str(e))

        customer = response.data[0]
        logger.info(f"Created customer {customer['id']} ({customer.get('email')})")
        return customer

    @staticmethod
    def create_customer(data: CustomerCreate, admin: UserProfile) -> dict[str, Any]:
        """
        Create a customer, optionally linked to an ROI assessment.

        Raises:
            MissingFieldsError: name or email missing
        """
        body = data.model_dump(mode="json")
        MissingFieldsError.check(body, ["name", "email"])

        body.pop("notes", None)
        record = {
            **body,
            "assigned_admin_id": admin.user_id,
            "stage": CustomerStage.PROPOSAL_DEVELOPMENT.value,
            "project_status": ProjectStatus.ON_TRACK.value,
            "roi_assessment_id": data.roi_assessment_id,
        }
        customer = CustomerService.insert_customer(record)

        if data.roi_assessment_id:
            client = SupabaseClient.get_client()
            client.table("roi_assessments").update({
                "converted": True,
                "converted_at": utc_now_iso(),
                "converted_to_customer_id": customer["id"],
            }).eq("id", data.roi_assessment_id).execute()

        CustomerService.add_interaction(
            customer["id"],
            {
                "interaction_type": InteractionType.NOTE.value,
                "subject": "Customer record created",
                "notes": (
                    "Customer created from ROI assessment"
                    if data.roi_assessment_id else "Customer manually added to CRM"
                ),
            },
            created_by=admin.user_id,
        )
        return customer

    @staticmethod
    def update_customer(customer_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        """Apply changes, dropping protected columns."""
        allowed = {key: value for key, value in changes.items() if key not in PROTECTED_CUSTOMER_FIELDS}

        client = SupabaseClient.get_client()
        try:
            response = client.table(TABLE).update(allowed).eq("id", customer_id).execute()
        except Exception as e:
            logger.error(f"Failed to update customer {customer_id}: {e}")
            raise DatabaseError("update customer", str(e))

        if not response.data:
            raise NotFoundError("Customer", customer_id)
        return response.data[0]

    @staticmethod
    def delete_customer(customer_id: str, admin: UserProfile, permanent: bool = False) -> str:
        """
        Archive (closed_lost) or permanently delete a customer.

        Returns:
            "deleted" or "archived"

        Raises:
            NotFoundError: No customer with this id
        """
        if not SupabaseClient.exists(TABLE, "id", customer_id):
            raise NotFoundError("Customer", customer_id)

        client = SupabaseClient.get_client()

        if permanent:
            client.table("roi_assessments").update({
                "converted": False,
                "converted_at": None,
                "converted_to_customer_id": None,
            }).eq("converted_to_customer_id", customer_id).execute()
            client.table(INTERACTIONS_TABLE).delete().eq("customer_id", customer_id).execute()

            try:
                client.table(TABLE).delete().eq("id", customer_id).execute()
            except Exception as e:
                logger.error(f"Failed to delete customer {customer_id}: {e}")
                raise DatabaseError("delete customer", str(e))

            logger.info(f"Deleted customer {customer_id}")
            return "deleted"

        try:
            client.table(TABLE).update({"stage": CustomerStage.CLOSED_LOST.value}).eq("id", customer_id).execute()
        except Exception as e:
            logger.error(f"Failed to archive customer {customer_id}: {e}")
            raise DatabaseError("archive customer", str(e))

        CustomerService.add_interaction(
            customer_id,
            {
                "interaction_type": InteractionType.STAGE_CHANGE.value,
                "notes": "Customer archived (marked as closed_lost)",
            },
            created_by=admin.user_id,
        )
        logger.info(f"Archived customer {customer_id}")
        return "archived"

    # -------------------------------------------------------------------------
    # Interactions
    # -------------------------------------------------------------------------

    @staticmethod
    def list_interactions(customer_id: str) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        response = (
            client.table(INTERACTIONS_TABLE)
            .select(INTERACTION_COLUMNS)
            .eq("customer_id", customer_id)
            .order("interaction_date", desc=True)
            .execute()
        )
        return response.data or []

    @staticmethod
    def add_interaction(customer_id: str, fields: dict[str, Any], created_by: str | None) -> dict[str, Any] | None:
        """Insert an interaction; None when the insert returns no row."""
        client = SupabaseClient.get_client()
        response = client.table(INTERACTIONS_TABLE).insert({
            **fields,
            "customer_id": customer_id,
            "created_by": created_by,
        }).execute()
        return response.data[0] if response.data else None

    @staticmethod
    def create_interaction(customer_id: str, data: InteractionCreate, admin: UserProfile) -> dict[str, Any]:
        """
        Log an interaction from the admin UI.

        Raises:
            MissingFieldsError: interaction_type missing
        """
        fields = data.model_dump(mode="json", exclude_none=True)
        MissingFieldsError.check(fields, ["interaction_type"])

        interaction = CustomerService.add_interaction(customer_id, fields, created_by=admin.user_id)
        if interaction is None:
            raise DatabaseError("create interaction", "Insert returned no data")
        return interaction
