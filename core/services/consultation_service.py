# =============================================================================
# core/services/consultation_service.py - Consultation Requests
# =============================================================================
# Public booking form intake plus the admin pipeline:
# pending -> contacted -> scheduled -> completed | converted | cancelled
# =============================================================================

import logging
from typing import Any

from app.auth.models import UserProfile
from app.exceptions import (
    AlreadyConvertedError,
    DatabaseError,
    MissingFieldsError,
    NotFoundError,
    ValidationFailedError,
)
from core.models.consultation import (
    CONSULTATION_REQUIRED_FIELDS,
    ConsultationCreate,
    ConsultationStatus,
    ConsultationUpdate,
)
from core.models.customer import CustomerStage, InteractionType, ProjectStatus
from core.services.customer_service import CustomerService
from core.services.notification_service import NotificationService
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "consultation_requests"


class ConsultationService:
    """Service for consultation requests."""

    @staticmethod
    def submit(data: ConsultationCreate) -> dict[str, Any]:
        """
        Store a booking from the public form and alert Discord.

        Raises:
            MissingFieldsError: name/email/phone/challenges missing
        """
        record = data.model_dump(mode="json")
        MissingFieldsError.check(record, CONSULTATION_REQUIRED_FIELDS)
        record["status"] = ConsultationStatus.PENDING.value

        client = SupabaseClient.get_client()
        try:
            response = client.table(TABLE).insert(record).execute()
        except Exception as e:
            logger.error(f"Failed to store consultation from {data.email}: {e}")
            raise DatabaseError("save consultation request", str(e))

        consultation = response.data[0]
        logger.info(f"Consultation request {consultation['id']} from {data.email}")

        NotificationService.consultation_request(consultation)
        return consultation

    @staticmethod
    def list_consultations(
        status: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        query = (
            client.table(TABLE)
            .select("*", count="exact")
            .order("created_at", desc=True)
        )
        if status and status != "all":
            query = query.eq("status", status)

        response = query.range(offset, offset + limit - 1).execute()
        return {
            "data": response.data or [],
            "pagination": {"total": response.count or 0, "limit": limit, "offset": offset},
        }

    @staticmethod
    def get_consultation(consultation_id: str) -> dict[str, Any]:
        consultation = SupabaseClient.fetch_by_id(TABLE, consultation_id)
        if not consultation:
            raise NotFoundError("Consultation", consultation_id)
        return consultation

    @staticmethod
    def update_consultation(consultation_id: str, data: ConsultationUpdate) -> dict[str, Any]:
        changes = data.model_dump(mode="json", exclude_none=True)
        if not changes:
            raise ValidationFailedError("No valid fields to update", suggestion="Send status and/or notes")
        changes["updated_at"] = utc_now_iso()

        client = SupabaseClient.get_client()
        try:
            response = client.table(TABLE).update(changes).eq("id", consultation_id).execute()
        except Exception as e:
            logger.error(f"Failed to update consultation {consultation_id}: {e}")
            raise DatabaseError("update consultation", str(e))

        if not response.data:
            raise NotFoundError("Consultation", consultation_id)
        return response.data[0]

    @staticmethod
    def delete_consultation(consultation_id: str) -> None:
        client = SupabaseClient.get_client()
        try:
            client.table(TABLE).delete().eq("id", consultation_id).execute()
        except Exception as e:
            logger.error(f"Failed to delete consultation {consultation_id}: {e}")
            raise DatabaseError("delete consultation", str(e))
        logger.info(f"Deleted consultation {consultation_id}")

    @staticmethod
    def convert_to_customer(consultation_id: str, admin: UserProfile) -> dict[str, Any]:
        """
        Create a customer from a consultation request.

        Returns:
            The new customer row

        Raises:
            NotFoundError: No such consultation
            AlreadyConvertedError: Consultation already linked to a customer
        """
        consultation = ConsultationService.get_consultation(consultation_id)
        if consultation.get("converted_to_customer_id"):
            raise AlreadyConvertedError("Consultation", consultation["converted_to_customer_id"])

        customer = CustomerService.insert_customer({
            "consultation_request_id": consultation["id"],
            "name": consultation.get("name"),
            "email": consultation.get("email"),
            "phone": consultation.get("phone"),
            "business_type": consultation.get("business_type"),
            "business_size": consultation.get("business_size"),
            "initial_challenges": consultation.get("challenges"),
            "assigned_admin_id": admin.user_id,
            "stage": CustomerStage.PROPOSAL_DEVELOPMENT.value,
            "project_status": ProjectStatus.ON_TRACK.value,
        })

        CustomerService.add_interaction(
            customer["id"],
            {
                "interaction_type": InteractionType.CONSULTATION_REQUEST.value,
                "subject": "Initial consultation request",
                "notes": (
                    f"Preferred meeting: {consultation.get('meeting_type')} on "
                    f"{consultation.get('preferred_date')} at {consultation.get('preferred_time')}"
                ),
                "interaction_date": consultation.get("created_at"),
            },
            created_by=admin.user_id,
        )

        client = SupabaseClient.get_client()
        try:
            client.table(TABLE).update({
                "status": ConsultationStatus.CONVERTED.value,
                "converted_to_customer_id": customer["id"],
                "updated_at": utc_now_iso(),
            }).eq("id", consultation_id).execute()
        except Exception as e:
            # Customer exists; the request can be re-linked by hand
            logger.error(f"Failed to mark consultation {consultation_id} converted: {e}")

        logger.info(f"Converted consultation {consultation_id} to customer {customer['id']}")
        return customer
