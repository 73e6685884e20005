# =============================================================================
# core/services/jarvis_service.py - Jarvis Desktop Client Queries
# =============================================================================
# Read models for the Jarvis assistant: an "inbox at a glance" summary and
# filtered feeds of SMS, consultations and ROI leads. Writes (mark-read,
# blog drafts, transcription) reuse the domain services.
# =============================================================================

import logging
from typing import Any

from core.models.communication import CommunicationStatus, CommunicationType
from core.models.consultation import ConsultationStatus
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

RECENT_LIMIT = 3
UNCONVERTED_FILTER = "converted.is.null,converted.eq.false"

RECENT_COMMUNICATION_COLUMNS = (
    "id, from_address, from_name, body, status, created_at, customer:customers!customer_id(id, name)"
)
SMS_COLUMNS = (
    "id, from_address, from_name, to_address, body, status, direction, twilio_message_sid, "
    "created_at, customer:customers!customer_id(id, name, email, phone)"
)
RECENT_CONSULTATION_COLUMNS = "id, name, email, company, challenges, status, created_at"
RECENT_ROI_COLUMNS = "id, email, industry, calculated_results, contacted, converted, created_at"


def _unread(type_: CommunicationType):
    return lambda q: q.eq("type", type_.value).eq("status", CommunicationStatus.UNREAD.value)


def _pending(query):
    return query.neq("status", ConsultationStatus.CONVERTED.value)


def _unconverted(query):
    return query.or_(UNCONVERTED_FILTER)


class JarvisService:
    """Service for the Jarvis integration API."""

    @staticmethod
    def _recent_communications(type_: CommunicationType) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        response = (
            client.table("communications")
            .select(RECENT_COMMUNICATION_COLUMNS)
            .eq("type", type_.value)
            .order("created_at", desc=True)
            .limit(RECENT_LIMIT)
            .execute()
        )
        return response.data or []

    @staticmethod
    def communications_summary() -> dict[str, Any]:
        """
        Counts and the latest items of every inbound channel.

        summary.total_action_items = unread voicemail + unread SMS +
        pending consultations + unconverted ROI leads.
        """
        count = SupabaseClient.count_rows
        voicemail_total = count("communications", lambda q: q.eq("type", CommunicationType.VOICEMAIL.value))
        voicemail_unread = count("communications", _unread(CommunicationType.VOICEMAIL))
        sms_total = count("communications", lambda q: q.eq("type", CommunicationType.SMS.value))
        sms_unread = count("communications", _unread(CommunicationType.SMS))
        consultations_total = count("consultation_requests")
        consultations_pending = count("consultation_requests", _pending)
        roi_total = count("roi_assessments")
        roi_unconverted = count("roi_assessments", _unconverted)

        client = SupabaseClient.get_client()
        recent_consultations = _pending(
            client.table("consultation_requests").select(RECENT_CONSULTATION_COLUMNS)
        ).order("created_at", desc=True).limit(RECENT_LIMIT).execute().data or []
        recent_roi = _unconverted(
            client.table("roi_assessments").select(RECENT_ROI_COLUMNS)
        ).order("created_at", desc=True).limit(RECENT_LIMIT).execute().data or []

        return {
            "voicemails": {
                "total": voicemail_total,
                "unread": voicemail_unread,
                "recent": JarvisService._recent_communications(CommunicationType.VOICEMAIL),
            },
            "sms": {
                "total": sms_total,
                "unread": sms_unread,
                "recent": JarvisService._recent_communications(CommunicationType.SMS),
            },
            "consultations": {
                "total": consultations_total,
                "pending": consultations_pending,
                "recent": recent_consultations,
            },
            "roi_assessments": {
                "total": roi_total,
                "unconverted": roi_unconverted,
                "recent": recent_roi,
            },
            "summary": {
                "total_action_items": voicemail_unread + sms_unread + consultations_pending + roi_unconverted,
                "last_updated": utc_now_iso(),
            },
        }

    @staticmethod
    def list_sms(limit: int = 10, unread_only: bool = False, since: str | None = None) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        query = (
            client.table("communications")
            .select(SMS_COLUMNS, count="exact")
            .eq("type", CommunicationType.SMS.value)
            .order("created_at", desc=True)
            .limit(limit)
        )
        if unread_only:
            query = query.eq("status", CommunicationStatus.UNREAD.value)
        if since:
            query = query.gte("created_at", since)

        response = query.execute()
        return {
            "sms": response.data or [],
            "total": response.count or 0,
            "unread_count": SupabaseClient.count_rows("communications", _unread(CommunicationType.SMS)),
        }

    @staticmethod
    def list_consultations(limit: int = 10, pending_only: bool = False, since: str | None = None) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        query = (
            client.table("consultation_requests")
            .select("*", count="exact")
            .order("created_at", desc=True)
            .limit(limit)
        )
        if pending_only:
            query = _pending(query)
        if since:
            query = query.gte("created_at", since)

        response = query.execute()
        return {
            "consultations": response.data or [],
            "total": response.count or 0,
            "pending_count": SupabaseClient.count_rows("consultation_requests", _pending),
        }

    @staticmethod
    def list_roi_assessments(
        limit: int = 10,
        unconverted_only: bool = False,
        since: str | None = None,
    ) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        query = (
            client.table("roi_assessments")
            .select("*", count="exact")
            .order("created_at", desc=True)
            .limit(limit)
        )
        if unconverted_only:
            query = _unconverted(query)
        if since:
            query = query.gte("created_at", since)

        response = query.execute()
        return {
            "roi_assessments": response.data or [],
            "total": response.count or 0,
            "unconverted_count": SupabaseClient.count_rows("roi_assessments", _unconverted),
        }
