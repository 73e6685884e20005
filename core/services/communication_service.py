# =============================================================================
# core/services/communication_service.py - Communications Inbox
# =============================================================================
# Triage of the communications table (voicemail / SMS / email):
# - Admin inbox: list, read, update, delete, stats
# - SMS: inbound storage, consent keywords, outbound replies
# - Bulk mark-as-read for the Jarvis client
# =============================================================================

import logging
from typing import Any

from app.config import settings
from app.exceptions import (
    DatabaseError,
    NotFoundError,
    ServiceNotConfiguredError,
    ValidationFailedError,
)
from core.models.communication import (
    CommunicationDirection,
    CommunicationStatus,
    CommunicationType,
    CommunicationUpdate,
)
from core.services.twilio_service import TwilioService
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now, utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "communications"
CONSENT_TABLE = "sms_consent"
INBOX_COLUMNS = "*, customer:customers!customer_id(id, name, email, phone)"
MAX_MARK_READ_IDS = 100

OPT_OUT_KEYWORDS = frozenset({"STOP", "UNSUBSCRIBE", "CANCEL", "END", "QUIT"})
OPT_IN_KEYWORDS = frozenset({"START", "SUBSCRIBE", "YES"})


class CommunicationService:
    """Service for the communications inbox."""

    # -------------------------------------------------------------------------
    # Inbox
    # -------------------------------------------------------------------------

    @staticmethod
    def list_communications(
        type: str | None = None,
        status: str | None = None,
        direction: str | None = None,
        customer_id: str | None = None,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> dict[str, Any]:
        """
        Filtered, paginated inbox (newest first).

        "all" for type/status/direction means no filter.

        Returns:
            {"data": [...], "pagination": {"total", "limit", "offset"}}
        """
        client = SupabaseClient.get_client()
        query = (
            client.table(TABLE)
            .select(INBOX_COLUMNS, count="exact")
            .order("created_at", desc=True)
        )

        for column, value in (("type", type), ("status", status), ("direction", direction)):
            if value and value != "all":
                query = query.eq(column, value)
        if customer_id:
            query = query.eq("customer_id", customer_id)
        if search:
            query = query.or_(
                f"from_address.ilike.%{search}%,from_name.ilike.%{search}%,body.ilike.%{search}%"
            )

        response = query.range(offset, offset + limit - 1).execute()
        return {
            "data": response.data or [],
            "pagination": {"total": response.count or 0, "limit": limit, "offset": offset},
        }

    @staticmethod
    def get_communication(communication_id: str) -> dict[str, Any]:
        record = SupabaseClient.fetch_by_id(TABLE, communication_id, columns=INBOX_COLUMNS)
        if not record:
            raise NotFoundError("Communication", communication_id)
        return record

    @staticmethod
    def update_communication(communication_id: str, data: CommunicationUpdate) -> dict[str, Any]:
        """
        Change status and/or linked customer.

        Raises:
            ValidationFailedError: Neither field was sent
        """
        changes = data.model_dump(mode="json", exclude_unset=True)
        if not changes:
            raise ValidationFailedError(
                "No valid fields to update",
                suggestion="Send status and/or customer_id",
            )

        client = SupabaseClient.get_client()
        try:
            response = client.table(TABLE).update(changes).eq("id", communication_id).execute()
        except Exception as e:
            logger.error(f"Failed to update communication {communication_id}: {e}")
            raise DatabaseError("update communication", str(e))

        if not response.data:
            raise NotFoundError("Communication", communication_id)
        return response.data[0]

    @staticmethod
    def delete_communication(communication_id: str) -> None:
        """Delete the row, then the Twilio recording (best-effort)."""
        record = SupabaseClient.fetch_by_id(TABLE, communication_id, columns="id, twilio_recording_sid")
        if not record:
            raise NotFoundError("Communication", communication_id)

        client = SupabaseClient.get_client()
        try:
            client.table(TABLE).delete().eq("id", communication_id).execute()
        except Exception as e:
            logger.error(f"Failed to delete communication {communication_id}: {e}")
            raise DatabaseError("delete communication", str(e))

        if record.get("twilio_recording_sid"):
            if TwilioService.delete_recording(record["twilio_recording_sid"]):
                logger.info(f"Deleted Twilio recording: {record['twilio_recording_sid']}")

    @staticmethod
    def get_stats() -> dict[str, int]:
        """Unread counts per type plus today's volume."""

        def unread(type_: str | None = None):
            def apply(query):
                query = query.eq("status", CommunicationStatus.UNREAD.value)
                return query.eq("type", type_) if type_ else query
            return apply

        today = utc_now().date().isoformat()
        return {
            "total_unread": SupabaseClient.count_rows(TABLE, unread()),
            "unread_voicemail": SupabaseClient.count_rows(TABLE, unread(CommunicationType.VOICEMAIL.value)),
            "unread_sms": SupabaseClient.count_rows(TABLE, unread(CommunicationType.SMS.value)),
            "unread_email": SupabaseClient.count_rows(TABLE, unread(CommunicationType.EMAIL.value)),
            "today_count": SupabaseClient.count_rows(TABLE, lambda q: q.gte("created_at", today)),
        }

    @staticmethod
    def mark_read(ids: list[str], type: str | None = None) -> int:
        """
        Mark communications as read.

        Returns:
            Number of rows updated

        Raises:
            ValidationFailedError: Empty list or more than 100 ids
        """
        if not ids:
            raise ValidationFailedError("ids must be a non-empty array")
        if len(ids) > MAX_MARK_READ_IDS:
            raise ValidationFailedError(
                f"Cannot mark more than {MAX_MARK_READ_IDS} items at once",
                details={"count": len(ids)},
            )

        client = SupabaseClient.get_client()
        query = (
            client.table(TABLE)
            .update({"status": CommunicationStatus.READ.value})
            .in_("id", ids)
        )
        if type and type != "all":
            query = query.eq("type", type)

        response = query.execute()
        updated = len(response.data or [])
        logger.info(f"Marked {updated} communications as read")
        return updated

    # -------------------------------------------------------------------------
    # SMS
    # -------------------------------------------------------------------------

    @staticmethod
    def keyword_action(body: str) -> str | None:
        """'opt_out', 'opt_in' or None for an inbound SMS body."""
        keyword = body.strip().upper()
        if keyword in OPT_OUT_KEYWORDS:
            return "opt_out"
        if keyword in OPT_IN_KEYWORDS:
            return "opt_in"
        return None

    @staticmethod
    def record_consent(phone_number: str, consented: bool) -> None:
        """Upsert the sms_consent row for a phone number."""
        now = utc_now_iso()
        record: dict[str, Any] = {"phone_number": phone_number, "consented": consented}
        if consented:
            record.update({"consent_date": now, "consent_source": "sms_keyword"})
        else:
            record["opt_out_date"] = now

        client = SupabaseClient.get_client()
        client.table(CONSENT_TABLE).upsert(record, on_conflict="phone_number").execute()
        logger.info(f"SMS consent for {phone_number}: {consented}")

    @staticmethod
    def store_inbound_sms(
        from_number: str,
        to_number: str,
        body: str,
        message_sid: str | None,
        sms_consent: bool | None = None,
    ) -> dict[str, Any] | None:
        """Insert an inbound SMS; returns the row (None if the insert returned nothing)."""
        record: dict[str, Any] = {
            "type": CommunicationType.SMS.value,
            "direction": CommunicationDirection.INBOUND.value,
            "status": CommunicationStatus.UNREAD.value,
            "from_address": from_number,
            "to_address": to_number,
            "body": body,
            "twilio_message_sid": message_sid,
        }
        if sms_consent is not None:
            record["sms_consent"] = sms_consent

        client = SupabaseClient.get_client()
        response = client.table(TABLE).insert(record).execute()
        stored = response.data[0] if response.data else None
        if stored:
            logger.info(f"SMS stored: {stored['id']}")
        return stored

    @staticmethod
    def send_reply(communication_id: str, message: str) -> dict[str, Any]:
        """
        Reply to an inbound SMS from the admin panel.

        Returns:
            {"message_sid", "reply_id"}

        Raises:
            ServiceNotConfiguredError: Twilio credentials/number missing
            NotFoundError: Original communication missing
            ValidationFailedError: Original is not an SMS
            UpstreamServiceError: Twilio rejected the message
        """
        message = message.strip()
        if not message:
            raise ValidationFailedError("communication_id and message are required")
        if not settings.twilio_configured or not settings.TWILIO_PHONE_NUMBER:
            raise ServiceNotConfiguredError("SMS service", "TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN and TWILIO_PHONE_NUMBER")

        original = SupabaseClient.fetch_by_id(TABLE, communication_id, columns="id, from_address, to_address, type")
        if not original:
            raise NotFoundError("Communication", communication_id)
        if original.get("type") != CommunicationType.SMS.value:
            raise ValidationFailedError("Can only reply to SMS communications")

        recipient = original["from_address"]
        message_sid = TwilioService.send_sms(recipient, message)

        client = SupabaseClient.get_client()
        reply_id = None
        try:
            response = client.table(TABLE).insert({
                "type": CommunicationType.SMS.value,
                "direction": CommunicationDirection.OUTBOUND.value,
                "status": CommunicationStatus.READ.value,
                "from_address": settings.TWILIO_PHONE_NUMBER,
                "to_address": recipient,
                "body": message,
                "twilio_message_sid": message_sid,
                "reply_to_id": communication_id,
            }).execute()
            reply_id = response.data[0]["id"] if response.data else None
        except Exception as e:
            # The SMS is already sent; a missing outbound row is not fatal
            logger.error(f"Failed to store outbound SMS: {e}")

        client.table(TABLE).update({"status": CommunicationStatus.REPLIED.value}).eq("id", communication_id).execute()

        return {"message_sid": message_sid, "reply_id": reply_id}
