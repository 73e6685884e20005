# =============================================================================
# core/services/voicemail_service.py - Voicemail Lifecycle
# =============================================================================
# Voicemails enter the communications table two ways:
# - recording-complete webhook (real time)
# - periodic sync of Twilio recordings (catches missed webhooks)
#
# Transcription status: pending -> in_progress -> completed | failed.
# Twilio's own transcription callback and Whisper both write the body.
# =============================================================================

import logging
from typing import Any

from app.exceptions import NotFoundError, ValidationFailedError
from core.models.communication import (
    CommunicationDirection,
    CommunicationStatus,
    CommunicationType,
    TranscriptionStatus,
)
from core.services.ai_service import AIService
from core.services.notification_service import NotificationService
from core.services.twilio_service import TwilioService
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

TABLE = "communications"
SYNC_PAGE_SIZE = 100


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class VoicemailService:
    """Service for voicemail storage and transcription."""

    @staticmethod
    def store_voicemail(
        from_number: str,
        to_number: str,
        duration: Any,
        recording_url: str,
        call_sid: str | None,
        recording_sid: str | None,
        created_at: str | None = None,
    ) -> dict[str, Any] | None:
        """Insert a voicemail row (transcription pending)."""
        record: dict[str, Any] = {
            "type": CommunicationType.VOICEMAIL.value,
            "direction": CommunicationDirection.INBOUND.value,
            "status": CommunicationStatus.UNREAD.value,
            "from_address": from_number,
            "to_address": to_number,
            "duration": _to_int(duration),
            "recording_url": recording_url,
            "transcription_status": TranscriptionStatus.PENDING.value,
            "twilio_call_sid": call_sid,
            "twilio_recording_sid": recording_sid,
        }
        if created_at:
            record["created_at"] = created_at

        client = SupabaseClient.get_client()
        response = client.table(TABLE).insert(record).execute()
        stored = response.data[0] if response.data else None
        if stored:
            logger.info(f"Voicemail stored with ID: {stored['id']}")
        return stored

    @staticmethod
    def apply_twilio_transcription(
        recording_sid: str | None,
        call_sid: str | None,
        status: str | None,
        text: str | None,
    ) -> dict[str, Any] | None:
        """
        Save a Twilio transcription callback.

        Matches by recording SID first, then by call SID among voicemails.
        """
        completed = status == "completed" and bool(text)
        changes = {
            "body": text or None,
            "transcription_status": (
                TranscriptionStatus.COMPLETED.value if completed else TranscriptionStatus.FAILED.value
            ),
        }

        client = SupabaseClient.get_client()
        if recording_sid:
            response = client.table(TABLE).update(changes).eq("twilio_recording_sid", recording_sid).execute()
            if response.data:
                logger.info(f"Transcription updated for ID: {response.data[0]['id']}")
                return response.data[0]

        if call_sid:
            response = (
                client.table(TABLE)
                .update(changes)
                .eq("twilio_call_sid", call_sid)
                .eq("type", CommunicationType.VOICEMAIL.value)
                .execute()
            )
            if response.data:
                logger.info(f"Transcription updated (via CallSid) for ID: {response.data[0]['id']}")
                return response.data[0]

        logger.warning(f"No voicemail matched transcription (recording={recording_sid}, call={call_sid})")
        return None

    @staticmethod
    def get_voicemail(communication_id: str) -> dict[str, Any]:
        """
        Fetch a voicemail that has a recording.

        Raises:
            NotFoundError: Missing communication or missing recording
            ValidationFailedError: Not a voicemail
        """
        record = SupabaseClient.fetch_by_id(
            TABLE, communication_id, columns="id, recording_url, type, transcription_status, body",
        )
        if not record:
            raise NotFoundError("Communication", communication_id)
        if record.get("type") != CommunicationType.VOICEMAIL.value:
            raise ValidationFailedError("Can only transcribe voicemails")
        if not record.get("recording_url"):
            raise NotFoundError("Recording", communication_id)
        return record

    @staticmethod
    def fetch_audio(communication_id: str) -> bytes:
        """MP3 bytes of a voicemail recording."""
        record = VoicemailService.get_voicemail(communication_id)
        return TwilioService.download_recording(record["recording_url"])

    @staticmethod
    def _set_status(communication_id: str, status: TranscriptionStatus, body: str | None = None) -> None:
        changes: dict[str, Any] = {"transcription_status": status.value}
        if body is not None:
            changes["body"] = body
        client = SupabaseClient.get_client()
        client.table(TABLE).update(changes).eq("id", communication_id).execute()

    @staticmethod
    def transcribe(communication_id: str) -> dict[str, Any]:
        """
        Transcribe a voicemail with Whisper.

        Returns:
            {"transcription", "already_transcribed"}

        Raises:
            NotFoundError / ValidationFailedError: See get_voicemail
            ServiceNotConfiguredError: Twilio credentials missing (status -> failed)
            UpstreamServiceError: Download or OpenAI failure (status -> failed)
        """
        record = VoicemailService.get_voicemail(communication_id)

        if record.get("body") and record.get("transcription_status") == TranscriptionStatus.COMPLETED.value:
            return {"transcription": record["body"], "already_transcribed": True}

        VoicemailService._set_status(communication_id, TranscriptionStatus.IN_PROGRESS)
        try:
            audio = TwilioService.download_recording(record["recording_url"])
            text = AIService.transcribe(audio)
        except Exception as e:
            logger.error(f"Transcription error for {communication_id}: {e}")
            VoicemailService._set_status(communication_id, TranscriptionStatus.FAILED)
            raise

        VoicemailService._set_status(communication_id, TranscriptionStatus.COMPLETED, body=text)
        logger.info(f"Transcribed voicemail {communication_id} ({len(text)} chars)")
        return {"transcription": text, "already_transcribed": False}

    @staticmethod
    def sync_from_twilio() -> dict[str, Any]:
        """
        Import Twilio recordings that aren't stored yet.

        Returns:
            {"synced", "skipped", "total"}
        """
        recordings = TwilioService.list_recordings(limit=SYNC_PAGE_SIZE)
        logger.info(f"Found {len(recordings)} recordings in Twilio")

        synced = 0
        skipped = 0
        for recording in recordings:
            if SupabaseClient.exists(TABLE, "twilio_recording_sid", recording.sid):
                skipped += 1
                continue

            call = TwilioService.fetch_call(recording.call_sid)
            from_number = getattr(call, "from_", None) or ""
            to_number = getattr(call, "to", None) or ""
            created_at = recording.date_created.isoformat() if recording.date_created else None

            try:
                VoicemailService.store_voicemail(
                    from_number=from_number,
                    to_number=to_number,
                    duration=recording.duration,
                    recording_url=TwilioService.recording_media_url(recording.uri),
                    call_sid=recording.call_sid,
                    recording_sid=recording.sid,
                    created_at=created_at,
                )
            except Exception as e:
                logger.error(f"Error importing {recording.sid}: {e}")
                continue

            synced += 1
            NotificationService.admin_sms_for_voicemail(from_number, _to_int(recording.duration))

        logger.info(f"Voicemail sync complete: {synced} synced, {skipped} skipped")
        return {"synced": synced, "skipped": skipped, "total": len(recordings)}
