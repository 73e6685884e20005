# =============================================================================
# app/routers/twilio.py - Twilio Webhooks
# =============================================================================
# Form-encoded callbacks from Twilio, mounted at /api/twilio:
#
#   POST /sms                 inbound SMS (consent keywords, storage, alerts)
#   POST /voice               inbound call -> voicemail greeting TwiML
#   POST /recording-complete  voicemail recording ready
#   POST /transcription       Twilio transcription result
#   POST /status, /voice-status, /recording-status   status callbacks (logged)
#   POST /voice-fallback      apology TwiML when /voice fails upstream
#
# Processing errors never reach Twilio: every handler answers 200 with
# valid TwiML so Twilio doesn't retry or play its own error message.
# Only a failed signature check (when enabled) returns 403.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from app.auth.api_keys import public_base_url, twilio_form_params
from app.config import settings
from core.services.communication_service import CommunicationService
from core.services.notification_service import NotificationService
from core.services.twilio_service import AUTO_REPLY, OPT_IN_REPLY, OPT_OUT_REPLY, TwilioService
from core.services.voicemail_service import VoicemailService

logger = logging.getLogger(__name__)

router = APIRouter()

TwilioParams = Annotated[dict[str, str], Depends(twilio_form_params)]

EMPTY_TWIML = '<?xml version="1.0" encoding="UTF-8"?><Response />'


def _twiml(body: str) -> Response:
    return Response(content=body, media_type="application/xml")


def _endpoint_info(endpoint: str, purpose: str) -> dict[str, str]:
    return {"endpoint": endpoint, "purpose": purpose, "status": "active"}


def _enqueue_transcription(communication_id: str) -> None:
    from workers.tasks import transcribe_voicemail

    transcribe_voicemail.delay(communication_id)
    logger.info(f"Queued transcription for voicemail {communication_id}")


# =============================================================================
# SMS
# =============================================================================

@router.post("/sms")
async def incoming_sms(params: TwilioParams):
    """
    Handle an inbound SMS.

    STOP/UNSUBSCRIBE/CANCEL/END/QUIT opt out, START/SUBSCRIBE/YES opt in;
    anything else is stored, announced and auto-replied.
    """
    from_number = params.get("From", "")
    to_number = params.get("To", "")
    body = params.get("Body", "").strip()
    message_sid = params.get("MessageSid")
    logger.info(f"Incoming SMS from {from_number} ({message_sid})")

    try:
        action = CommunicationService.keyword_action(body)
        if action == "opt_out":
            CommunicationService.record_consent(from_number, consented=False)
            CommunicationService.store_inbound_sms(from_number, to_number, body, message_sid, sms_consent=False)
            return _twiml(TwilioService.message_reply(OPT_OUT_REPLY))

        if action == "opt_in":
            CommunicationService.record_consent(from_number, consented=True)
            CommunicationService.store_inbound_sms(from_number, to_number, body, message_sid, sms_consent=True)
            return _twiml(TwilioService.message_reply(OPT_IN_REPLY))

        stored = CommunicationService.store_inbound_sms(from_number, to_number, body, message_sid)
        record_id = stored["id"] if stored else message_sid
        NotificationService.sms_received(record_id, from_number, body)
        NotificationService.admin_sms_for_message(from_number, body)

        return _twiml(TwilioService.message_reply(AUTO_REPLY))

    except Exception as e:
        logger.error(f"SMS webhook error: {e}")
        return _twiml(EMPTY_TWIML)


@router.get("/sms")
async def sms_info():
    return _endpoint_info("Twilio SMS Webhook", "Receives incoming SMS messages")


# =============================================================================
# Voice
# =============================================================================

@router.post("/voice")
async def incoming_call(request: Request, params: TwilioParams):
    """Answer with the voicemail greeting and recording instructions."""
    logger.info(f"Incoming call from {params.get('From')} ({params.get('CallSid')})")
    try:
        return _twiml(TwilioService.voicemail_greeting(public_base_url(request)))
    except Exception as e:
        logger.error(f"Voice webhook error: {e}")
        return _twiml(TwilioService.voicemail_error())


@router.get("/voice")
async def voice_info():
    return _endpoint_info("Twilio Voice Webhook", "Handles incoming calls with a voicemail greeting")


@router.post("/voice-fallback")
async def voice_fallback(params: TwilioParams):
    logger.warning(
        f"Voice fallback for call {params.get('CallSid')}: "
        f"{params.get('ErrorCode')} {params.get('ErrorUrl', '')}"
    )
    return _twiml(TwilioService.voice_fallback())


@router.get("/voice-fallback")
async def voice_fallback_info():
    return _endpoint_info("Twilio Voice Fallback", "Plays an apology when the voice webhook fails")


# =============================================================================
# Recordings and Transcriptions
# =============================================================================

@router.post("/recording-complete")
async def recording_complete(params: TwilioParams):
    """
    Store a finished voicemail recording.

    Failed recordings (ErrorCode set or status other than completed) are
    ignored.
    """
    recording_sid = params.get("RecordingSid")
    status = params.get("RecordingStatus")

    if params.get("ErrorCode") or status != "completed":
        logger.warning(f"Recording {recording_sid} not completed: status={status}, error={params.get('ErrorCode')}")
        return _twiml(EMPTY_TWIML)

    from_number = params.get("From") or params.get("Caller") or ""
    duration = params.get("RecordingDuration")

    try:
        stored = VoicemailService.store_voicemail(
            from_number=from_number,
            to_number=params.get("To") or params.get("Called") or "",
            duration=duration,
            recording_url=params.get("RecordingUrl", ""),
            call_sid=params.get("CallSid"),
            recording_sid=recording_sid,
        )
    except Exception as e:
        logger.error(f"Failed to store voicemail {recording_sid}: {e}")
        return _twiml(EMPTY_TWIML)

    if stored:
        seconds = stored.get("duration") or 0
        try:
            NotificationService.voicemail_received(stored["id"], from_number, seconds)
            NotificationService.admin_sms_for_voicemail(from_number, seconds)
        except Exception as e:
            logger.error(f"Voicemail alerts failed for {stored['id']}: {e}")

        if settings.AUTO_TRANSCRIBE_VOICEMAILS:
            try:
                _enqueue_transcription(stored["id"])
            except Exception as e:
                logger.error(f"Could not queue transcription for {stored['id']}: {e}")

    return _twiml(EMPTY_TWIML)


@router.get("/recording-complete")
async def recording_complete_info():
    return _endpoint_info("Twilio Recording Complete Webhook", "Stores finished voicemail recordings")


@router.post("/transcription")
async def transcription(params: TwilioParams):
    """Save Twilio's transcription onto the matching voicemail."""
    try:
        VoicemailService.apply_twilio_transcription(
            recording_sid=params.get("RecordingSid"),
            call_sid=params.get("CallSid"),
            status=params.get("TranscriptionStatus"),
            text=params.get("TranscriptionText"),
        )
    except Exception as e:
        logger.error(f"Transcription webhook error: {e}")
    return _twiml(EMPTY_TWIML)


@router.get("/transcription")
async def transcription_info():
    return _endpoint_info("Twilio Transcription Webhook", "Receives voicemail transcriptions")


# =============================================================================
# Status Callbacks
# =============================================================================

@router.post("/status")
async def message_status(params: TwilioParams):
    logger.info(
        f"Message status: {params.get('MessageSid')} -> {params.get('MessageStatus')}"
        + (f" (error {params['ErrorCode']})" if params.get("ErrorCode") else "")
    )
    return _twiml(EMPTY_TWIML)


@router.get("/status")
async def message_status_info():
    return _endpoint_info("Twilio Message Status Callback", "Logs outbound message delivery status")


@router.post("/voice-status")
async def voice_status(params: TwilioParams):
    logger.info(
        f"Call status: {params.get('CallSid')} -> {params.get('CallStatus')} "
        f"(duration {params.get('CallDuration', '0')}s)"
    )
    return _twiml(EMPTY_TWIML)


@router.get("/voice-status")
async def voice_status_info():
    return _endpoint_info("Twilio Voice Status Callback", "Logs call status changes")


@router.post("/recording-status")
async def recording_status(params: TwilioParams):
    logger.info(f"Recording status: {params.get('RecordingSid')} -> {params.get('RecordingStatus')}")
    return _twiml(EMPTY_TWIML)


@router.get("/recording-status")
async def recording_status_info():
    return _endpoint_info("Twilio Recording Status Callback", "Logs recording status changes")
