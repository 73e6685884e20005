# =============================================================================
# core/services/twilio_service.py - Twilio REST and TwiML
# =============================================================================
# Outbound side of the SMS/voice integration:
# - REST: send SMS, list recordings, fetch calls, delete recordings
# - Media: authenticated download of voicemail audio
# - TwiML: the XML documents returned from webhook handlers
#
# Inbound webhook handling lives in app/routers/twilio.py.
# =============================================================================

import logging
from typing import Any

import httpx
from twilio.base.exceptions import TwilioException, TwilioRestException
from twilio.rest import Client
from twilio.twiml.messaging_response import MessagingResponse
from twilio.twiml.voice_response import VoiceResponse

from app.config import settings
from app.exceptions import ServiceNotConfiguredError, UpstreamServiceError

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com"
GREETING_VOICE = "Polly.Amy"
RECORDING_DOWNLOAD_TIMEOUT = 30

# Reply texts
OPT_OUT_REPLY = (
    "You have been unsubscribed and will not receive further messages. "
    "Reply START to resubscribe."
)
OPT_IN_REPLY = "Welcome back! You are now subscribed to messages from Novique AI."
AUTO_REPLY = (
    "Thank you for your message! We've received it and will get back to you soon. "
    "Visit novique.ai for more information."
)
VOICEMAIL_GREETING = (
    "Thank you for calling Novique AI. "
    "We're sorry we can't take your call right now. "
    "Please leave a message after the tone, and we'll get back to you as soon as possible."
)
NO_MESSAGE_GOODBYE = "We did not receive your message. Goodbye."
VOICE_ERROR_GREETING = (
    "We're experiencing technical difficulties. Please leave a message after the tone."
)
VOICE_FALLBACK_MESSAGE = (
    "We apologize, but we're experiencing technical difficulties. "
    "Please visit novique.ai or send an email to contact us. Thank you for your patience."
)


class TwilioService:
    """
    Thin wrapper around the Twilio SDK.

    The REST client is created lazily and shared (same pattern as
    SupabaseClient). Every REST method raises ServiceNotConfiguredError
    when credentials are missing and UpstreamServiceError when Twilio
    rejects the call.
    """

    _client: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        if not settings.twilio_configured:
            raise ServiceNotConfiguredError("Twilio", "TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN")
        if cls._client is None:
            cls._client = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
            logger.info("Twilio client initialized")
        return cls._client

    # -------------------------------------------------------------------------
    # REST
    # -------------------------------------------------------------------------

    @classmethod
    def send_sms(cls, to: str, body: str, from_number: str | None = None) -> str:
        """
        Send an SMS and return the message SID.

        Raises:
            ServiceNotConfiguredError: No credentials or sender number
            UpstreamServiceError: Twilio rejected the message
        """
        sender = from_number or settings.TWILIO_PHONE_NUMBER
        if not sender:
            raise ServiceNotConfiguredError("Twilio SMS", "TWILIO_PHONE_NUMBER")

        try:
            message = cls.get_client().messages.create(to=to, from_=sender, body=body)
        except TwilioRestException as e:
            logger.error(f"Twilio SMS to {to} failed: {e}")
            raise UpstreamServiceError("Twilio", e.msg or str(e))
        except (TwilioException, OSError) as e:
            logger.error(f"Twilio SMS to {to} could not be sent: {e}")
            raise UpstreamServiceError("Twilio", str(e))

        logger.info(f"Sent SMS {message.sid} to {to}")
        return message.sid

    @classmethod
    def list_recordings(cls, limit: int = 100) -> list[Any]:
        """Most recent account recordings (newest first)."""
        try:
            return cls.get_client().recordings.list(limit=limit, page_size=limit)
        except TwilioRestException as e:
            raise UpstreamServiceError("Twilio", e.msg or str(e))

    @classmethod
    def fetch_call(cls, call_sid: str) -> Any | None:
        """Fetch a call record; None when Twilio can't return it."""
        try:
            return cls.get_client().calls(call_sid).fetch()
        except TwilioRestException as e:
            logger.warning(f"Could not fetch call {call_sid}: {e}")
            return None

    @classmethod
    def delete_recording(cls, recording_sid: str) -> bool:
        """
        Delete a recording from Twilio.

        Returns False instead of raising; callers treat this as cleanup.
        """
        try:
            return bool(cls.get_client().recordings(recording_sid).delete())
        except (TwilioRestException, ServiceNotConfiguredError) as e:
            logger.warning(f"Could not delete Twilio recording {recording_sid}: {e}")
            return False

    @staticmethod
    def recording_media_url(uri: str) -> str:
        """
        Turn a recording resource URI into its media URL.

        Example:
            "/2010-04-01/Accounts/AC1/Recordings/RE1.json"
            -> "https://api.twilio.com/2010-04-01/Accounts/AC1/Recordings/RE1"
        """
        path = uri[:-len(".json")] if uri.endswith(".json") else uri
        return f"{TWILIO_API_BASE}{path}"

    @staticmethod
    def download_recording(recording_url: str) -> bytes:
        """
        Download voicemail audio as MP3.

        Uses the API key pair when configured, else account SID/auth token.

        Raises:
            ServiceNotConfiguredError: No credentials (500)
            UpstreamServiceError: Twilio returned an error (502)
        """
        credentials = settings.twilio_media_credentials
        if credentials is None:
            raise ServiceNotConfiguredError("Twilio", "TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN")

        url = f"{recording_url}.mp3"
        try:
            response = httpx.get(
                url,
                auth=credentials,
                timeout=RECORDING_DOWNLOAD_TIMEOUT,
                follow_redirects=True,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Recording download failed for {url}: {e}")
            raise UpstreamServiceError("Twilio recording download", str(e))

        return response.content

    # -------------------------------------------------------------------------
    # TwiML
    # -------------------------------------------------------------------------

    @staticmethod
    def message_reply(text: str | None = None) -> str:
        """SMS webhook response; no text gives an empty <Response/>."""
        response = MessagingResponse()
        if text:
            response.message(text)
        return str(response)

    @staticmethod
    def voicemail_greeting(base_url: str) -> str:
        """Greeting + record + goodbye for inbound calls."""
        response = VoiceResponse()
        response.say(VOICEMAIL_GREETING, voice=GREETING_VOICE)
        response.record(
            max_length=180,
            transcribe=True,
            transcribe_callback=f"{base_url}/api/twilio/transcription",
            recording_status_callback=f"{base_url}/api/twilio/recording-complete",
            recording_status_callback_event="completed",
            play_beep=True,
            timeout=10,
            finish_on_key="#",
        )
        response.say(NO_MESSAGE_GOODBYE, voice=GREETING_VOICE)
        response.hangup()
        return str(response)

    @staticmethod
    def voicemail_error() -> str:
        """Degraded greeting used when building the normal one fails."""
        response = VoiceResponse()
        response.say(VOICE_ERROR_GREETING, voice=GREETING_VOICE)
        response.record(max_length=120, play_beep=True)
        response.hangup()
        return str(response)

    @staticmethod
    def voice_fallback() -> str:
        response = VoiceResponse()
        response.say(VOICE_FALLBACK_MESSAGE, voice=GREETING_VOICE)
        response.hangup()
        return str(response)
