# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Background and scheduled jobs.
#
# Tasks:
# - generate_weekly_post: AI blog post for review (beat: Mondays 09:00 UTC)
# - sync_voicemails: import missed Twilio recordings (beat: every 15 min)
# - transcribe_voicemail: Whisper transcription of one voicemail
# - healthcheck: verify a worker is consuming
# =============================================================================

import logging
from typing import Any

from celery import shared_task

from app.exceptions import NoviqueException, UpstreamServiceError

logger = logging.getLogger(__name__)


@shared_task(bind=True, name="workers.tasks.generate_weekly_post")
def generate_weekly_post(self) -> dict[str, Any]:
    """
    Generate the weekly blog post.

    Returns:
        Dict with success plus post_id/slug/topic, or error
    """
    from core.services.content_service import ContentService

    try:
        result = ContentService.generate_weekly_post()
        return {"success": True, **result}

    except Exception as e:
        logger.exception(f"Weekly post generation failed: {e}")
        return {
            "success": False,
            "error": str(e),
        }


@shared_task(bind=True, name="workers.tasks.sync_voicemails")
def sync_voicemails(self) -> dict[str, Any]:
    """Import Twilio recordings that have no communications row yet."""
    from core.services.voicemail_service import VoicemailService

    try:
        result = VoicemailService.sync_from_twilio()
        return {"success": True, **result}

    except Exception as e:
        logger.exception(f"Voicemail sync failed: {e}")
        return {
            "success": False,
            "error": str(e),
        }


@shared_task(bind=True, name="workers.tasks.transcribe_voicemail")
def transcribe_voicemail(self, communication_id: str) -> dict[str, Any]:
    """
    Transcribe a voicemail queued by the recording-complete webhook.

    Upstream failures (Twilio download, OpenAI) are retried; the row is
    left as failed between attempts.
    """
    from core.services.voicemail_service import VoicemailService

    logger.info(f"Transcribing voicemail {communication_id}")

    try:
        result = VoicemailService.transcribe(communication_id)
        return {"success": True, "communication_id": communication_id, **result}

    except UpstreamServiceError as e:
        logger.warning(f"Transcription of {communication_id} failed upstream, retrying: {e.message}")
        raise self.retry(exc=e)

    except NoviqueException as e:
        logger.error(f"Transcription of {communication_id} failed: [{e.code}] {e.message}")
        return {
            "success": False,
            "communication_id": communication_id,
            "error": e.message,
        }


@shared_task(bind=True, name="workers.tasks.healthcheck")
def healthcheck(self) -> str:
    """
    Simple healthcheck task to verify worker is running.

    Usage:
        from workers.tasks import healthcheck
        result = healthcheck.delay()
        print(result.get(timeout=5))  # Should return "OK"
    """
    return "OK"
