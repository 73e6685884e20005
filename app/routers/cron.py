# =============================================================================
# app/routers/cron.py - Scheduled Job Endpoints
# =============================================================================
# HTTP triggers for external schedulers (mounted at /api/cron). The same
# jobs also run from Celery beat (workers/tasks.py).
#
#   GET /generate-weekly-post   requires CRON_SECRET (500 if unset)
#   GET /sync-voicemails        checks CRON_SECRET only when it is set
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.api_keys import verify_cron_secret
from core.services.content_service import ContentService
from core.services.voicemail_service import VoicemailService
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/generate-weekly-post", dependencies=[Depends(verify_cron_secret(required=True))])
def generate_weekly_post():
    """Generate this week's AI post (status pending_review)."""
    logger.info("Weekly post generation triggered via cron endpoint")
    result = ContentService.generate_weekly_post()
    return {"success": True, "data": {**result, "timestamp": utc_now_iso()}}


@router.get("/sync-voicemails", dependencies=[Depends(verify_cron_secret(required=False))])
def sync_voicemails():
    """Import Twilio recordings missed by the recording-complete webhook."""
    result = VoicemailService.sync_from_twilio()
    return {"success": True, **result}
