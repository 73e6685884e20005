# =============================================================================
# app/routers/jarvis.py - Jarvis Integration API
# =============================================================================
# Bearer-key API (JARVIS_API_KEY) for the Jarvis desktop assistant,
# mounted at /api/jarvis. The key check is applied router-wide in main.py.
# =============================================================================

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Path, Query

from app.config import settings
from core.models.blog import JarvisBlogPostCreate, PostStatus
from core.models.communication import MarkReadRequest
from core.services.blog_service import BlogService
from core.services.communication_service import CommunicationService
from core.services.jarvis_service import JarvisService
from core.services.voicemail_service import VoicemailService

logger = logging.getLogger(__name__)

router = APIRouter()

Limit = Annotated[int, Query(ge=1, le=50)]


@router.get("/communications")
async def communications_summary():
    """Counts, latest items and total action items across every inbound channel."""
    return JarvisService.communications_summary()


@router.get("/sms")
async def list_sms(
    limit: Limit = 10,
    unread_only: bool = False,
    since: Annotated[Optional[str], Query(description="ISO timestamp; only newer messages")] = None,
):
    return JarvisService.list_sms(limit=limit, unread_only=unread_only, since=since)


@router.get("/consultations")
async def list_consultations(
    limit: Limit = 10,
    pending_only: bool = False,
    since: Annotated[Optional[str], Query()] = None,
):
    return JarvisService.list_consultations(limit=limit, pending_only=pending_only, since=since)


@router.get("/roi-assessments")
async def list_roi_assessments(
    limit: Limit = 10,
    unconverted_only: bool = False,
    since: Annotated[Optional[str], Query()] = None,
):
    return JarvisService.list_roi_assessments(limit=limit, unconverted_only=unconverted_only, since=since)


@router.post("/mark-read")
async def mark_read(request: MarkReadRequest):
    """Mark up to 100 communications as read."""
    updated = CommunicationService.mark_read(request.ids, request.type)
    return {"success": True, "updated_count": updated}


@router.post("/blog", status_code=201)
async def create_blog_draft(request: JarvisBlogPostCreate):
    """
    Save a blog draft written in Jarvis.

    The draft is attributed to the site admin and never published here.
    """
    post = BlogService.create_jarvis_draft(request)
    return {
        "success": True,
        "post": post,
        "message": "Blog post created as draft",
        "admin_url": f"{settings.SITE_URL.rstrip('/')}/admin/blog/{post['slug']}",
    }


@router.get("/blog")
async def list_blog_posts(
    status: Annotated[str, Query()] = PostStatus.DRAFT.value,
    limit: Limit = 10,
):
    return BlogService.list_for_jarvis(status=status, limit=limit)


@router.post("/voicemails/{communication_id}/transcribe")
def transcribe_voicemail(
    communication_id: Annotated[str, Path(description="Voicemail UUID")],
):
    """Transcribe a voicemail with Whisper (returns the stored text if already done)."""
    logger.info(f"Jarvis transcription requested for {communication_id}")
    result = VoicemailService.transcribe(communication_id)
    return {"success": True, **result}
