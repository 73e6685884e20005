# =============================================================================
# app/routers/communications.py - Communications Inbox Endpoints
# =============================================================================
# Admin/editor triage of voicemails, SMS and email. Writes are admin-only.
# =============================================================================

from typing import Annotated, Optional

from fastapi import APIRouter, Path, Query
from fastapi.responses import Response

from app.auth import AdminProfile, StaffProfile
from core.models.communication import CommunicationUpdate
from core.services.communication_service import CommunicationService
from core.services.voicemail_service import VoicemailService

router = APIRouter()


@router.get("")
async def list_communications(
    profile: StaffProfile,
    type: Annotated[Optional[str], Query(description="voicemail | sms | email | all")] = None,
    status: Annotated[Optional[str], Query(description="unread | read | replied | archived | all")] = None,
    direction: Annotated[Optional[str], Query(description="inbound | outbound | all")] = None,
    customer_id: Annotated[Optional[str], Query()] = None,
    search: Annotated[Optional[str], Query(description="Matches sender address, sender name or body")] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    result = CommunicationService.list_communications(
        type=type,
        status=status,
        direction=direction,
        customer_id=customer_id,
        search=search,
        limit=limit,
        offset=offset,
    )
    return {"success": True, **result}


@router.get("/stats")
async def get_stats(profile: StaffProfile):
    """Unread counts per channel and today's volume."""
    return {"success": True, "data": CommunicationService.get_stats()}


@router.get("/{communication_id}")
async def get_communication(
    communication_id: Annotated[str, Path(description="Communication UUID")],
    profile: StaffProfile,
):
    return {"success": True, "data": CommunicationService.get_communication(communication_id)}


@router.patch("/{communication_id}")
async def update_communication(
    communication_id: Annotated[str, Path(description="Communication UUID")],
    request: CommunicationUpdate,
    profile: AdminProfile,
):
    """Change triage status and/or link a customer."""
    return {"success": True, "data": CommunicationService.update_communication(communication_id, request)}


@router.delete("/{communication_id}")
async def delete_communication(
    communication_id: Annotated[str, Path(description="Communication UUID")],
    profile: AdminProfile,
):
    """Delete a communication and its Twilio recording, if any."""
    CommunicationService.delete_communication(communication_id)
    return {"success": True}


@router.get("/{communication_id}/audio")
def get_audio(
    communication_id: Annotated[str, Path(description="Voicemail UUID")],
    profile: StaffProfile,
):
    """
    Stream a voicemail recording.

    The browser cannot authenticate against Twilio, so the MP3 is
    proxied with the account credentials.
    """
    audio = VoicemailService.fetch_audio(communication_id)
    return Response(
        content=audio,
        media_type="audio/mpeg",
        headers={"Cache-Control": "private, max-age=3600"},
    )
