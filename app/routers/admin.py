# =============================================================================
# app/routers/admin.py - Admin-Only Endpoints
# =============================================================================
# - /admin/users: account management (Supabase Auth + profiles)
# - /admin/sms/reply: answer an inbound SMS through Twilio
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Path

from app.auth import AdminProfile
from core.models.communication import SmsReplyRequest
from core.models.user import UserCreate, UserUpdate
from core.services.communication_service import CommunicationService
from core.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Users
# =============================================================================

@router.get("/users")
async def list_users(profile: AdminProfile):
    return {"success": True, "data": UserService.list_users()}


@router.post("/users", status_code=201)
async def create_user(request: UserCreate, profile: AdminProfile):
    """
    Create an account with a confirmed email.

    Role defaults to viewer; passwords need at least 8 characters.
    """
    return {"success": True, "data": UserService.create_user(request)}


@router.patch("/users/{user_id}")
async def update_user(
    user_id: Annotated[str, Path(description="Profile / auth user UUID")],
    request: UserUpdate,
    profile: AdminProfile,
):
    """Change role, active flag or name. Admins cannot deactivate themselves."""
    return {"success": True, "data": UserService.update_user(user_id, request, admin=profile)}


# =============================================================================
# SMS
# =============================================================================

@router.post("/sms/reply")
def reply_to_sms(request: SmsReplyRequest, profile: AdminProfile):
    """Send an SMS reply and mark the original as replied."""
    logger.info(f"Admin {profile.user_id} replying to communication {request.communication_id}")
    result = CommunicationService.send_reply(request.communication_id, request.message)
    return {"success": True, **result}
