# =============================================================================
# core/models/communication.py - Customer Communication Schemas
# =============================================================================
# Inbound voicemails and SMS (from Twilio) and outbound SMS replies share
# the communications table.
# =============================================================================

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class CommunicationType(str, Enum):
    VOICEMAIL = "voicemail"
    SMS = "sms"
    EMAIL = "email"


class CommunicationDirection(str, Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class CommunicationStatus(str, Enum):
    """
    Triage state.

    - unread: new, counts toward action items
    - read: seen (outbound replies are stored as read)
    - replied: an SMS reply was sent
    - archived: hidden from the inbox
    """
    UNREAD = "unread"
    READ = "read"
    REPLIED = "replied"
    ARCHIVED = "archived"


class TranscriptionStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class CommunicationUpdate(BaseModel):
    """Body for PATCH /communications/{id}; only these fields are writable."""
    status: Optional[CommunicationStatus] = None
    customer_id: Optional[str] = None


class SmsReplyRequest(BaseModel):
    """Body for POST /admin/sms/reply."""
    communication_id: str = Field(..., description="Inbound SMS being answered")
    message: str = Field(..., min_length=1, max_length=1600)


class MarkReadRequest(BaseModel):
    """Body for POST /jarvis/mark-read."""
    ids: list[str] = Field(default_factory=list)
    type: Optional[str] = Field(
        default=None,
        description="Restrict to one communication type; 'all' or omitted matches every type",
    )
