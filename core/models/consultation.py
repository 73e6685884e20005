# =============================================================================
# core/models/consultation.py - Consultation Request Schemas
# =============================================================================

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ConsultationStatus(str, Enum):
    PENDING = "pending"
    CONTACTED = "contacted"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CONVERTED = "converted"
    CANCELLED = "cancelled"


CONSULTATION_REQUIRED_FIELDS = ["name", "email", "phone", "challenges"]


class ConsultationCreate(BaseModel):
    """
    Public booking form body (camelCase from the website).

    Example:
        {
            "name": "Dana Reyes",
            "email": "dana@example.com",
            "phone": "+15555550100",
            "businessType": "healthcare",
            "meetingType": "video",
            "challenges": "Missed calls and slow intake"
        }
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    business_type: Optional[str] = None
    business_size: Optional[str] = None
    preferred_date: Optional[str] = None
    preferred_time: Optional[str] = None
    meeting_type: Optional[str] = None
    challenges: Optional[str] = None


class ConsultationUpdate(BaseModel):
    """Admin edits to a consultation request."""
    status: Optional[ConsultationStatus] = None
    notes: Optional[str] = Field(default=None, max_length=5000)
