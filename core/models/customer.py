# =============================================================================
# core/models/customer.py - Customer (CRM) Schemas
# =============================================================================
# Customers move through a sales pipeline (stage) and, once a project is
# running, carry a health flag (project_status). Every notable event is
# logged as a customer_interactions row.
# =============================================================================

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class CustomerStage(str, Enum):
    PROPOSAL_DEVELOPMENT = "proposal_development"
    PROPOSAL_SENT = "proposal_sent"
    NEGOTIATION = "negotiation"
    PROJECT_ACTIVE = "project_active"
    IMPLEMENTATION = "implementation"
    DELIVERED = "delivered"
    CLOSED_WON = "closed_won"
    CLOSED_LOST = "closed_lost"


class ProjectStatus(str, Enum):
    ON_TRACK = "on_track"
    AT_RISK = "at_risk"
    DELAYED = "delayed"
    BLOCKED = "blocked"


class InteractionType(str, Enum):
    NOTE = "note"
    EMAIL = "email"
    CALL = "call"
    MEETING = "meeting"
    STAGE_CHANGE = "stage_change"
    CONSULTATION_REQUEST = "consultation_request"


# Columns clients may never write through PUT /customers/{id}
PROTECTED_CUSTOMER_FIELDS = frozenset({
    "id",
    "created_at",
    "updated_at",
    "search_vector",
    "interactions",
    "assigned_admin",
    "consultation_request_id",
    "roi_assessment_id",
})

PIPELINE_STAGES = (
    CustomerStage.PROPOSAL_SENT,
    CustomerStage.NEGOTIATION,
    CustomerStage.PROJECT_ACTIVE,
)

ACTIVE_PROJECT_STAGES = (
    CustomerStage.PROJECT_ACTIVE,
    CustomerStage.IMPLEMENTATION,
    CustomerStage.DELIVERED,
)


class CustomerCreate(BaseModel):
    """
    Body for POST /customers.

    Extra CRM columns (business_size, agreed_implementation_cost, ...)
    are passed through to the insert.
    """
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    business_type: Optional[str] = None
    stage: CustomerStage = CustomerStage.PROPOSAL_DEVELOPMENT
    project_status: ProjectStatus = ProjectStatus.ON_TRACK
    roi_assessment_id: Optional[str] = None
    notes: Optional[str] = None


class InteractionCreate(BaseModel):
    """Body for POST /customers/{id}/interactions."""
    model_config = ConfigDict(extra="allow")

    interaction_type: Optional[InteractionType] = None
    subject: Optional[str] = None
    notes: Optional[str] = None
    interaction_date: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
