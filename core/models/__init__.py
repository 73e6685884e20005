# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - blog.py: blog posts and their lifecycle
# - lab.py: lab case studies and GitHub-drafted sections
# - communication.py: voicemail/SMS triage
# - customer.py: CRM pipeline and interactions
# - consultation.py: public booking requests
# - roi.py: ROI calculator inputs, results and pricing
# - user.py: admin user management
#
# These models define the "contract" between API and clients.
# =============================================================================

from .blog import (
    BLOG_REQUIRED_FIELDS,
    BlogListResponse,
    BlogPostCreate,
    BlogPostUpdate,
    JarvisBlogPostCreate,
    PostStatus,
)
from .communication import (
    CommunicationDirection,
    CommunicationStatus,
    CommunicationType,
    CommunicationUpdate,
    MarkReadRequest,
    SmsReplyRequest,
    TranscriptionStatus,
)
from .consultation import (
    CONSULTATION_REQUIRED_FIELDS,
    ConsultationCreate,
    ConsultationStatus,
    ConsultationUpdate,
)
from .customer import (
    ACTIVE_PROJECT_STAGES,
    PIPELINE_STAGES,
    PROTECTED_CUSTOMER_FIELDS,
    CustomerCreate,
    CustomerStage,
    InteractionCreate,
    InteractionType,
    ProjectStatus,
)
from .lab import (
    LAB_REQUIRED_FIELDS,
    LabCreate,
    LabGenerateRequest,
    LabSections,
    LabUpdate,
)
from .roi import (
    DerivedPricing,
    PlanDefinition,
    PlanTier,
    PricingSettings,
    ROIAssessmentUpdate,
    ROICalculateRequest,
    ROIResults,
    ROIState,
    ROISubmitRequest,
    Scenario,
    WorkflowSelection,
)
from .user import MIN_PASSWORD_LENGTH, UserCreate, UserUpdate

__all__ = [
    # Blog
    "BLOG_REQUIRED_FIELDS",
    "BlogListResponse",
    "BlogPostCreate",
    "BlogPostUpdate",
    "JarvisBlogPostCreate",
    "PostStatus",
    # Communications
    "CommunicationDirection",
    "CommunicationStatus",
    "CommunicationType",
    "CommunicationUpdate",
    "MarkReadRequest",
    "SmsReplyRequest",
    "TranscriptionStatus",
    # Consultations
    "CONSULTATION_REQUIRED_FIELDS",
    "ConsultationCreate",
    "ConsultationStatus",
    "ConsultationUpdate",
    # Customers
    "ACTIVE_PROJECT_STAGES",
    "PIPELINE_STAGES",
    "PROTECTED_CUSTOMER_FIELDS",
    "CustomerCreate",
    "CustomerStage",
    "InteractionCreate",
    "InteractionType",
    "ProjectStatus",
    # Labs
    "LAB_REQUIRED_FIELDS",
    "LabCreate",
    "LabGenerateRequest",
    "LabSections",
    "LabUpdate",
    # ROI
    "DerivedPricing",
    "PlanDefinition",
    "PlanTier",
    "PricingSettings",
    "ROIAssessmentUpdate",
    "ROICalculateRequest",
    "ROIResults",
    "ROIState",
    "ROISubmitRequest",
    "Scenario",
    "WorkflowSelection",
    # Users
    "MIN_PASSWORD_LENGTH",
    "UserCreate",
    "UserUpdate",
]
