# =============================================================================
# core/models/lab.py - Lab (Case Study) Schemas
# =============================================================================
# Labs document an automation build: overview, architecture, setup,
# troubleshooting and business use, optionally drafted from a GitHub repo.
# =============================================================================

from typing import Any, Optional

from pydantic import BaseModel, Field

from .blog import PostStatus

LAB_REQUIRED_FIELDS = ["title", "slug", "overview"]


class LabCreate(BaseModel):
    """Body for POST /labs."""
    title: Optional[str] = None
    slug: Optional[str] = None
    overview: Optional[str] = None
    architecture: Optional[str] = None
    setup_deployment: Optional[str] = None
    troubleshooting: Optional[str] = None
    business_use: Optional[str] = None
    workflow_svg: Optional[str] = None
    github_url: Optional[str] = None
    github_metadata: Optional[dict[str, Any]] = None
    meta_description: Optional[str] = None
    featured: bool = False
    status: PostStatus = PostStatus.DRAFT
    tags: list[str] = Field(default_factory=list)
    ai_generated: bool = False


class LabUpdate(BaseModel):
    """
    Body for PUT /labs/{slug}.

    Absent fields keep their stored value.
    """
    title: Optional[str] = None
    slug: Optional[str] = None
    overview: Optional[str] = None
    architecture: Optional[str] = None
    setup_deployment: Optional[str] = None
    troubleshooting: Optional[str] = None
    business_use: Optional[str] = None
    workflow_svg: Optional[str] = None
    github_url: Optional[str] = None
    github_metadata: Optional[dict[str, Any]] = None
    meta_description: Optional[str] = None
    featured: Optional[bool] = None
    status: Optional[PostStatus] = None
    tags: Optional[list[str]] = None


class LabGenerateRequest(BaseModel):
    """Body for POST /labs/generate."""
    github_url: str = Field(..., description="https://github.com/<owner>/<repo>")


class LabSections(BaseModel):
    """Sections drafted by the language model for a lab."""
    title: str
    overview: str
    architecture: str = ""
    setup_deployment: str = ""
    troubleshooting: str = ""
    business_use: str = ""
    meta_description: str = ""
    tags: list[str] = Field(default_factory=list)
