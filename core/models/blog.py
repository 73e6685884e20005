# =============================================================================
# core/models/blog.py - Blog Post Schemas
# =============================================================================
# These models define the API contract for blog operations:
# - PostStatus: lifecycle of a post
# - BlogPostCreate / BlogPostUpdate: admin/editor bodies
# - JarvisBlogPostCreate: drafts pushed by the Jarvis desktop client
#
# Required text fields are Optional here and checked in the service so
# the caller gets a 400 listing what was required and what was provided.
# =============================================================================

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class PostStatus(str, Enum):
    """
    Possible states for a blog post or lab.

    - draft: being written, not public
    - pending_review: AI-generated, waiting for a human
    - published: public; published_at is set on first publish
    - archived: hidden from the site
    """
    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    PUBLISHED = "published"
    ARCHIVED = "archived"


BLOG_REQUIRED_FIELDS = ["title", "slug", "summary", "content"]


class BlogPostCreate(BaseModel):
    """
    Body for POST /blog.

    Example:
        {
            "title": "Automating Lead Follow-up",
            "slug": "automating-lead-follow-up",
            "summary": "How small teams answer every lead in minutes.",
            "content": "<p>...</p>",
            "tags": ["automation"],
            "status": "draft"
        }
    """
    title: Optional[str] = None
    slug: Optional[str] = None
    summary: Optional[str] = None
    content: Optional[str] = None
    markdown_content: Optional[str] = None
    meta_description: Optional[str] = None
    header_image: Optional[str] = None
    featured: bool = False
    tags: list[str] = Field(default_factory=list)
    status: PostStatus = PostStatus.DRAFT
    key_insights: Optional[list[str]] = None
    core_takeaway: Optional[str] = None


class BlogPostUpdate(BaseModel):
    """
    Body for PUT /blog/{slug}.

    Only fields that are sent are applied (exclude_unset).
    """
    title: Optional[str] = None
    slug: Optional[str] = None
    summary: Optional[str] = None
    content: Optional[str] = None
    markdown_content: Optional[str] = None
    meta_description: Optional[str] = None
    header_image: Optional[str] = None
    featured: Optional[bool] = None
    tags: Optional[list[str]] = None
    status: Optional[PostStatus] = None
    key_insights: Optional[list[str]] = None
    core_takeaway: Optional[str] = None


class JarvisBlogPostCreate(BaseModel):
    """Draft submitted over the Jarvis integration API."""
    title: Optional[str] = None
    slug: Optional[str] = None
    summary: Optional[str] = None
    content: Optional[str] = None
    markdown_content: Optional[str] = None
    meta_description: Optional[str] = None
    header_image: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    key_insights: Optional[list[str]] = None
    core_takeaway: Optional[str] = None


class BlogListResponse(BaseModel):
    posts: list[dict[str, Any]]
    total: int
