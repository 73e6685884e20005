# =============================================================================
# app/routers/ai.py - AI Content Generation Endpoints
# =============================================================================
# Admin/editor tools backing the "generate post" screen:
# - generate-post: full pipeline, saves a pending_review post
# - research-topic: web search + RSS research only
# - generate-image: Unsplash candidates for a header image
#
# Handlers are plain functions; FastAPI runs them in its threadpool while
# the OpenAI, Brave and Unsplash calls block.
# =============================================================================

import logging
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.auth import StaffProfile
from app.exceptions import ValidationFailedError
from core.services.content_service import ContentService
from core.services.image_service import ImageService
from core.services.research_service import ResearchService

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request Models
# =============================================================================

class GeneratePostRequest(BaseModel):
    """Either a topic, keywords, or both."""
    topic: Optional[str] = Field(default=None, example="AI receptionists for dental clinics")
    keywords: list[str] = Field(default_factory=list, example=["automation", "small business"])


class ResearchTopicRequest(BaseModel):
    topic: str = Field(..., min_length=1)
    keywords: list[str] = Field(default_factory=list)


class GenerateImageRequest(BaseModel):
    query: str = Field(..., min_length=1, example="small business automation")
    count: int = Field(default=5, ge=1, le=30)


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/generate-post")
def generate_post(request: GeneratePostRequest, profile: StaffProfile):
    """
    Generate a blog post and save it for review.

    Pipeline: topic -> research -> outline -> content -> SEO metadata ->
    summary -> header image. The post is stored as pending_review.
    """
    topic = (request.topic or "").strip() or None
    if not topic and not request.keywords:
        raise ValidationFailedError(
            "Either topic or keywords must be provided",
            suggestion="Send a topic, a list of keywords, or both",
        )

    logger.info(f"Post generation requested by {profile.user_id}")
    result = ContentService.generate_blog_post(profile.user_id, topic=topic, keywords=request.keywords)
    return {"success": True, **result}


@router.post("/research-topic")
def research_topic(request: ResearchTopicRequest, profile: StaffProfile):
    """Relevant articles, extracted keywords and a text summary."""
    return {"success": True, "research": ResearchService.research_topic(request.topic, request.keywords)}


@router.post("/generate-image")
def generate_image(request: GenerateImageRequest, profile: StaffProfile):
    """Landscape Unsplash photos matching the query."""
    images = ImageService.search(request.query, request.count)
    return {"success": True, "images": images}
