# =============================================================================
# core/services/content_service.py - AI Content Pipelines
# =============================================================================
# Multi-step generation of draft content:
#
#   Blog post:  topic -> research -> outline -> article -> SEO -> summary
#               -> header image -> slug -> insert (pending_review)
#   Lab page:   GitHub repo -> drafted sections -> slug -> insert (draft)
#
# Generated content always lands unpublished so a human reviews it.
# =============================================================================

import logging
from typing import Any

from app.config import settings
from app.exceptions import DatabaseError, SlugConflictError
from core.services.ai_service import AIService
from core.services.github_service import GitHubService
from core.services.image_service import ImageService
from core.services.research_service import ResearchService
from lib.supabase_client import SupabaseClient
from lib.utils import markdown_to_html, slugify

logger = logging.getLogger(__name__)

DEFAULT_KEYWORDS = ["AI", "automation", "small business", "technology"]
DEFAULT_LAB_TAGS = ["automation", "ai", "lab"]
LAB_MARKDOWN_SECTIONS = ["overview", "architecture", "setup_deployment", "troubleshooting", "business_use"]


class ContentService:
    """Blog and lab generation workflows."""

    @staticmethod
    def _insert(table: str, data: dict[str, Any]) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        try:
            response = client.table(table).insert(data).execute()
        except Exception as e:
            logger.error(f"Database insert error ({table}): {e}")
            raise DatabaseError(f"save generated {table} row", str(e))
        return response.data[0]

    @staticmethod
    def generate_blog_post(
        author_id: str,
        topic: str | None = None,
        keywords: list[str] | None = None,
    ) -> dict[str, Any]:
        """
        Generate and save a blog post for review.

        Args:
            author_id: Profile the post is attributed to
            topic: Post topic; proposed by the model when omitted
            keywords: Focus keywords (also seed topic selection)

        Returns:
            {"post_id", "slug", "generation_data"}

        Raises:
            SlugConflictError: A post with the generated slug exists
            UpstreamServiceError: OpenAI failed
        """
        keywords = keywords or []
        logger.info("Starting blog post generation")

        if not topic:
            topic = AIService.generate_topic(keywords or DEFAULT_KEYWORDS)
        logger.info(f"Topic: {topic}")

        logger.info("Step 1/6: Researching topic")
        research = ResearchService.research_topic(topic, keywords)

        logger.info("Step 2/6: Generating outline")
        outline = AIService.generate_outline(topic, research["summary"])

        logger.info("Step 3/6: Generating content")
        markdown_content = AIService.generate_content(topic, outline, research["keywords"])

        logger.info("Step 4/6: Generating SEO metadata")
        seo = AIService.generate_seo(topic, markdown_content)

        logger.info("Step 5/6: Generating summary")
        summary = AIService.generate_summary(markdown_content)

        logger.info("Step 6/6: Fetching header image")
        image = ImageService.header_image(topic, research["keywords"])

        slug = slugify(seo["title"])
        if SupabaseClient.exists("blog_posts", "slug", slug):
            raise SlugConflictError(slug)

        post = ContentService._insert("blog_posts", {
            "slug": slug,
            "title": seo["title"],
            "summary": summary[:300],
            "content": markdown_to_html(markdown_content),
            "markdown_content": markdown_content,
            "meta_description": seo["metaDescription"] or summary[:160],
            "author_id": author_id,
            "header_image": image["url"] if image else None,
            "featured": False,
            "tags": seo["tags"],
            "status": "pending_review",
            "ai_generated": True,
            "ai_source": "openai",
            "ai_prompt": topic,
            "generation_metadata": {
                "topic": topic,
                "keywords": research["keywords"],
                "researchSources": [a["source"] for a in research["articles"]],
                "outline": outline,
                "imageAttribution": ImageService.attribution(image) if image else None,
            },
        })
        logger.info(f"Blog post generated: {post['slug']}")

        return {
            "post_id": post["id"],
            "slug": post["slug"],
            "generation_data": {
                "topic": topic,
                "research": research,
                "outline": outline,
                "metadata": {
                    "title": seo["title"],
                    "summary": summary,
                    "meta_description": seo["metaDescription"],
                    "tags": seo["tags"],
                },
                "header_image": {
                    "url": image["url"],
                    "alt": ImageService.alt_text(image, topic),
                    "attribution": f"Photo by {image['photographer']}",
                } if image else None,
            },
        }

    @staticmethod
    def generate_lab(github_url: str, author_id: str) -> dict[str, Any]:
        """
        Draft a lab page from a GitHub repository.

        Returns:
            {"lab_id", "slug", "generation_data"}

        Raises:
            ValidationFailedError: Not a GitHub URL
            GitHubReaderError: Repository unreadable
            SlugConflictError: A lab with the drafted slug exists
        """
        logger.info(f"Starting lab generation from: {github_url}")
        repo = GitHubService.read_repository(github_url)
        sections = AIService.generate_lab_sections(repo["metadata"], repo["readme"])

        title = sections.title.strip()
        slug = slugify(title)
        if SupabaseClient.exists("labs", "slug", slug):
            raise SlugConflictError(slug)

        lab_data: dict[str, Any] = {
            "title": title,
            "slug": slug,
            "github_url": github_url,
            "github_metadata": repo["metadata"],
            "meta_description": sections.meta_description[:160] or None,
            "tags": sections.tags or DEFAULT_LAB_TAGS,
            "status": "draft",
            "featured": False,
            "ai_generated": True,
            "author_id": author_id,
        }
        for field in LAB_MARKDOWN_SECTIONS:
            lab_data[field] = markdown_to_html(getattr(sections, field))

        lab = ContentService._insert("labs", lab_data)
        logger.info(f"Lab generated: {lab['slug']}")

        return {
            "lab_id": lab["id"],
            "slug": lab["slug"],
            "generation_data": {
                "github_url": github_url,
                "repository": repo["metadata"],
                "sections": sections.model_dump(),
            },
        }

    @staticmethod
    def generate_weekly_post() -> dict[str, Any]:
        """
        Scheduled weekly post attributed to the site admin.

        Returns:
            {"post_id", "slug", "topic", "status"}

        Raises:
            DatabaseError: No admin profile to attribute the post to
        """
        admin = SupabaseClient.fetch_admin_profile(preferred_email=settings.ADMIN_AUTHOR_EMAIL)
        if not admin:
            raise DatabaseError("find an admin author", "No admin profile exists")

        logger.info("Starting weekly blog post generation")
        result = ContentService.generate_blog_post(admin["id"], keywords=list(DEFAULT_KEYWORDS))
        logger.info(f"Weekly blog post generated: {result['slug']}")

        return {
            "post_id": result["post_id"],
            "slug": result["slug"],
            "topic": result["generation_data"]["topic"],
            "status": "pending_review",
        }
