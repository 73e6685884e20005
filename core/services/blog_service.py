# =============================================================================
# core/services/blog_service.py - Blog Post Business Logic
# =============================================================================
# CRUD for blog_posts plus the Jarvis draft intake.
#
# Visibility rules:
# - Anonymous callers and viewers only ever see published posts
# - Admins and editors see every status
# - Editors may edit only their own posts; only admins change status/slug
# =============================================================================

import logging
import time
from typing import Any

from app.auth.models import UserProfile
from app.auth.roles import is_admin, is_editor_or_higher
from app.auth.session import can_modify_resource
from app.exceptions import (
    DatabaseError,
    MissingFieldsError,
    NotFoundError,
    PermissionDeniedError,
    SlugConflictError,
)
from core.models.blog import (
    BLOG_REQUIRED_FIELDS,
    BlogPostCreate,
    BlogPostUpdate,
    JarvisBlogPostCreate,
    PostStatus,
)
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "blog_posts"
POST_COLUMNS = "*, author:profiles(id, full_name, email)"
JARVIS_SUMMARY_LENGTH = 300
META_DESCRIPTION_LENGTH = 160


def _is_staff(profile: UserProfile | None) -> bool:
    return profile is not None and profile.is_active and is_editor_or_higher(profile.role)


class BlogService:
    """Service for blog post operations."""

    @staticmethod
    def list_posts(
        viewer: UserProfile | None = None,
        status: str | None = None,
        author_id: str | None = None,
        featured: bool | None = None,
        tag: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> dict[str, Any]:
        """
        List posts newest first.

        Non-staff callers are pinned to published posts regardless of the
        requested status.

        Returns:
            {"posts": [...], "total": int}
        """
        client = SupabaseClient.get_client()

        if not _is_staff(viewer):
            status = PostStatus.PUBLISHED.value

        query = (
            client.table(TABLE)
            .select(POST_COLUMNS, count="exact")
            .order("created_at", desc=True)
        )
        if status:
            query = query.eq("status", status)
        if author_id:
            query = query.eq("author_id", author_id)
        if featured:
            query = query.eq("featured", True)
        if tag:
            query = query.contains("tags", [tag])

        response = query.range(offset, offset + limit - 1).execute()
        return {"posts": response.data or [], "total": response.count or 0}

    @staticmethod
    def get_post(slug: str, viewer: UserProfile | None = None) -> dict[str, Any]:
        """
        Fetch a post by slug.

        Raises:
            NotFoundError: Missing, or unpublished and the caller isn't staff
        """
        post = SupabaseClient.fetch_one(TABLE, "slug", slug, columns=POST_COLUMNS)
        if not post:
            raise NotFoundError("Post", slug)

        if post.get("status") != PostStatus.PUBLISHED.value and not _is_staff(viewer):
            # Drafts are invisible rather than forbidden
            raise NotFoundError("Post", slug)

        return post

    @staticmethod
    def _ensure_slug_available(slug: str) -> None:
        if SupabaseClient.exists(TABLE, "slug", slug):
            raise SlugConflictError(slug)

    @staticmethod
    def create_post(data: BlogPostCreate, author: UserProfile) -> dict[str, Any]:
        """
        Create a post authored by `author`.

        Raises:
            MissingFieldsError: title/slug/summary/content missing
            SlugConflictError: Slug already used
        """
        MissingFieldsError.check(data.model_dump(), BLOG_REQUIRED_FIELDS)
        BlogService._ensure_slug_available(data.slug)

        record = {
            "slug": data.slug,
            "title": data.title,
            "summary": data.summary,
            "content": data.content,
            "markdown_content": data.markdown_content,
            "meta_description": data.meta_description or data.summary,
            "author_id": author.user_id,
            "header_image": data.header_image,
            "featured": data.featured,
            "status": data.status.value,
            "tags": data.tags,
            "key_insights": data.key_insights,
            "core_takeaway": data.core_takeaway,
            "published_at": utc_now_iso() if data.status == PostStatus.PUBLISHED else None,
        }

        client = SupabaseClient.get_client()
        try:
            response = client.table(TABLE).insert(record).execute()
        except Exception as e:
            logger.error(f"Blog create error: {e}")
            raise DatabaseError("create post", str(e))

        post = response.data[0]
        logger.info(f"Created blog post {post['slug']} by {author.user_id}")
        return post

    @staticmethod
    def update_post(slug: str, data: BlogPostUpdate, editor: UserProfile) -> dict[str, Any]:
        """
        Apply the fields present in `data`.

        Raises:
            NotFoundError: No post with this slug
            PermissionDeniedError: Editor touching someone else's post
            SlugConflictError: New slug already used
        """
        existing = SupabaseClient.fetch_one(TABLE, "slug", slug)
        if not existing:
            raise NotFoundError("Post", slug)

        if not can_modify_resource(editor, existing.get("author_id"), "blog:update"):
            raise PermissionDeniedError("You can only edit your own posts")

        changes = data.model_dump(exclude_unset=True, exclude={"status", "slug"})
        if "meta_description" in changes and not changes["meta_description"]:
            changes["meta_description"] = changes.get("summary") or existing.get("summary")

        if is_admin(editor.role):
            if data.status is not None:
                changes["status"] = data.status.value
                if data.status == PostStatus.PUBLISHED and not existing.get("published_at"):
                    changes["published_at"] = utc_now_iso()

            if data.slug and data.slug != slug:
                BlogService._ensure_slug_available(data.slug)
                changes["slug"] = data.slug

        changes["updated_at"] = utc_now_iso()

        client = SupabaseClient.get_client()
        try:
            response = client.table(TABLE).update(changes).eq("slug", slug).execute()
        except Exception as e:
            logger.error(f"Blog update error: {e}")
            raise DatabaseError("update post", str(e))

        logger.info(f"Updated blog post {slug}: {sorted(changes)}")
        return response.data[0] if response.data else {**existing, **changes}

    @staticmethod
    def delete_post(slug: str) -> None:
        if not SupabaseClient.exists(TABLE, "slug", slug):
            raise NotFoundError("Post", slug)

        client = SupabaseClient.get_client()
        client.table(TABLE).delete().eq("slug", slug).execute()
        logger.info(f"Deleted blog post {slug}")

    # -------------------------------------------------------------------------
    # Jarvis intake
    # -------------------------------------------------------------------------

    @staticmethod
    def create_jarvis_draft(data: JarvisBlogPostCreate) -> dict[str, Any]:
        """
        Store a draft submitted by the Jarvis desktop client.

        The post is attributed to the first admin, always saved as a
        draft, and its summary is capped at 300 characters.

        Raises:
            MissingFieldsError: title/slug/summary/content missing
            SlugConflictError: Slug used; suggests `<slug>-<unix ms>`
        """
        MissingFieldsError.check(data.model_dump(), BLOG_REQUIRED_FIELDS)

        if SupabaseClient.exists(TABLE, "slug", data.slug):
            raise SlugConflictError(data.slug, suggested_slug=f"{data.slug}-{int(time.time() * 1000)}")

        admin = SupabaseClient.fetch_admin_profile()
        if not admin:
            raise DatabaseError("find an admin author", "No admin profile exists")

        summary = data.summary[:JARVIS_SUMMARY_LENGTH]
        record = {
            "title": data.title,
            "slug": data.slug,
            "summary": summary,
            "content": data.content,
            "markdown_content": data.markdown_content,
            "meta_description": data.meta_description or summary[:META_DESCRIPTION_LENGTH],
            "header_image": data.header_image,
            "tags": data.tags,
            "key_insights": data.key_insights,
            "core_takeaway": data.core_takeaway,
            "author_id": admin["id"],
            "status": PostStatus.DRAFT.value,
            "published_at": None,
        }

        client = SupabaseClient.get_client()
        try:
            response = client.table(TABLE).insert(record).execute()
        except Exception as e:
            logger.error(f"Jarvis blog create error: {e}")
            raise DatabaseError("create post", str(e))

        post = response.data[0]
        logger.info(f"Jarvis created draft post: {post['slug']}")
        return post

    @staticmethod
    def list_for_jarvis(status: str = PostStatus.DRAFT.value, limit: int = 10) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        response = (
            client.table(TABLE)
            .select("id, title, slug, summary, status, tags, created_at, updated_at, published_at", count="exact")
            .eq("status", status)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return {"posts": response.data or [], "total": response.count or 0}
