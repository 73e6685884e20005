# =============================================================================
# core/services/lab_service.py - Lab Business Logic
# =============================================================================
# CRUD for labs (automation case studies). Same visibility and ownership
# rules as blog posts; PUT keeps stored values for fields not sent.
# =============================================================================

import logging
from typing import Any

from app.auth.models import UserProfile
from app.auth.roles import is_admin, is_editor_or_higher
from app.exceptions import (
    DatabaseError,
    MissingFieldsError,
    NotFoundError,
    PermissionDeniedError,
    SlugConflictError,
)
from core.models.blog import PostStatus
from core.models.lab import LAB_REQUIRED_FIELDS, LabCreate, LabUpdate
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "labs"
LAB_COLUMNS = "*, author:profiles(id, full_name, email)"


class LabService:
    """Service for lab operations."""

    @staticmethod
    def list_labs(
        viewer: UserProfile | None = None,
        status: str | None = None,
        author_id: str | None = None,
        featured: bool | None = None,
        tag: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> dict[str, Any]:
        """List labs newest first; non-staff see published only."""
        client = SupabaseClient.get_client()

        if viewer is None or not viewer.is_active or not is_editor_or_higher(viewer.role):
            status = PostStatus.PUBLISHED.value

        query = (
            client.table(TABLE)
            .select(LAB_COLUMNS, count="exact")
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
        return {"labs": response.data or [], "total": response.count or 0}

    @staticmethod
    def get_lab(slug: str, viewer: UserProfile | None = None) -> dict[str, Any]:
        lab = SupabaseClient.fetch_one(TABLE, "slug", slug, columns=LAB_COLUMNS)
        if not lab:
            raise NotFoundError("Lab", slug)

        is_staff = viewer is not None and viewer.is_active and is_editor_or_higher(viewer.role)
        if lab.get("status") != PostStatus.PUBLISHED.value and not is_staff:
            raise NotFoundError("Lab", slug)

        return lab

    @staticmethod
    def create_lab(data: LabCreate, author: UserProfile) -> dict[str, Any]:
        """
        Create a lab.

        Raises:
            MissingFieldsError: title/slug/overview missing
            SlugConflictError: Slug already used
        """
        MissingFieldsError.check(data.model_dump(), LAB_REQUIRED_FIELDS)
        if SupabaseClient.exists(TABLE, "slug", data.slug):
            raise SlugConflictError(data.slug)

        record = data.model_dump(mode="json")
        record.update({
            "meta_description": data.meta_description or data.overview[:160],
            "author_id": author.user_id,
            "published_at": utc_now_iso() if data.status == PostStatus.PUBLISHED else None,
        })

        client = SupabaseClient.get_client()
        try:
            response = client.table(TABLE).insert(record).execute()
        except Exception as e:
            logger.error(f"Lab create error: {e}")
            raise DatabaseError("create lab", str(e))

        lab = response.data[0]
        logger.info(f"Created lab {lab['slug']} by {author.user_id}")
        return lab

    @staticmethod
    def update_lab(slug: str, data: LabUpdate, editor: UserProfile) -> dict[str, Any]:
        """
        Update a lab; editors only their own.

        Raises:
            NotFoundError: No lab with this slug
            PermissionDeniedError: Editor touching someone else's lab
            SlugConflictError: New slug already used
        """
        existing = SupabaseClient.fetch_one(TABLE, "slug", slug)
        if not existing:
            raise NotFoundError("Lab", slug)

        admin = is_admin(editor.role)
        if not admin and str(existing.get("author_id")) != editor.user_id:
            raise PermissionDeniedError("You can only edit your own labs")

        changes = {
            key: value
            for key, value in data.model_dump(mode="json", exclude={"status", "slug"}).items()
            if value is not None
        }

        if admin:
            if data.status is not None:
                changes["status"] = data.status.value
                if data.status == PostStatus.PUBLISHED and not existing.get("published_at"):
                    changes["published_at"] = utc_now_iso()

            if data.slug and data.slug != slug:
                if SupabaseClient.exists(TABLE, "slug", data.slug):
                    raise SlugConflictError(data.slug)
                changes["slug"] = data.slug

        changes["updated_at"] = utc_now_iso()

        client = SupabaseClient.get_client()
        try:
            response = client.table(TABLE).update(changes).eq("slug", slug).execute()
        except Exception as e:
            logger.error(f"Lab update error: {e}")
            raise DatabaseError("update lab", str(e))

        return response.data[0] if response.data else {**existing, **changes}

    @staticmethod
    def delete_lab(slug: str) -> None:
        if not SupabaseClient.exists(TABLE, "slug", slug):
            raise NotFoundError("Lab", slug)

        client = SupabaseClient.get_client()
        client.table(TABLE).delete().eq("slug", slug).execute()
        logger.info(f"Deleted lab {slug}")
