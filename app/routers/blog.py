# =============================================================================
# app/routers/blog.py - Blog Post Endpoints
# =============================================================================
# Public reads (published posts only for anonymous callers) and
# admin/editor writes. Image uploads are resized into three widths.
# =============================================================================

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, File, Form, Path, Query, UploadFile

from app.auth import AdminProfile, OptionalProfile, StaffProfile
from core.models.blog import BlogListResponse, BlogPostCreate, BlogPostUpdate
from core.services.blog_service import BlogService
from core.services.storage_service import StorageService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=BlogListResponse)
async def list_posts(
    viewer: OptionalProfile,
    status: Annotated[Optional[str], Query(description="Filter by status (staff only)")] = None,
    author_id: Annotated[Optional[str], Query()] = None,
    featured: Annotated[Optional[bool], Query()] = None,
    tag: Annotated[Optional[str], Query(description="Posts whose tags contain this value")] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    """
    List blog posts, newest first.

    Anonymous callers and viewers only ever receive published posts.
    """
    return BlogService.list_posts(
        viewer=viewer,
        status=status,
        author_id=author_id,
        featured=featured,
        tag=tag,
        limit=limit,
        offset=offset,
    )


@router.post("", status_code=201)
async def create_post(request: BlogPostCreate, profile: StaffProfile):
    """Create a post authored by the caller."""
    post = BlogService.create_post(request, author=profile)
    return {"post": post}


@router.post("/upload-image")
async def upload_image(
    profile: StaffProfile,
    file: Annotated[UploadFile, File(description="JPEG, PNG, WebP or GIF up to 5MB")],
    slug: Annotated[Optional[str], Form()] = None,
):
    """
    Upload a header image.

    Stored at 1200px plus -medium (800px) and -small (400px) variants.
    """
    content = await file.read()
    logger.info(f"Blog image upload by {profile.user_id}: {file.filename} ({len(content)} bytes)")
    urls = StorageService.upload_blog_image(content, file.content_type, slug)
    return {"success": True, **urls}


@router.get("/{slug}")
async def get_post(
    slug: Annotated[str, Path(description="Post slug")],
    viewer: OptionalProfile,
):
    """Fetch one post; unpublished posts are 404 unless the caller is staff."""
    return {"post": BlogService.get_post(slug, viewer=viewer)}


@router.put("/{slug}")
async def update_post(
    slug: Annotated[str, Path(description="Post slug")],
    request: BlogPostUpdate,
    profile: StaffProfile,
):
    """
    Update a post.

    Editors may only edit their own posts; status and slug changes are
    applied for admins only.
    """
    post = BlogService.update_post(slug, request, editor=profile)
    return {"post": post}


@router.delete("/{slug}")
async def delete_post(
    slug: Annotated[str, Path(description="Post slug")],
    profile: AdminProfile,
):
    BlogService.delete_post(slug)
    return {"success": True}
