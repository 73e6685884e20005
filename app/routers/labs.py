# =============================================================================
# app/routers/labs.py - Lab (Case Study) Endpoints
# =============================================================================
# Same access model as the blog. Labs can also be drafted from a GitHub
# repository by the language model (POST /labs/generate).
# =============================================================================

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, File, Form, Path, Query, UploadFile

from app.auth import AdminProfile, OptionalProfile, StaffProfile
from core.models.lab import LabCreate, LabGenerateRequest, LabUpdate
from core.services.content_service import ContentService
from core.services.lab_service import LabService
from core.services.storage_service import StorageService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def list_labs(
    viewer: OptionalProfile,
    status: Annotated[Optional[str], Query(description="Filter by status (staff only)")] = None,
    author_id: Annotated[Optional[str], Query()] = None,
    featured: Annotated[Optional[bool], Query()] = None,
    tag: Annotated[Optional[str], Query()] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    """List labs, newest first; published only for non-staff callers."""
    return LabService.list_labs(
        viewer=viewer,
        status=status,
        author_id=author_id,
        featured=featured,
        tag=tag,
        limit=limit,
        offset=offset,
    )


@router.post("", status_code=201)
async def create_lab(request: LabCreate, profile: StaffProfile):
    return {"lab": LabService.create_lab(request, author=profile)}


@router.post("/generate", status_code=201)
def generate_lab(request: LabGenerateRequest, profile: StaffProfile):
    """
    Draft a lab from a GitHub repository.

    Reads the repo metadata and README, asks the language model for the
    lab sections and stores the result as an AI-generated draft.
    """
    logger.info(f"Lab generation requested by {profile.user_id} for {request.github_url}")
    result = ContentService.generate_lab(request.github_url, author_id=profile.user_id)
    return {"success": True, **result}


@router.post("/upload-image")
async def upload_image(
    profile: StaffProfile,
    file: Annotated[UploadFile, File(description="Raster image or SVG diagram")],
    slug: Annotated[Optional[str], Form()] = None,
):
    """Upload a workflow image; SVGs are stored as-is."""
    content = await file.read()
    logger.info(f"Lab image upload by {profile.user_id}: {file.filename} ({len(content)} bytes)")
    return {"success": True, **StorageService.upload_lab_image(content, file.content_type, slug)}


@router.get("/{slug}")
async def get_lab(
    slug: Annotated[str, Path(description="Lab slug")],
    viewer: OptionalProfile,
):
    return {"lab": LabService.get_lab(slug, viewer=viewer)}


@router.put("/{slug}")
async def update_lab(
    slug: Annotated[str, Path(description="Lab slug")],
    request: LabUpdate,
    profile: StaffProfile,
):
    """Update a lab; fields left out keep their stored values."""
    return {"lab": LabService.update_lab(slug, request, editor=profile)}


@router.delete("/{slug}")
async def delete_lab(
    slug: Annotated[str, Path(description="Lab slug")],
    profile: AdminProfile,
):
    LabService.delete_lab(slug)
    return {"success": True}
