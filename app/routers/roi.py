# =============================================================================
# app/routers/roi.py - ROI Calculator and Assessment Endpoints
# =============================================================================
# public_router (/roi): calculator catalogue, segment presets, server-side
#   calculation and lead submission. No authentication.
# router (/roi-assessments): admin/editor lead pipeline; conversion to a
#   customer is admin-only.
# =============================================================================

from typing import Annotated, Optional

from fastapi import APIRouter, Path, Query

from app.auth import AdminProfile, StaffProfile
from app.exceptions import NotFoundError
from core.models.roi import (
    ROIAssessmentUpdate,
    ROICalculateRequest,
    ROISegment,
    ROIState,
    ROISubmitRequest,
)
from core.services.roi_service import ROIService
from lib.roi import (
    DEFAULT_WORKFLOWS,
    INDUSTRIES,
    PLAN_DEFINITIONS,
    SEGMENT_DEFAULTS,
    SEGMENT_META,
    apply_segment,
    parse_segment,
)

public_router = APIRouter()
router = APIRouter()

AssessmentId = Annotated[str, Path(description="ROI assessment UUID")]


def _segment_body(segment: ROISegment) -> dict:
    return {
        **SEGMENT_META[segment].model_dump(mode="json", by_alias=True),
        "defaults": SEGMENT_DEFAULTS[segment].model_dump(mode="json", by_alias=True, exclude_none=True),
    }


# =============================================================================
# Public Calculator
# =============================================================================

@public_router.get("/catalog")
async def get_catalog():
    """Plans, default workflows, industries and segments used to prefill the calculator."""
    return {
        "plans": [plan.model_dump(mode="json", by_alias=True) for plan in PLAN_DEFINITIONS],
        "workflows": [workflow.model_dump(mode="json", by_alias=True) for workflow in DEFAULT_WORKFLOWS],
        "industries": [{"id": key, "name": name} for key, name in INDUSTRIES.items()],
        "segments": [_segment_body(segment) for segment in ROISegment],
    }


@public_router.get("/segments/{segment}")
async def get_segment(segment: Annotated[str, Path(description="Segment id, e.g. healthcare")]):
    """Segment copy plus a calculator state prefilled from its defaults."""
    parsed = parse_segment(segment)
    if parsed is None:
        raise NotFoundError("ROI segment", segment)

    state = apply_segment(parsed, ROIState())
    return {**_segment_body(parsed), "state": state.model_dump(mode="json", by_alias=True)}


@public_router.post("/calculate")
async def calculate(request: ROICalculateRequest):
    """Monthly projections plus the quoted plan and fees."""
    return {"success": True, **ROIService.calculate(request)}


@public_router.post("/submit")
async def submit(request: ROISubmitRequest):
    """
    Capture a calculator lead.

    The Discord alert is sent even if the assessment could not be stored.
    """
    assessment = ROIService.submit(request)
    return {"success": True, "id": assessment["id"] if assessment else None}


# =============================================================================
# Admin Pipeline
# =============================================================================

@router.get("")
async def list_assessments(
    profile: StaffProfile,
    contacted: Annotated[Optional[bool], Query()] = None,
    converted: Annotated[Optional[bool], Query(description="false also matches rows never converted")] = None,
    search: Annotated[Optional[str], Query(description="Email contains")] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    result = ROIService.list_assessments(
        contacted=contacted,
        converted=converted,
        search=search,
        limit=limit,
        offset=offset,
    )
    return {"success": True, **result}


@router.get("/{assessment_id}")
async def get_assessment(assessment_id: AssessmentId, profile: StaffProfile):
    return {"success": True, "data": ROIService.get_assessment(assessment_id)}


@router.patch("/{assessment_id}")
async def update_assessment(
    assessment_id: AssessmentId,
    request: ROIAssessmentUpdate,
    profile: StaffProfile,
):
    """Mark contacted (stamps contacted_at) and/or save notes."""
    return {"success": True, "data": ROIService.update_assessment(assessment_id, request)}


@router.delete("/{assessment_id}")
async def delete_assessment(assessment_id: AssessmentId, profile: StaffProfile):
    ROIService.delete_assessment(assessment_id)
    return {"success": True}


@router.post("/{assessment_id}/convert")
async def convert_assessment(assessment_id: AssessmentId, profile: AdminProfile):
    customer = ROIService.convert_to_customer(assessment_id, admin=profile)
    return {"success": True, "data": customer, "customerId": customer["id"]}
