# =============================================================================
# app/routers/consultations.py - Consultation Request Endpoints
# =============================================================================
# Two routers:
# - public_router: POST /consultation (website booking form, no auth)
# - router: /consultations admin pipeline
# =============================================================================

from typing import Annotated, Optional

from fastapi import APIRouter, Path, Query

from app.auth import AdminProfile
from core.models.consultation import ConsultationCreate, ConsultationUpdate
from core.services.consultation_service import ConsultationService

public_router = APIRouter()
router = APIRouter()

ConsultationId = Annotated[str, Path(description="Consultation request UUID")]


@public_router.post("", status_code=201)
async def submit_consultation(request: ConsultationCreate):
    """Book a consultation from the website; the team is alerted on Discord."""
    consultation = ConsultationService.submit(request)
    return {"success": True, "id": consultation["id"]}


@router.get("")
async def list_consultations(
    profile: AdminProfile,
    status: Annotated[Optional[str], Query(description="Filter by status or 'all'")] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    result = ConsultationService.list_consultations(status=status, limit=limit, offset=offset)
    return {"success": True, **result}


@router.get("/{consultation_id}")
async def get_consultation(consultation_id: ConsultationId, profile: AdminProfile):
    return {"success": True, "data": ConsultationService.get_consultation(consultation_id)}


@router.put("/{consultation_id}")
async def update_consultation(
    consultation_id: ConsultationId,
    request: ConsultationUpdate,
    profile: AdminProfile,
):
    return {"success": True, "data": ConsultationService.update_consultation(consultation_id, request)}


@router.delete("/{consultation_id}")
async def delete_consultation(consultation_id: ConsultationId, profile: AdminProfile):
    ConsultationService.delete_consultation(consultation_id)
    return {"success": True}


@router.post("/{consultation_id}/convert")
async def convert_consultation(consultation_id: ConsultationId, profile: AdminProfile):
    """Create a customer from this request and mark it converted."""
    customer = ConsultationService.convert_to_customer(consultation_id, admin=profile)
    return {"success": True, "data": customer, "customerId": customer["id"]}
