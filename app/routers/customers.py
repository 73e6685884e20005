# =============================================================================
# app/routers/customers.py - CRM Endpoints
# =============================================================================
# Editors get read access; every write requires an admin.
# =============================================================================

from typing import Annotated, Any, Optional

from fastapi import APIRouter, Body, Path, Query

from app.auth import AdminProfile, StaffProfile
from core.models.customer import CustomerCreate, InteractionCreate
from core.services.customer_service import CustomerService

router = APIRouter()

CustomerId = Annotated[str, Path(description="Customer UUID")]


@router.get("")
async def list_customers(
    profile: StaffProfile,
    stage: Annotated[Optional[str], Query(description="Pipeline stage or 'all'")] = None,
    status: Annotated[Optional[str], Query(description="Project status or 'all'")] = None,
    assigned_admin_id: Annotated[Optional[str], Query()] = None,
    search: Annotated[Optional[str], Query(description="Matches name, email or business type")] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    result = CustomerService.list_customers(
        stage=stage,
        status=status,
        assigned_admin_id=assigned_admin_id,
        search=search,
        limit=limit,
        offset=offset,
    )
    return {"success": True, **result}


@router.post("", status_code=201)
async def create_customer(request: CustomerCreate, profile: AdminProfile):
    """
    Create a customer assigned to the caller.

    Passing roi_assessment_id links the assessment and marks it converted.
    """
    return {"success": True, "data": CustomerService.create_customer(request, admin=profile)}


@router.get("/{customer_id}")
async def get_customer(customer_id: CustomerId, profile: StaffProfile):
    """Customer with its interaction history (newest first)."""
    return {"success": True, "data": CustomerService.get_customer(customer_id)}


@router.put("/{customer_id}")
async def update_customer(
    customer_id: CustomerId,
    profile: AdminProfile,
    changes: Annotated[dict[str, Any], Body()],
):
    """Update CRM columns; ids, timestamps and lead links are ignored."""
    return {"success": True, "data": CustomerService.update_customer(customer_id, changes)}


@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: CustomerId,
    profile: AdminProfile,
    permanent: Annotated[bool, Query(description="Delete instead of archiving")] = False,
):
    """Archive (stage closed_lost) or, with permanent=true, delete."""
    action = CustomerService.delete_customer(customer_id, admin=profile, permanent=permanent)
    return {"success": True, "action": action}


@router.get("/{customer_id}/interactions")
async def list_interactions(customer_id: CustomerId, profile: StaffProfile):
    return {"success": True, "data": CustomerService.list_interactions(customer_id)}


@router.post("/{customer_id}/interactions", status_code=201)
async def create_interaction(
    customer_id: CustomerId,
    request: InteractionCreate,
    profile: AdminProfile,
):
    return {"success": True, "data": CustomerService.create_interaction(customer_id, request, admin=profile)}
