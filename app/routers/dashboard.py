# =============================================================================
# app/routers/dashboard.py - Admin Dashboard Endpoint
# =============================================================================

from fastapi import APIRouter

from app.auth import StaffProfile
from core.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/stats")
async def get_stats(profile: StaffProfile):
    """Revenue, upcoming activity, project health and recent interactions."""
    return {"success": True, "data": DashboardService.get_stats()}
