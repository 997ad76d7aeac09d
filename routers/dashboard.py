# routers/dashboard.py
"""
Dashboard API routes, one per role. All read-only.
"""
from fastapi import APIRouter, Depends

from dependencies import get_dashboard_service, require_role
from schemas.user import Identity, UserRole
from services.dashboard_service import DashboardService

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/tenant", summary="Tenant dashboard")
def tenant_dashboard(
     identity: Identity = Depends(require_role(UserRole.TENANT)),
     dashboards: DashboardService = Depends(get_dashboard_service),
):
     """Current rental, its property and landlord, and the payment history."""
     return {"success": True, "data": dashboards.tenant_dashboard(identity)}


@router.get("/landlord", summary="Landlord dashboard")
def landlord_dashboard(
     identity: Identity = Depends(require_role(UserRole.LANDLORD)),
     dashboards: DashboardService = Depends(get_dashboard_service),
):
     """Properties, live rentals, pending requests, rent due and revenue."""
     return {"success": True, "data": dashboards.landlord_dashboard(identity)}


@router.get("/bank", summary="Bank dashboard")
def bank_dashboard(
     identity: Identity = Depends(require_role(UserRole.BANK)),
     dashboards: DashboardService = Depends(get_dashboard_service),
):
     """Tenant rental and payment history with credit scores."""
     return {"success": True, "data": dashboards.bank_dashboard(identity)}


@router.get("/ministry", summary="Ministry dashboard")
def ministry_dashboard(
     identity: Identity = Depends(require_role(UserRole.MINISTRY)),
     dashboards: DashboardService = Depends(get_dashboard_service),
):
     """System-wide counts, revenue, compliance rate and rent map."""
     return {"success": True, "data": dashboards.ministry_dashboard(identity)}
