# routers/rentals.py
"""
Rental lifecycle API routes.

Tenant actions: request, terminate, renew.
Landlord actions: approve/decline, decide terminations and renewals.
All state changes are delegated to RentalLifecycleService.
"""
from fastapi import APIRouter, Depends, Query, status

from dependencies import get_lifecycle_service, require_role, verify_token
from schemas.user import Identity, UserRole
from schemas.rental import (
     RentalRequestCreate,
     RentalDecision,
     TerminationCreate,
     TerminationDecision,
     RenewalCreate,
     RenewalDecision,
)
from services.rental_lifecycle import RentalLifecycleService

router = APIRouter(prefix="/api/rentals", tags=["rentals"])

tenant_only = require_role(UserRole.TENANT)
landlord_only = require_role(UserRole.LANDLORD)


@router.post("/request", status_code=status.HTTP_201_CREATED, summary="Request a rental")
def request_rental(
     body: RentalRequestCreate,
     identity: Identity = Depends(tenant_only),
     lifecycle: RentalLifecycleService = Depends(get_lifecycle_service),
):
     """
     Ask to rent a property.

     - **property_id**: Property to rent
     - **rental_duration**: Months; defaults to the landlord's offered window
     """
     rental = lifecycle.request_rental(identity, body.property_id, body.rental_duration)
     return {"success": True, "message": "Rental request submitted successfully", "rental": rental}


@router.post("/approve", summary="Approve or decline a rental request")
def approve_rental(
     body: RentalDecision,
     identity: Identity = Depends(landlord_only),
     lifecycle: RentalLifecycleService = Depends(get_lifecycle_service),
):
     rental = lifecycle.decide_rental(identity, body.rental_id, body.action)
     message = "Rental approved successfully" if body.action == "approve" else "Rental declined"
     return {"success": True, "message": message, "rental": rental}


@router.post("/terminate", status_code=status.HTTP_201_CREATED, summary="Request early termination")
def request_termination(
     body: TerminationCreate,
     identity: Identity = Depends(tenant_only),
     lifecycle: RentalLifecycleService = Depends(get_lifecycle_service),
):
     """
     Ask to end an active rental. **requested_end_date** must be at least
     two months from today.
     """
     termination = lifecycle.request_termination(
          identity, body.rental_id, body.requested_end_date, body.reason
     )
     return {
          "success": True,
          "message": "Termination request submitted successfully",
          "termination": termination,
     }


@router.post("/termination/approve", summary="Approve or reject a termination")
def decide_termination(
     body: TerminationDecision,
     identity: Identity = Depends(landlord_only),
     lifecycle: RentalLifecycleService = Depends(get_lifecycle_service),
):
     termination = lifecycle.decide_termination(identity, body.termination_id, body.approve)
     message = "Termination approved" if body.approve else "Termination rejected"
     return {"success": True, "message": message, "termination": termination}


@router.get("/terminations", summary="Termination requests for a rental")
def list_terminations(
     rental_id: str = Query(..., min_length=1),
     identity: Identity = Depends(verify_token),
     lifecycle: RentalLifecycleService = Depends(get_lifecycle_service),
):
     return {"success": True, "terminations": lifecycle.list_terminations(identity, rental_id)}


@router.get("/terminations/landlord", summary="Termination requests on my properties")
def list_landlord_terminations(
     identity: Identity = Depends(landlord_only),
     lifecycle: RentalLifecycleService = Depends(get_lifecycle_service),
):
     return {"success": True, "terminations": lifecycle.list_landlord_terminations(identity)}


@router.post("/renew", status_code=status.HTTP_201_CREATED, summary="Request a renewal")
def request_renewal(
     body: RenewalCreate,
     identity: Identity = Depends(tenant_only),
     lifecycle: RentalLifecycleService = Depends(get_lifecycle_service),
):
     """Ask to extend an active rental by **renewal_duration** months (1-24)."""
     renewal = lifecycle.request_renewal(identity, body.rental_id, body.renewal_duration)
     return {"success": True, "message": "Renewal request submitted successfully", "renewal": renewal}


@router.post("/renewal/approve", summary="Approve or reject a renewal")
def decide_renewal(
     body: RenewalDecision,
     identity: Identity = Depends(landlord_only),
     lifecycle: RentalLifecycleService = Depends(get_lifecycle_service),
):
     renewal = lifecycle.decide_renewal(identity, body.renewal_id, body.approve)
     message = "Renewal approved" if body.approve else "Renewal rejected"
     return {"success": True, "message": message, "renewal": renewal}


@router.get("/renewals", summary="Renewal requests for a rental")
def list_renewals(
     rental_id: str = Query(..., min_length=1),
     identity: Identity = Depends(verify_token),
     lifecycle: RentalLifecycleService = Depends(get_lifecycle_service),
):
     return {"success": True, "renewals": lifecycle.list_renewals(identity, rental_id)}


@router.get("/renewals/landlord", summary="Renewal requests on my properties")
def list_landlord_renewals(
     identity: Identity = Depends(landlord_only),
     lifecycle: RentalLifecycleService = Depends(get_lifecycle_service),
):
     return {"success": True, "renewals": lifecycle.list_landlord_renewals(identity)}
