# routers/properties.py
"""
Property API routes.

- Anyone can browse rentable properties
- Landlords create, edit and re-list their own properties
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from dependencies import (
     get_lifecycle_service,
     get_property_service,
     require_role,
     verify_token,
)
from schemas.user import Identity, UserRole
from schemas.property import Property, PropertyCreate, PropertyUpdate, ListAgainRequest
from services.property_service import PropertyService
from services.rental_lifecycle import RentalLifecycleService

router = APIRouter(prefix="/api/properties", tags=["properties"])

landlord_only = require_role(UserRole.LANDLORD)


@router.get("", response_model=List[Property], summary="List rentable properties")
def list_properties(properties: PropertyService = Depends(get_property_service)):
     """Properties marked available and not occupied by a live rental."""
     return properties.list_available()


@router.post("", status_code=status.HTTP_201_CREATED, summary="List a new property")
def create_property(
     body: PropertyCreate,
     identity: Identity = Depends(landlord_only),
     properties: PropertyService = Depends(get_property_service),
):
     """
     Create a property owned by the calling landlord.

     - **rent**: Monthly rent, must be positive
     - **start_date** / **end_date**: Offer window, at least 2 months long
     """
     prop = properties.create_property(identity, body)
     return {"success": True, "message": "Property created successfully", "property": prop}


@router.get("/check-availability", summary="Can this property be listed again?")
def check_availability(
     property_id: str = Query(..., min_length=1),
     identity: Identity = Depends(landlord_only),
     properties: PropertyService = Depends(get_property_service),
):
     result = properties.check_availability(identity, property_id)
     return {"success": True, **result}


@router.get("/{property_id}", summary="Get one property")
def get_property(
     property_id: str,
     identity: Identity = Depends(verify_token),
     properties: PropertyService = Depends(get_property_service),
):
     return {"success": True, "property": properties.get_property(property_id)}


@router.put("/{property_id}", summary="Update a property")
def update_property(
     property_id: str,
     body: PropertyUpdate,
     identity: Identity = Depends(landlord_only),
     properties: PropertyService = Depends(get_property_service),
):
     prop = properties.update_property(identity, property_id, body)
     return {"success": True, "message": "Property updated successfully", "property": prop}


@router.post("/{property_id}/list-again", summary="Re-list a property")
def list_again(
     property_id: str,
     body: Optional[ListAgainRequest] = None,
     identity: Identity = Depends(landlord_only),
     lifecycle: RentalLifecycleService = Depends(get_lifecycle_service),
):
     """
     Put the property back on the market once its last tenancy has ended.
     The new two-month window starts at **previous_end_date** when given.
     """
     previous_end_date = body.previous_end_date if body else None
     prop = lifecycle.list_property_again(identity, property_id, previous_end_date)
     return {"success": True, "message": "Property listed again successfully", "property": prop}
