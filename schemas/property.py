# schemas/property.py
"""
Pydantic schemas for properties.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class Property(BaseModel):
     """
     Property record. ``available`` is an advisory cache; the availability
     resolver decides whether the property is actually rentable.
     """
     id: str
     owner_id: str
     address: str
     rent: Decimal
     available: bool = True
     description: Optional[str] = None
     start_date: Optional[date] = None
     end_date: Optional[date] = None
     most_recent_rental_end_date: Optional[date] = None
     created_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


class PropertyCreate(BaseModel):
     """Schema for listing a new property."""
     address: str = Field(..., min_length=1, max_length=500)
     rent: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, description="Monthly rent")
     description: Optional[str] = None
     start_date: date = Field(..., description="First day the property can be rented")
     end_date: date = Field(..., description="End of the offered window (at least 2 months after start)")

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "address": "House 12, Road 5, Dhanmondi, Dhaka",
                    "rent": 18000,
                    "description": "Two bedroom flat",
                    "start_date": "2026-11-01",
                    "end_date": "2027-11-01"
               }
          }
     )


class PropertyUpdate(BaseModel):
     """Schema for editing a property. Only provided fields are changed."""
     available: Optional[bool] = None
     address: Optional[str] = Field(None, min_length=1, max_length=500)
     rent: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
     description: Optional[str] = None
     start_date: Optional[date] = None
     end_date: Optional[date] = None


class ListAgainRequest(BaseModel):
     previous_end_date: Optional[date] = Field(
          None, description="Overrides the start of the new offer window"
     )
