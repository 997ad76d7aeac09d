# schemas/rental.py
"""
Pydantic schemas for rentals and their termination / renewal sub-requests.
"""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional
from pydantic import BaseModel, Field, ConfigDict


class RentalStatus(str, Enum):
     """
     Rental lifecycle states.

     ``active``, ``renewal_pending`` and ``terminating`` are the live states:
     the tenant occupies the property while the rental's end date is unset
     or still in the future. ``completed`` and ``cancelled`` are terminal.
     """
     PENDING = "pending"
     ACTIVE = "active"
     RENEWAL_PENDING = "renewal_pending"
     TERMINATING = "terminating"
     COMPLETED = "completed"
     CANCELLED = "cancelled"

     @property
     def is_live(self) -> bool:
          return self in _LIVE_STATUSES

     @property
     def is_terminal(self) -> bool:
          return not RENTAL_TRANSITIONS[self]

     def can_transition_to(self, target: "RentalStatus") -> bool:
          return target in RENTAL_TRANSITIONS[self]


_LIVE_STATUSES = frozenset({
     RentalStatus.ACTIVE,
     RentalStatus.RENEWAL_PENDING,
     RentalStatus.TERMINATING,
})

# Every edge of the lifecycle; anything not listed here is rejected.
RENTAL_TRANSITIONS = {
     RentalStatus.PENDING: frozenset({RentalStatus.ACTIVE, RentalStatus.CANCELLED}),
     RentalStatus.ACTIVE: frozenset({RentalStatus.TERMINATING, RentalStatus.RENEWAL_PENDING}),
     RentalStatus.TERMINATING: frozenset({RentalStatus.COMPLETED, RentalStatus.ACTIVE}),
     RentalStatus.RENEWAL_PENDING: frozenset({RentalStatus.ACTIVE}),
     RentalStatus.COMPLETED: frozenset(),
     RentalStatus.CANCELLED: frozenset(),
}


class RequestStatus(str, Enum):
     """Status of a termination or renewal request."""
     PENDING = "pending"
     APPROVED = "approved"
     REJECTED = "rejected"


class Rental(BaseModel):
     """Rental agreement; the aggregate root of the lifecycle."""
     id: str
     tenant_id: str
     landlord_id: str
     property_id: str
     start_date: date
     end_date: Optional[date] = None
     status: RentalStatus
     monthly_rent: Decimal
     created_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)

     def is_live_on(self, day: date) -> bool:
          """True when this rental occupies its property on ``day``."""
          return self.status.is_live and (self.end_date is None or self.end_date > day)


class RentalTermination(BaseModel):
     id: str
     rental_id: str
     tenant_id: str
     landlord_id: str
     requested_end_date: date
     previous_end_date: Optional[date] = None
     reason: Optional[str] = None
     status: RequestStatus = RequestStatus.PENDING
     created_at: Optional[datetime] = None
     updated_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


class RentalRenewal(BaseModel):
     id: str
     rental_id: str
     tenant_id: str
     landlord_id: str
     renewal_duration: int
     requested_start_date: date
     status: RequestStatus = RequestStatus.PENDING
     created_at: Optional[datetime] = None
     updated_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class RentalRequestCreate(BaseModel):
     """Tenant asks to rent a property."""
     property_id: str = Field(..., min_length=1)
     rental_duration: Optional[int] = Field(
          None, ge=1, description="Months; defaults to the landlord's offered window or 12"
     )

     model_config = ConfigDict(
          json_schema_extra={
               "example": {"property_id": "p_3f9c2a", "rental_duration": 12}
          }
     )


class RentalDecision(BaseModel):
     rental_id: str = Field(..., min_length=1)
     action: Literal["approve", "decline"]


class TerminationCreate(BaseModel):
     rental_id: str = Field(..., min_length=1)
     requested_end_date: date
     reason: Optional[str] = Field(None, max_length=2000)


class TerminationDecision(BaseModel):
     termination_id: str = Field(..., min_length=1)
     approve: bool


class RenewalCreate(BaseModel):
     rental_id: str = Field(..., min_length=1)
     # Range is enforced by the lifecycle service so the message stays specific.
     renewal_duration: int = Field(..., description="Months, between 1 and 24")


class RenewalDecision(BaseModel):
     renewal_id: str = Field(..., min_length=1)
     approve: bool
