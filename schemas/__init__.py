# schemas/__init__.py
from .user import User, UserRole, Identity, RegisterRequest, TokenRequest
from .property import Property, PropertyCreate, PropertyUpdate, ListAgainRequest
from .rental import (
     Rental,
     RentalStatus,
     RentalTermination,
     RentalRenewal,
     RequestStatus,
     RENTAL_TRANSITIONS,
     RentalRequestCreate,
     RentalDecision,
     TerminationCreate,
     TerminationDecision,
     RenewalCreate,
     RenewalDecision,
)
from .payment import Payment, PaymentStatus, PaymentCreate

__all__ = [
     "User",
     "UserRole",
     "Identity",
     "RegisterRequest",
     "TokenRequest",
     "Property",
     "PropertyCreate",
     "PropertyUpdate",
     "ListAgainRequest",
     "Rental",
     "RentalStatus",
     "RentalTermination",
     "RentalRenewal",
     "RequestStatus",
     "RENTAL_TRANSITIONS",
     "RentalRequestCreate",
     "RentalDecision",
     "TerminationCreate",
     "TerminationDecision",
     "RenewalCreate",
     "RenewalDecision",
     "Payment",
     "PaymentStatus",
     "PaymentCreate",
]
