# models/__init__.py
from .base import Base
from .user import User
from .property import Property
from .rental import Rental
from .rental_termination import RentalTermination
from .rental_renewal import RentalRenewal
from .payment import Payment

__all__ = [
     "Base",
     "User",
     "Property",
     "Rental",
     "RentalTermination",
     "RentalRenewal",
     "Payment",
]
