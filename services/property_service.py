# services/property_service.py
"""
Property Service - listing, editing and browsing properties.

Rentability is always decided by the availability resolver; the stored
``available`` flag only records the landlord's intent to rent.
"""
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable, List, Optional

from schemas.user import Identity, UserRole
from schemas.property import Property, PropertyCreate, PropertyUpdate
from services.availability import find_blocking_rental, describe_block, is_blocked
from services.exceptions import (
     AuthorizationError,
     NotFoundError,
     StateConflictError,
     ValidationError,
)
from services.record_store import Collection, RecordStore, find_by_id
from utils.dates import add_months

logger = logging.getLogger(__name__)


MIN_LISTING_MONTHS = 2


def _validate_window(
     start_date: Optional[date],
     end_date: Optional[date],
     today: date,
     check_past: bool = True,
) -> None:
     """Offer window rules shared by create and update."""
     if check_past and start_date is not None and start_date < today:
          raise ValidationError("Start date cannot be in the past")
     if start_date is not None and end_date is not None:
          if end_date <= start_date:
               raise ValidationError("End date must be after start date")
          if end_date < add_months(start_date, MIN_LISTING_MONTHS):
               raise ValidationError(
                    f"Property must be available for at least {MIN_LISTING_MONTHS} months"
               )


class PropertyService:
     """Service class for property-related business logic."""

     def __init__(self, store: RecordStore, clock: Callable[[], date] = date.today):
          self.store = store
          self.clock = clock

     def create_property(self, identity: Identity, payload: PropertyCreate) -> Property:
          """
          List a new property owned by the calling landlord.

          Raises:
               AuthorizationError: Caller is not a landlord
               ValidationError: Rent or offer window is invalid
          """
          if identity.role != UserRole.LANDLORD:
               raise AuthorizationError("Only landlords can create properties")
          if payload.rent <= 0:
               raise ValidationError("Rent must be greater than zero")
          _validate_window(payload.start_date, payload.end_date, self.clock())

          with self.store.unit_of_work():
               properties = self.store.read_all(Collection.PROPERTIES)
               prop = Property(
                    id=self.store.generate_id("p"),
                    owner_id=identity.user_id,
                    address=payload.address.strip(),
                    rent=payload.rent,
                    available=True,
                    description=payload.description,
                    start_date=payload.start_date,
                    end_date=payload.end_date,
                    created_at=datetime.now(timezone.utc),
               )
               properties.append(prop)
               self.store.write_all(Collection.PROPERTIES, properties)

          logger.info("Property %s created by landlord %s", prop.id, identity.user_id)
          return prop

     def update_property(self, identity: Identity, property_id: str, payload: PropertyUpdate) -> Property:
          """
          Change the fields present in ``payload``.

          Marking a property available again is refused while a live rental
          still occupies it.
          """
          if identity.role != UserRole.LANDLORD:
               raise AuthorizationError("Only landlords can update properties")

          changes = payload.model_dump(exclude_unset=True)
          if not changes:
               raise ValidationError("No fields to update")

          with self.store.unit_of_work():
               properties = self.store.read_all(Collection.PROPERTIES)
               prop = find_by_id(properties, property_id)
               if prop is None:
                    raise NotFoundError("Property not found")
               if prop.owner_id != identity.user_id:
                    raise AuthorizationError("You don't own this property")

               today = self.clock()
               if changes.get("available") and not prop.available:
                    rentals = self.store.read_all(Collection.RENTALS)
                    blocking = find_blocking_rental(prop.id, rentals, today)
                    if blocking is not None:
                         raise StateConflictError(
                              f"Cannot mark property as available. {describe_block(blocking)}."
                         )

               if "rent" in changes and (changes["rent"] is None or Decimal(changes["rent"]) <= 0):
                    raise ValidationError("Rent must be greater than zero")
               if "address" in changes and not (changes["address"] or "").strip():
                    raise ValidationError("Address cannot be empty")

               if "start_date" in changes or "end_date" in changes:
                    start = changes.get("start_date", prop.start_date)
                    end = changes.get("end_date", prop.end_date)
                    # Only a newly chosen start date has to lie in the future
                    _validate_window(start, end, today, check_past="start_date" in changes)

               for field, value in changes.items():
                    if field == "available" and value is None:
                         continue
                    setattr(prop, field, value)
               self.store.write_all(Collection.PROPERTIES, properties)

          logger.info("Property %s updated (%s)", prop.id, ", ".join(sorted(changes)))
          return prop

     def check_availability(self, identity: Identity, property_id: str) -> dict:
          """
          Tell a landlord whether their property can be put back on the market.
          """
          if identity.role != UserRole.LANDLORD:
               raise AuthorizationError("Only landlords can check availability")
          data = self.store.snapshot(Collection.PROPERTIES, Collection.RENTALS)
          prop = find_by_id(data[Collection.PROPERTIES], property_id)
          if prop is None:
               raise NotFoundError("Property not found")
          if prop.owner_id != identity.user_id:
               raise AuthorizationError("You don't own this property")

          blocking = find_blocking_rental(prop.id, data[Collection.RENTALS], self.clock())
          return {
               "property_id": prop.id,
               "can_list": blocking is None,
               "active_rental_end_date": blocking.end_date if blocking else None,
               "message": describe_block(blocking),
          }

     def list_available(self) -> List[Property]:
          """Properties a tenant could request today, newest first."""
          data = self.store.snapshot(Collection.PROPERTIES, Collection.RENTALS)
          rentals = data[Collection.RENTALS]
          today = self.clock()
          rentable = [
               p for p in data[Collection.PROPERTIES]
               if p.available and not is_blocked(p.id, rentals, today)
          ]
          rentable.sort(key=lambda p: p.created_at.timestamp() if p.created_at else 0.0, reverse=True)
          return rentable

     def get_property(self, property_id: str) -> Property:
          prop = find_by_id(self.store.read_all(Collection.PROPERTIES), property_id)
          if prop is None:
               raise NotFoundError("Property not found")
          return prop
