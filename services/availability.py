# services/availability.py
"""
Availability Resolver - decides whether a property can be rented right now.

A property is blocked by any rental in a live status (active,
renewal_pending, terminating) whose end date is unset or after ``today``.
The ``available`` flag on the property is only a cache of this answer.
"""
import logging
from datetime import date
from typing import Iterable, List, Optional

from schemas.rental import Rental, RentalStatus

logger = logging.getLogger(__name__)


def live_rentals_for_property(property_id: str, rentals: Iterable[Rental], today: date) -> List[Rental]:
     """Rentals currently occupying ``property_id``, soonest end date first."""
     blocking = [r for r in rentals if r.property_id == property_id and r.is_live_on(today)]
     # Open-ended occupancy sorts last; id keeps the order deterministic
     blocking.sort(key=lambda r: (r.end_date is None, r.end_date or date.max, r.id))
     return blocking


def find_blocking_rental(
     property_id: str,
     rentals: Iterable[Rental],
     today: date,
     exclude_rental_id: Optional[str] = None,
) -> Optional[Rental]:
     """
     Return the rental that keeps ``property_id`` occupied on ``today``, or None.

     More than one blocking rental means the single-live-rental invariant was
     broken somewhere; that is logged and the soonest-ending rental is returned.
     """
     blocking = [
          r for r in live_rentals_for_property(property_id, rentals, today)
          if r.id != exclude_rental_id
     ]
     if not blocking:
          return None
     if len(blocking) > 1:
          logger.warning(
               "Property %s has %d live rentals (%s); expected at most one",
               property_id,
               len(blocking),
               ", ".join(r.id for r in blocking),
          )
     return blocking[0]


def is_blocked(property_id: str, rentals: Iterable[Rental], today: date) -> bool:
     return find_blocking_rental(property_id, rentals, today) is not None


def describe_block(rental: Optional[Rental]) -> str:
     """Human readable reason used in API messages."""
     if rental is None:
          return "Property can be listed for rent"
     until = rental.end_date.isoformat() if rental.end_date else "indefinite"
     return f"Property has an active rental until {until}"


def occupancy_history(property_id: str, rentals: Iterable[Rental]) -> List[Rental]:
     """Rentals that occupied ``property_id`` at some point, most recent first."""
     history = [
          r for r in rentals
          if r.property_id == property_id
          and (r.status.is_live or r.status == RentalStatus.COMPLETED)
     ]
     history.sort(key=lambda r: r.end_date or r.start_date, reverse=True)
     return history
