# services/rental_lifecycle.py
"""
Rental Lifecycle Service - every state change of a rental goes through here.

State machine (see ``schemas.rental.RENTAL_TRANSITIONS``):

     pending --approve--> active --terminate-request--> terminating --approve--> completed
     pending --decline--> cancelled                     terminating --reject----> active
     active --renew-request--> renewal_pending --approve--> active (dates extended)
                               renewal_pending --reject---> active (unchanged)

Each operation reads the collections it needs, validates, and only then
writes, all inside one ``unit_of_work`` of the record store.

Ownership always comes from ``Property.owner_id``. The ``landlord_id`` kept
on rentals, terminations and renewals is a cache that is re-derived and
overwritten whenever one of those records is written.
"""
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Callable, List, Optional

from schemas.user import Identity, UserRole
from schemas.property import Property
from schemas.rental import (
     Rental,
     RentalStatus,
     RentalTermination,
     RentalRenewal,
     RequestStatus,
)
from services.availability import find_blocking_rental, describe_block, occupancy_history
from services.exceptions import (
     AuthorizationError,
     NotFoundError,
     StateConflictError,
     ValidationError,
)
from services.record_store import Collection, RecordStore, find_by_id
from utils.dates import add_months, add_years, month_span

logger = logging.getLogger(__name__)


MAX_OPEN_RENTALS_PER_TENANT = 20
DEFAULT_RENTAL_MONTHS = 12
MAX_RENTAL_MONTHS = 24
MIN_TERMINATION_NOTICE_MONTHS = 2
MIN_RENEWAL_MONTHS = 1
MAX_RENEWAL_MONTHS = 24
RELISTING_WINDOW_MONTHS = 2


def minimum_rental_duration(prop: Property) -> int:
     """
     Shortest rental the landlord accepts, in months.

     A property with an offered window requires at least the window's month
     span; otherwise the default of 12 months applies.
     """
     if prop.start_date and prop.end_date:
          return month_span(prop.start_date, prop.end_date)
     return DEFAULT_RENTAL_MONTHS


def _utcnow() -> datetime:
     return datetime.now(timezone.utc)


def _require_role(identity: Identity, role: UserRole, message: str) -> None:
     if identity.role != role:
          raise AuthorizationError(message)


def _transition(rental: Rental, target: RentalStatus) -> None:
     """Move ``rental`` to ``target`` if the state machine has that edge."""
     if not rental.status.can_transition_to(target):
          raise StateConflictError(
               f"Rental {rental.id} cannot move from '{rental.status.value}' to '{target.value}'"
          )
     logger.info("Rental %s: %s -> %s", rental.id, rental.status.value, target.value)
     rental.status = target


class RentalLifecycleService:
     """Owns all transitions of Rental, RentalTermination and RentalRenewal."""

     def __init__(
          self,
          store: RecordStore,
          clock: Callable[[], date] = date.today,
          restore_end_date_on_reject: bool = False,
     ):
          """
          Args:
               store: Record store holding all collections
               clock: Returns today's date; injected so tests can pin time
               restore_end_date_on_reject: When True, rejecting a termination
                    puts back the end date the rental had before the request.
                    By default the requested date stays on the rental.
          """
          self.store = store
          self.clock = clock
          self.restore_end_date_on_reject = restore_end_date_on_reject

     # ------------------------------------------------------------------
     # Lookups shared by the operations
     # ------------------------------------------------------------------

     @staticmethod
     def _get_rental(rentals: List[Rental], rental_id: str) -> Rental:
          rental = find_by_id(rentals, rental_id)
          if rental is None:
               raise NotFoundError("Rental not found")
          return rental

     @staticmethod
     def _get_property(properties: List[Property], property_id: str) -> Property:
          prop = find_by_id(properties, property_id)
          if prop is None:
               raise NotFoundError("Property not found")
          return prop

     @staticmethod
     def _require_owner(identity: Identity, prop: Property) -> None:
          if prop.owner_id != identity.user_id:
               raise AuthorizationError("You don't own this property")

     @staticmethod
     def _require_tenant_of(identity: Identity, rental: Rental) -> None:
          if rental.tenant_id != identity.user_id:
               raise AuthorizationError("You don't own this rental")

     def _require_sole_occupant(self, rental: Rental, rentals: List[Rental], action: str) -> None:
          """Refuse to make ``rental`` live while another rental holds its property."""
          blocking = find_blocking_rental(
               rental.property_id, rentals, self.clock(), exclude_rental_id=rental.id
          )
          if blocking is not None:
               raise StateConflictError(
                    f"Cannot {action}: rental {blocking.id} already occupies this property"
               )

     # ------------------------------------------------------------------
     # Request / approve / decline
     # ------------------------------------------------------------------

     def request_rental(
          self,
          identity: Identity,
          property_id: str,
          rental_duration: Optional[int] = None,
     ) -> Rental:
          """
          Create a pending rental request for a property.

          Args:
               identity: Caller; must be a tenant
               property_id: Property to rent
               rental_duration: Months; defaults to the landlord's minimum

          Returns:
               The new Rental in status ``pending``

          Raises:
               NotFoundError: Property does not exist
               StateConflictError: Property occupied or delisted, duplicate
                    pending request, or too many open rentals
               ValidationError: Duration below the landlord's minimum or
                    above 24 months
          """
          _require_role(identity, UserRole.TENANT, "Only tenants can request rentals")

          with self.store.unit_of_work():
               properties = self.store.read_all(Collection.PROPERTIES)
               rentals = self.store.read_all(Collection.RENTALS)
               today = self.clock()

               prop = self._get_property(properties, property_id)

               if not prop.available:
                    raise StateConflictError("Property is not available")
               blocking = find_blocking_rental(prop.id, rentals, today)
               if blocking is not None:
                    raise StateConflictError(f"Property is not available. {describe_block(blocking)}")

               duplicate = any(
                    r.tenant_id == identity.user_id
                    and r.property_id == prop.id
                    and r.status == RentalStatus.PENDING
                    for r in rentals
               )
               if duplicate:
                    raise StateConflictError("You already have a pending request for this property")

               open_rentals = sum(
                    1 for r in rentals
                    if r.tenant_id == identity.user_id
                    and (r.status.is_live or r.status == RentalStatus.PENDING)
               )
               if open_rentals >= MAX_OPEN_RENTALS_PER_TENANT:
                    raise StateConflictError(
                         f"You can only have up to {MAX_OPEN_RENTALS_PER_TENANT} "
                         "active or pending rental requests at a time."
                    )

               minimum = minimum_rental_duration(prop)
               duration = rental_duration if rental_duration is not None else minimum
               if duration < 1:
                    raise ValidationError("Rental duration must be at least 1 month")
               if duration < minimum:
                    raise ValidationError(
                         f"Rental duration cannot be less than {minimum} months (landlord's default)"
                    )
               if duration > MAX_RENTAL_MONTHS:
                    raise ValidationError(
                         f"Rental duration cannot exceed {MAX_RENTAL_MONTHS} months (2 years)"
                    )

               start_date = prop.start_date if prop.start_date and prop.start_date >= today else today

               rental = Rental(
                    id=self.store.generate_id("r"),
                    tenant_id=identity.user_id,
                    landlord_id=prop.owner_id,
                    property_id=prop.id,
                    start_date=start_date,
                    end_date=add_months(start_date, duration),
                    status=RentalStatus.PENDING,
                    monthly_rent=prop.rent,
                    created_at=_utcnow(),
               )
               rentals.append(rental)
               self.store.write_all(Collection.RENTALS, rentals)

          logger.info(
               "Rental %s requested by tenant %s for property %s (%d months)",
               rental.id, identity.user_id, prop.id, duration,
          )
          return rental

     def decide_rental(self, identity: Identity, rental_id: str, action: str) -> Rental:
          """
          Approve or decline a pending rental request.

          Approving marks the property unavailable and gives an open-ended
          rental a default one-year term. A rental can be decided once; a
          second decision fails with StateConflictError.
          """
          _require_role(identity, UserRole.LANDLORD, "Only landlords can approve rentals")
          if action not in ("approve", "decline"):
               raise ValidationError("Action must be 'approve' or 'decline'")

          with self.store.unit_of_work():
               rentals = self.store.read_all(Collection.RENTALS)
               properties = self.store.read_all(Collection.PROPERTIES)

               rental = self._get_rental(rentals, rental_id)
               prop = self._get_property(properties, rental.property_id)
               self._require_owner(identity, prop)

               if rental.status != RentalStatus.PENDING:
                    raise StateConflictError(
                         f"Rental is not pending (current status: {rental.status.value})"
                    )

               rental.landlord_id = prop.owner_id

               if action == "approve":
                    # Check-and-set: nobody else may occupy the property at approval time
                    self._require_sole_occupant(rental, rentals, "approve rental")
                    _transition(rental, RentalStatus.ACTIVE)
                    if rental.end_date is None:
                         rental.end_date = add_years(rental.start_date, 1)
                    prop.available = False
                    self.store.write_all(Collection.RENTALS, rentals)
                    self.store.write_all(Collection.PROPERTIES, properties)
               else:
                    _transition(rental, RentalStatus.CANCELLED)
                    self.store.write_all(Collection.RENTALS, rentals)

          return rental

     # ------------------------------------------------------------------
     # Termination
     # ------------------------------------------------------------------

     def request_termination(
          self,
          identity: Identity,
          rental_id: str,
          requested_end_date: date,
          reason: Optional[str] = None,
     ) -> RentalTermination:
          """
          Ask to end an active rental early.

          The requested date must give at least two months' notice and fall
          within the current rental period. The rental moves to ``terminating``
          and its end date is overwritten right away, so every reader sees the
          pending end date before the landlord decides. The previous end date
          is kept on the termination record.
          """
          _require_role(identity, UserRole.TENANT, "Only tenants can request termination")

          with self.store.unit_of_work():
               rentals = self.store.read_all(Collection.RENTALS)
               terminations = self.store.read_all(Collection.TERMINATIONS)
               properties = self.store.read_all(Collection.PROPERTIES)

               rental = self._get_rental(rentals, rental_id)
               self._require_tenant_of(identity, rental)

               if rental.status != RentalStatus.ACTIVE:
                    raise StateConflictError(
                         f"Only active rentals can be terminated (current status: {rental.status.value})"
                    )
               if any(t.rental_id == rental.id and t.status == RequestStatus.PENDING for t in terminations):
                    raise StateConflictError("A termination request is already pending for this rental")

               earliest = add_months(self.clock(), MIN_TERMINATION_NOTICE_MONTHS)
               if requested_end_date < earliest:
                    raise ValidationError(
                         f"Termination date must be at least {MIN_TERMINATION_NOTICE_MONTHS} months from today"
                    )
               if requested_end_date < rental.start_date:
                    raise ValidationError("Termination date cannot be before the rental start date")
               if rental.end_date is not None and requested_end_date > rental.end_date:
                    raise ValidationError(
                         f"Termination date cannot be after the current end date ({rental.end_date.isoformat()})"
                    )
               # The end date moves forward right away, so the property must still be ours
               self._require_sole_occupant(rental, rentals, "terminate rental")

               prop = find_by_id(properties, rental.property_id)
               landlord_id = prop.owner_id if prop else rental.landlord_id
               now = _utcnow()

               termination = RentalTermination(
                    id=self.store.generate_id("term"),
                    rental_id=rental.id,
                    tenant_id=identity.user_id,
                    landlord_id=landlord_id,
                    requested_end_date=requested_end_date,
                    previous_end_date=rental.end_date,
                    reason=reason or "",
                    status=RequestStatus.PENDING,
                    created_at=now,
                    updated_at=now,
               )

               _transition(rental, RentalStatus.TERMINATING)
               rental.end_date = requested_end_date
               rental.landlord_id = landlord_id

               terminations.append(termination)
               self.store.write_all(Collection.TERMINATIONS, terminations)
               self.store.write_all(Collection.RENTALS, rentals)

          return termination

     def decide_termination(self, identity: Identity, termination_id: str, approve: bool) -> RentalTermination:
          """
          Approve or reject a pending termination.

          Approval completes the rental on the requested date; the property is
          not relisted automatically. Rejection returns the rental to ``active``.
          """
          _require_role(identity, UserRole.LANDLORD, "Only landlords can approve terminations")

          with self.store.unit_of_work():
               terminations = self.store.read_all(Collection.TERMINATIONS)
               rentals = self.store.read_all(Collection.RENTALS)
               properties = self.store.read_all(Collection.PROPERTIES)

               termination = find_by_id(terminations, termination_id)
               if termination is None:
                    raise NotFoundError("Termination request not found")
               rental = self._get_rental(rentals, termination.rental_id)
               prop = self._get_property(properties, rental.property_id)
               self._require_owner(identity, prop)

               if termination.status != RequestStatus.PENDING:
                    raise StateConflictError(
                         f"This termination request has already been processed (status: {termination.status.value})"
                    )
               if rental.status != RentalStatus.TERMINATING:
                    raise StateConflictError(
                         f"Rental is not awaiting termination (current status: {rental.status.value})"
                    )

               termination.landlord_id = prop.owner_id
               rental.landlord_id = prop.owner_id
               termination.updated_at = _utcnow()

               if approve:
                    termination.status = RequestStatus.APPROVED
                    _transition(rental, RentalStatus.COMPLETED)
                    rental.end_date = termination.requested_end_date
               else:
                    termination.status = RequestStatus.REJECTED
                    _transition(rental, RentalStatus.ACTIVE)
                    if self.restore_end_date_on_reject:
                         rental.end_date = termination.previous_end_date

               self.store.write_all(Collection.TERMINATIONS, terminations)
               self.store.write_all(Collection.RENTALS, rentals)

          return termination

     # ------------------------------------------------------------------
     # Renewal
     # ------------------------------------------------------------------

     def request_renewal(self, identity: Identity, rental_id: str, renewal_duration: int) -> RentalRenewal:
          """
          Ask to extend an active rental by 1-24 months.

          The renewal would start the day after the current end date (or after
          the start date of an open-ended rental). Rental dates are untouched
          until the landlord approves.
          """
          _require_role(identity, UserRole.TENANT, "Only tenants can request renewal")
          if not MIN_RENEWAL_MONTHS <= renewal_duration <= MAX_RENEWAL_MONTHS:
               raise ValidationError(
                    f"Renewal duration must be between {MIN_RENEWAL_MONTHS} and {MAX_RENEWAL_MONTHS} months"
               )

          with self.store.unit_of_work():
               rentals = self.store.read_all(Collection.RENTALS)
               renewals = self.store.read_all(Collection.RENEWALS)
               properties = self.store.read_all(Collection.PROPERTIES)

               rental = self._get_rental(rentals, rental_id)
               self._require_tenant_of(identity, rental)

               if rental.status != RentalStatus.ACTIVE:
                    raise StateConflictError(
                         f"Only active rentals can be renewed (current status: {rental.status.value})"
                    )
               if any(r.rental_id == rental.id and r.status == RequestStatus.PENDING for r in renewals):
                    raise StateConflictError("A renewal request is already pending for this rental")
               self._require_sole_occupant(rental, rentals, "renew rental")

               prop = find_by_id(properties, rental.property_id)
               landlord_id = prop.owner_id if prop else rental.landlord_id
               current_end = rental.end_date or rental.start_date
               now = _utcnow()

               renewal = RentalRenewal(
                    id=self.store.generate_id("renew"),
                    rental_id=rental.id,
                    tenant_id=identity.user_id,
                    landlord_id=landlord_id,
                    renewal_duration=renewal_duration,
                    requested_start_date=current_end + timedelta(days=1),
                    status=RequestStatus.PENDING,
                    created_at=now,
                    updated_at=now,
               )

               _transition(rental, RentalStatus.RENEWAL_PENDING)
               rental.landlord_id = landlord_id

               renewals.append(renewal)
               self.store.write_all(Collection.RENEWALS, renewals)
               self.store.write_all(Collection.RENTALS, rentals)

          return renewal

     def decide_renewal(self, identity: Identity, renewal_id: str, approve: bool) -> RentalRenewal:
          """
          Approve or reject a pending renewal.

          Approval moves the rental period to the renewal's start date and
          extends it by the renewal duration; rejection leaves dates alone.
          """
          _require_role(identity, UserRole.LANDLORD, "Only landlords can approve renewals")

          with self.store.unit_of_work():
               renewals = self.store.read_all(Collection.RENEWALS)
               rentals = self.store.read_all(Collection.RENTALS)
               properties = self.store.read_all(Collection.PROPERTIES)

               renewal = find_by_id(renewals, renewal_id)
               if renewal is None:
                    raise NotFoundError("Renewal request not found")
               rental = self._get_rental(rentals, renewal.rental_id)
               prop = self._get_property(properties, rental.property_id)
               self._require_owner(identity, prop)

               if renewal.status != RequestStatus.PENDING:
                    raise StateConflictError(
                         f"This renewal request has already been processed (status: {renewal.status.value})"
                    )
               if rental.status != RentalStatus.RENEWAL_PENDING:
                    raise StateConflictError(
                         f"Rental is not awaiting renewal (current status: {rental.status.value})"
                    )

               if approve:
                    # The property may have been let again after this rental lapsed
                    self._require_sole_occupant(rental, rentals, "renew rental")

               renewal.landlord_id = prop.owner_id
               rental.landlord_id = prop.owner_id
               renewal.updated_at = _utcnow()

               _transition(rental, RentalStatus.ACTIVE)
               if approve:
                    renewal.status = RequestStatus.APPROVED
                    rental.start_date = renewal.requested_start_date
                    rental.end_date = add_months(renewal.requested_start_date, renewal.renewal_duration)
               else:
                    renewal.status = RequestStatus.REJECTED

               self.store.write_all(Collection.RENEWALS, renewals)
               self.store.write_all(Collection.RENTALS, rentals)

          return renewal

     # ------------------------------------------------------------------
     # Re-listing
     # ------------------------------------------------------------------

     def list_property_again(
          self,
          identity: Identity,
          property_id: str,
          previous_end_date: Optional[date] = None,
     ) -> Property:
          """
          Put a property back on the market after its last tenancy ended.

          The new offer window starts at ``previous_end_date`` when given,
          otherwise at the most recent tenancy's end date, otherwise one year
          after that tenancy started, otherwise today. It lasts two months.

          Raises:
               StateConflictError: A live rental still occupies the property
          """
          _require_role(identity, UserRole.LANDLORD, "Only landlords can list properties")

          with self.store.unit_of_work():
               properties = self.store.read_all(Collection.PROPERTIES)
               rentals = self.store.read_all(Collection.RENTALS)
               today = self.clock()

               prop = self._get_property(properties, property_id)
               self._require_owner(identity, prop)

               blocking = find_blocking_rental(prop.id, rentals, today)
               if blocking is not None:
                    raise StateConflictError(
                         f"Cannot list property. {describe_block(blocking)}."
                    )

               history = occupancy_history(prop.id, rentals)
               last_ended = next((r for r in history if r.end_date), None)

               if previous_end_date is not None:
                    start = previous_end_date
               elif last_ended is not None:
                    start = last_ended.end_date
               elif history:
                    start = add_years(history[0].start_date, 1)
               else:
                    start = today

               prop.available = True
               prop.start_date = start
               prop.end_date = add_months(start, RELISTING_WINDOW_MONTHS)
               if last_ended is not None:
                    prop.most_recent_rental_end_date = last_ended.end_date

               self.store.write_all(Collection.PROPERTIES, properties)

          logger.info("Property %s listed again from %s to %s", prop.id, prop.start_date, prop.end_date)
          return prop

     # ------------------------------------------------------------------
     # Read side
     # ------------------------------------------------------------------

     def _check_can_view(self, identity: Identity, rental: Rental, properties: List[Property]) -> None:
          if identity.role == UserRole.TENANT:
               self._require_tenant_of(identity, rental)
          elif identity.role == UserRole.LANDLORD:
               self._require_owner(identity, self._get_property(properties, rental.property_id))

     def list_terminations(self, identity: Identity, rental_id: str) -> List[RentalTermination]:
          """All termination requests for one rental."""
          data = self.store.snapshot(Collection.RENTALS, Collection.PROPERTIES, Collection.TERMINATIONS)
          rental = self._get_rental(data[Collection.RENTALS], rental_id)
          self._check_can_view(identity, rental, data[Collection.PROPERTIES])
          return [t for t in data[Collection.TERMINATIONS] if t.rental_id == rental_id]

     def list_renewals(self, identity: Identity, rental_id: str) -> List[RentalRenewal]:
          """All renewal requests for one rental."""
          data = self.store.snapshot(Collection.RENTALS, Collection.PROPERTIES, Collection.RENEWALS)
          rental = self._get_rental(data[Collection.RENTALS], rental_id)
          self._check_can_view(identity, rental, data[Collection.PROPERTIES])
          return [r for r in data[Collection.RENEWALS] if r.rental_id == rental_id]

     def list_landlord_renewals(self, identity: Identity) -> List[dict]:
          """
          Renewal requests on the caller's properties, newest first, each with
          its rental, property and a short tenant summary.
          """
          _require_role(identity, UserRole.LANDLORD, "Only landlords can access this")
          data = self.store.snapshot(
               Collection.RENEWALS, Collection.RENTALS, Collection.PROPERTIES, Collection.USERS
          )
          return self._enrich_for_landlord(identity, data[Collection.RENEWALS], data)

     def list_landlord_terminations(self, identity: Identity) -> List[dict]:
          """Termination requests on the caller's properties, newest first."""
          _require_role(identity, UserRole.LANDLORD, "Only landlords can access this")
          data = self.store.snapshot(
               Collection.TERMINATIONS, Collection.RENTALS, Collection.PROPERTIES, Collection.USERS
          )
          return self._enrich_for_landlord(identity, data[Collection.TERMINATIONS], data)

     @staticmethod
     def _enrich_for_landlord(identity: Identity, requests: list, data: dict) -> List[dict]:
          enriched = []
          for request in requests:
               rental = find_by_id(data[Collection.RENTALS], request.rental_id)
               prop = find_by_id(data[Collection.PROPERTIES], rental.property_id) if rental else None
               tenant = find_by_id(data[Collection.USERS], request.tenant_id)
               # Ownership comes from the property, not the cached landlord_id
               if not (rental and prop and tenant) or prop.owner_id != identity.user_id:
                    continue
               enriched.append({
                    **request.model_dump(),
                    "landlord_id": prop.owner_id,
                    "rental": rental,
                    "property": prop,
                    "tenant": {"id": tenant.id, "name": tenant.name, "email": tenant.email},
               })
          enriched.sort(key=lambda e: e["created_at"].timestamp() if e["created_at"] else 0.0, reverse=True)
          return enriched
