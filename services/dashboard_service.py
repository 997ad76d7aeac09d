# services/dashboard_service.py
"""
Dashboard Service - read-only aggregations for the four roles.

Every dashboard is computed from one ``snapshot`` of the record store, so a
concurrent lifecycle operation is seen either completely or not at all.
The scoring helpers are plain functions of their inputs and ``today``.
"""
import logging
import math
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from schemas.user import Identity, UserRole
from schemas.property import Property
from schemas.rental import Rental, RentalStatus, RequestStatus
from schemas.payment import Payment, PaymentStatus
from services.availability import occupancy_history
from services.exceptions import AuthorizationError, NotFoundError
from services.record_store import Collection, RecordStore, find_by_id
from utils.dates import first_of_month, month_key

logger = logging.getLogger(__name__)


DEFAULT_MINISTRY_AREAS = ("Mirpur", "Gulshan", "Dhanmondi")

CREDIT_SCORE_BASE = 500
CREDIT_SCORE_MAX = 1000
CREDIT_TENURE_CAP = 200
CREDIT_CONSISTENCY_BONUS = 100
CREDIT_CONSISTENCY_MIN_PAYMENTS = 6


def _user_summary(user) -> Optional[dict]:
     if user is None:
          return None
     return {"id": user.id, "name": user.name, "email": user.email}


def _total_paid(payments: Iterable[Payment]) -> Decimal:
     return sum((p.amount for p in payments if p.status == PaymentStatus.PAID), Decimal("0"))


def on_time_rate(payments: Sequence[Payment]) -> float:
     """Percentage (0-100) of payments with status ``paid``; 0 without payments."""
     if not payments:
          return 0.0
     paid = sum(1 for p in payments if p.status == PaymentStatus.PAID)
     return paid / len(payments) * 100


def credit_score(rentals: Sequence[Rental], payments: Sequence[Payment], today: date) -> int:
     """
     Bank credit score on a 0-1000 scale.

     500 base, plus 7 points per percent of on-time payments, plus 10 points
     per month since the oldest active rental started (at most 200), plus 100
     for six or more payments. Rounded half up and capped at 1000.
     """
     score = CREDIT_SCORE_BASE + on_time_rate(payments) * 7

     active = [r for r in rentals if r.status == RentalStatus.ACTIVE]
     if active:
          oldest_start = min(r.start_date for r in active)
          months_active = max((today - oldest_start).days, 0) / 30
          score += min(months_active * 10, CREDIT_TENURE_CAP)

     if len(payments) >= CREDIT_CONSISTENCY_MIN_PAYMENTS:
          score += CREDIT_CONSISTENCY_BONUS

     return min(math.floor(score + 0.5), CREDIT_SCORE_MAX)


def rent_due(
     landlord_id: str,
     properties: Sequence[Property],
     rentals: Sequence[Rental],
     payments: Sequence[Payment],
     users: Sequence,
     today: date,
) -> List[dict]:
     """
     Live rentals on the landlord's properties with no payment for the
     current month, with days elapsed since the 1st. Nothing is due on the
     1st itself.
     """
     current_month = month_key(today)
     days_overdue = (today - first_of_month(today)).days
     if days_overdue <= 0:
          return []

     owned = {p.id for p in properties if p.owner_id == landlord_id}
     paid_rentals = {p.rental_id for p in payments if p.month == current_month}

     due = []
     for rental in rentals:
          if rental.property_id not in owned or not rental.is_live_on(today):
               continue
          if rental.id in paid_rentals:
               continue
          due.append({
               "rental": rental,
               "tenant": _user_summary(find_by_id(users, rental.tenant_id)),
               "amount": rental.monthly_rent,
               "month": current_month,
               "days_overdue": days_overdue,
               "payment_status": PaymentStatus.PENDING.value,
          })
     return due


def compliance_rate(rentals: Sequence[Rental], payments: Sequence[Payment], today: date) -> float:
     """
     Percentage of live rentals with a paid payment for the current month,
     rounded to two decimals; 0 when nothing is live.
     """
     live_ids = {r.id for r in rentals if r.is_live_on(today)}
     if not live_ids:
          return 0.0
     current_month = month_key(today)
     compliant = {
          p.rental_id for p in payments
          if p.rental_id in live_ids and p.month == current_month and p.status == PaymentStatus.PAID
     }
     return round(len(compliant) / len(live_ids) * 100, 2)


def rent_map(
     areas: Iterable[str],
     properties: Sequence[Property],
     rentals: Sequence[Rental],
     today: date,
) -> List[dict]:
     """Live rental count and average monthly rent per area, matched on the address."""
     by_id = {p.id: p for p in properties}
     live = [r for r in rentals if r.is_live_on(today)]
     result = []
     for area in areas:
          needle = area.lower()
          in_area = [
               r for r in live
               if r.property_id in by_id and needle in by_id[r.property_id].address.lower()
          ]
          average = Decimal("0")
          if in_area:
               average = (
                    sum((r.monthly_rent for r in in_area), Decimal("0")) / len(in_area)
               ).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
          result.append({"area": area, "average_rent": average, "active_rentals": len(in_area)})
     return result


class DashboardService:
     """Builds the tenant, landlord, bank and ministry dashboards."""

     def __init__(
          self,
          store: RecordStore,
          clock: Callable[[], date] = date.today,
          ministry_areas: Sequence[str] = DEFAULT_MINISTRY_AREAS,
     ):
          self.store = store
          self.clock = clock
          self.ministry_areas = list(ministry_areas)

     def _load(self) -> Dict[Collection, list]:
          return self.store.snapshot(*Collection)

     @staticmethod
     def _require(identity: Identity, role: UserRole) -> None:
          if identity.role != role:
               raise AuthorizationError(f"Only {role.value} users can access this dashboard")

     @staticmethod
     def _current_user(identity: Identity, data: dict):
          user = find_by_id(data[Collection.USERS], identity.user_id)
          if user is None:
               raise NotFoundError("User not found")
          return user

     def tenant_dashboard(self, identity: Identity) -> dict:
          self._require(identity, UserRole.TENANT)
          data = self._load()
          user = self._current_user(identity, data)

          own = [r for r in data[Collection.RENTALS] if r.tenant_id == user.id]
          own.sort(key=lambda r: r.start_date, reverse=True)
          current = next((r for r in own if r.status.is_live), None)

          prop = landlord = termination = renewal = None
          history: List[Payment] = []
          if current is not None:
               prop = find_by_id(data[Collection.PROPERTIES], current.property_id)
               landlord = find_by_id(data[Collection.USERS], prop.owner_id) if prop else None
               history = [p for p in data[Collection.PAYMENTS] if p.rental_id == current.id]
               history.sort(key=lambda p: p.timestamp.timestamp(), reverse=True)
               termination = next(
                    (t for t in data[Collection.TERMINATIONS]
                     if t.rental_id == current.id and t.status == RequestStatus.PENDING),
                    None,
               )
               renewal = next(
                    (r for r in data[Collection.RENEWALS]
                     if r.rental_id == current.id and r.status == RequestStatus.PENDING),
                    None,
               )

          return {
               "user": user,
               "current_rental": current,
               "property": prop,
               "landlord": _user_summary(landlord),
               "payment_history": history,
               "total_paid": _total_paid(history),
               "on_time_payments": sum(1 for p in history if p.status == PaymentStatus.PAID),
               "late_payments": sum(1 for p in history if p.status == PaymentStatus.OVERDUE),
               "termination_request": termination,
               "renewal_request": renewal,
          }

     def landlord_dashboard(self, identity: Identity) -> dict:
          self._require(identity, UserRole.LANDLORD)
          data = self._load()
          user = self._current_user(identity, data)
          today = self.clock()

          owned = [p for p in data[Collection.PROPERTIES] if p.owner_id == user.id]
          owned_ids = {p.id for p in owned}
          all_rentals = [r for r in data[Collection.RENTALS] if r.property_id in owned_ids]
          live = [r for r in all_rentals if r.is_live_on(today)]
          pending = [r for r in all_rentals if r.status == RentalStatus.PENDING]
          rental_ids = {r.id for r in all_rentals}

          for prop in owned:
               history = occupancy_history(prop.id, all_rentals)
               if history and history[0].end_date:
                    prop.most_recent_rental_end_date = history[0].end_date

          tenant_ids = {r.tenant_id for r in live + pending}
          tenants = [_user_summary(u) for u in data[Collection.USERS] if u.id in tenant_ids]

          return {
               "user": user,
               "properties": owned,
               "active_rentals": live,
               "pending_requests": pending,
               "tenants": tenants,
               "rent_due": rent_due(
                    user.id,
                    data[Collection.PROPERTIES],
                    data[Collection.RENTALS],
                    data[Collection.PAYMENTS],
                    data[Collection.USERS],
                    today,
               ),
               "total_revenue": _total_paid(p for p in data[Collection.PAYMENTS] if p.rental_id in rental_ids),
               "pending_terminations": [
                    t for t in data[Collection.TERMINATIONS]
                    if t.rental_id in rental_ids and t.status == RequestStatus.PENDING
               ],
               "pending_renewals": [
                    r for r in data[Collection.RENEWALS]
                    if r.rental_id in rental_ids and r.status == RequestStatus.PENDING
               ],
          }

     def bank_dashboard(self, identity: Identity) -> dict:
          self._require(identity, UserRole.BANK)
          data = self._load()
          today = self.clock()

          tenant_history = []
          for tenant in data[Collection.USERS]:
               if tenant.role != UserRole.TENANT:
                    continue
               rentals = [r for r in data[Collection.RENTALS] if r.tenant_id == tenant.id]
               rental_ids = {r.id for r in rentals}
               payments = [p for p in data[Collection.PAYMENTS] if p.rental_id in rental_ids]
               rentals.sort(key=lambda r: r.start_date, reverse=True)
               payments.sort(key=lambda p: p.timestamp.timestamp(), reverse=True)
               tenant_history.append({
                    "tenant": _user_summary(tenant),
                    "rental_history": rentals,
                    "payment_history": payments,
                    "credit_score": credit_score(rentals, payments, today),
                    "on_time_payment_rate": round(on_time_rate(payments), 2),
               })

          tenant_history.sort(key=lambda entry: entry["credit_score"], reverse=True)
          return {"tenant_history": tenant_history}

     def ministry_dashboard(self, identity: Identity) -> dict:
          self._require(identity, UserRole.MINISTRY)
          data = self._load()
          today = self.clock()
          users = data[Collection.USERS]
          rentals = data[Collection.RENTALS]

          return {
               "total_tenants": sum(1 for u in users if u.role == UserRole.TENANT),
               "total_landlords": sum(1 for u in users if u.role == UserRole.LANDLORD),
               "total_properties": len(data[Collection.PROPERTIES]),
               "active_rentals": sum(1 for r in rentals if r.is_live_on(today)),
               "total_revenue": _total_paid(data[Collection.PAYMENTS]),
               "compliance_rate": compliance_rate(rentals, data[Collection.PAYMENTS], today),
               "rent_map": rent_map(self.ministry_areas, data[Collection.PROPERTIES], rentals, today),
          }
