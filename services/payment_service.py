# services/payment_service.py
"""
Payment Service - monthly rent payments and receipts.

Payments are append-only and unique per (rental_id, month). The amount must
match the rental's monthly rent exactly.
"""
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable, List

from schemas.user import Identity, UserRole
from schemas.payment import Payment, PaymentCreate, PaymentStatus
from services.exceptions import (
     AuthorizationError,
     NotFoundError,
     StateConflictError,
     ValidationError,
)
from services.record_store import Collection, RecordStore, find_by_id

logger = logging.getLogger(__name__)


DEFAULT_PAYMENT_METHOD = "online_payment"


class PaymentService:
     """Service class for rent payments."""

     def __init__(self, store: RecordStore, clock: Callable[[], date] = date.today):
          self.store = store
          self.clock = clock

     def create_payment(self, identity: Identity, payload: PaymentCreate) -> Payment:
          """
          Record a paid month of rent for one of the tenant's live rentals.

          Args:
               identity: Caller; must be the rental's tenant
               payload: Rental, billing month (YYYY-MM), amount and method

          Returns:
               Created Payment with status ``paid``

          Raises:
               NotFoundError: Rental does not exist
               AuthorizationError: Caller is not the rental's tenant
               StateConflictError: Rental is not live, or the month is already paid
               ValidationError: Amount differs from the monthly rent
          """
          if identity.role != UserRole.TENANT:
               raise AuthorizationError("Only tenants can make payments")

          with self.store.unit_of_work():
               rentals = self.store.read_all(Collection.RENTALS)
               payments = self.store.read_all(Collection.PAYMENTS)

               rental = find_by_id(rentals, payload.rental_id)
               if rental is None:
                    raise NotFoundError("Rental not found")
               if rental.tenant_id != identity.user_id:
                    raise AuthorizationError("You don't own this rental")
               if not rental.status.is_live:
                    raise StateConflictError(
                         f"Payments can only be made for active rentals (current status: {rental.status.value})"
                    )

               amount = Decimal(payload.amount)
               if amount <= 0:
                    raise ValidationError("Amount must be greater than zero")
               if amount != Decimal(rental.monthly_rent):
                    raise ValidationError(f"Amount must be exactly {rental.monthly_rent}")

               if any(p.rental_id == rental.id and p.month == payload.month for p in payments):
                    raise StateConflictError("Payment for this month already exists")

               payment = Payment(
                    id=self.store.generate_id("pay"),
                    rental_id=rental.id,
                    amount=amount,
                    month=payload.month,
                    status=PaymentStatus.PAID,
                    timestamp=datetime.now(timezone.utc),
                    method=payload.method or DEFAULT_PAYMENT_METHOD,
               )
               payments.append(payment)
               self.store.write_all(Collection.PAYMENTS, payments)

          logger.info("Payment %s recorded for rental %s, month %s", payment.id, rental.id, payment.month)
          return payment

     def list_payments(self, identity: Identity) -> List[Payment]:
          """
          Payments visible to the caller, newest first.

          Tenants see their own rentals' payments, landlords those on their
          properties; bank and ministry users see all of them.
          """
          data = self.store.snapshot(Collection.PAYMENTS, Collection.RENTALS, Collection.PROPERTIES)
          visible_rentals = self._visible_rental_ids(identity, data)
          payments = [
               p for p in data[Collection.PAYMENTS]
               if visible_rentals is None or p.rental_id in visible_rentals
          ]
          payments.sort(key=lambda p: p.timestamp.timestamp(), reverse=True)
          return payments

     def get_receipt(self, identity: Identity, payment_id: str) -> dict:
          """Receipt for one payment, with its rental, property and parties."""
          data = self.store.snapshot(
               Collection.PAYMENTS, Collection.RENTALS, Collection.PROPERTIES, Collection.USERS
          )
          payment = find_by_id(data[Collection.PAYMENTS], payment_id)
          if payment is None:
               raise NotFoundError("Payment not found")

          visible_rentals = self._visible_rental_ids(identity, data)
          if visible_rentals is not None and payment.rental_id not in visible_rentals:
               raise AuthorizationError("You are not allowed to view this receipt")

          rental = find_by_id(data[Collection.RENTALS], payment.rental_id)
          prop = find_by_id(data[Collection.PROPERTIES], rental.property_id) if rental else None
          tenant = find_by_id(data[Collection.USERS], rental.tenant_id) if rental else None
          landlord = find_by_id(data[Collection.USERS], prop.owner_id) if prop else None

          return {
               "receipt_number": f"RCPT-{payment.id}",
               "payment": payment,
               "rental": rental,
               "property": prop,
               "tenant": {"id": tenant.id, "name": tenant.name, "email": tenant.email} if tenant else None,
               "landlord": {"id": landlord.id, "name": landlord.name, "email": landlord.email} if landlord else None,
          }

     @staticmethod
     def _visible_rental_ids(identity: Identity, data: dict):
          """Rental ids the caller may see payments for; None means all."""
          if identity.role == UserRole.TENANT:
               return {r.id for r in data[Collection.RENTALS] if r.tenant_id == identity.user_id}
          if identity.role == UserRole.LANDLORD:
               owned = {p.id for p in data[Collection.PROPERTIES] if p.owner_id == identity.user_id}
               return {r.id for r in data[Collection.RENTALS] if r.property_id in owned}
          return None
