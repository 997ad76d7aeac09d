# models/payment.py
from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, Enum, UniqueConstraint
from .base import Base
from schemas.payment import PaymentStatus


class Payment(Base):
     """
     Payment model - rent paid for one rental and one billing month.
     Table name: payments

     Uniqueness of (rental_id, month) is checked when a payment is created;
     the constraint backs that check up at the database level.
     """
     __table_args__ = (
          UniqueConstraint("rental_id", "month", name="uq_payments_rental_month"),
     )

     id = Column(String(64), primary_key=True)
     rental_id = Column(String(64), ForeignKey("rentals.id"), nullable=False, index=True)
     amount = Column(Numeric(12, 2), nullable=False)
     month = Column(String(7), nullable=False)  # YYYY-MM
     status = Column(
          Enum(PaymentStatus, name="payment_status", values_callable=lambda e: [m.value for m in e]),
          nullable=False,
     )
     timestamp = Column(DateTime, nullable=False)
     method = Column(String(50), nullable=True)

     def __repr__(self):
          return f"<Payment(id={self.id}, rental_id={self.rental_id}, month='{self.month}')>"
