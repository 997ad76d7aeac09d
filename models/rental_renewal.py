# models/rental_renewal.py
from sqlalchemy import Column, String, Integer, Date, DateTime, ForeignKey, Enum
from .base import Base
from schemas.rental import RequestStatus


class RentalRenewal(Base):
     """
     Tenant's request to extend a rental.
     Table name: rental_renewals
     """

     id = Column(String(64), primary_key=True)
     rental_id = Column(String(64), ForeignKey("rentals.id"), nullable=False, index=True)
     tenant_id = Column(String(64), nullable=False)
     landlord_id = Column(String(64), nullable=False)

     renewal_duration = Column(Integer, nullable=False)  # months, 1-24
     requested_start_date = Column(Date, nullable=False)

     status = Column(
          Enum(RequestStatus, name="renewal_status", values_callable=lambda e: [m.value for m in e]),
          default=RequestStatus.PENDING,
          nullable=False,
          index=True
     )

     created_at = Column(DateTime, nullable=True)
     updated_at = Column(DateTime, nullable=True)

     def __repr__(self):
          return f"<RentalRenewal(id={self.id}, rental_id={self.rental_id}, status='{self.status.value}')>"
