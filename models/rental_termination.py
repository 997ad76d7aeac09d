# models/rental_termination.py
from sqlalchemy import Column, String, Text, Date, DateTime, ForeignKey, Enum
from .base import Base
from schemas.rental import RequestStatus


class RentalTermination(Base):
     """
     Tenant's request to end a rental early.
     Table name: rental_terminations
     """

     id = Column(String(64), primary_key=True)
     rental_id = Column(String(64), ForeignKey("rentals.id"), nullable=False, index=True)
     tenant_id = Column(String(64), nullable=False)
     landlord_id = Column(String(64), nullable=False)

     requested_end_date = Column(Date, nullable=False)
     previous_end_date = Column(Date, nullable=True)  # rental end date before the request
     reason = Column(Text, nullable=True)

     status = Column(
          Enum(RequestStatus, name="termination_status", values_callable=lambda e: [m.value for m in e]),
          default=RequestStatus.PENDING,
          nullable=False,
          index=True
     )

     created_at = Column(DateTime, nullable=True)
     updated_at = Column(DateTime, nullable=True)

     def __repr__(self):
          return f"<RentalTermination(id={self.id}, rental_id={self.rental_id}, status='{self.status.value}')>"
