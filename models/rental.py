# models/rental.py
from sqlalchemy import Column, String, Numeric, Date, DateTime, ForeignKey, Enum, func
from .base import Base
from schemas.rental import RentalStatus


class Rental(Base):
     """
     Rental model - agreement between a tenant and a landlord's property.
     Table name: rentals
     """

     id = Column(String(64), primary_key=True)
     tenant_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
     landlord_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
     property_id = Column(String(64), ForeignKey("properties.id"), nullable=False, index=True)

     # Rental period
     start_date = Column(Date, nullable=False)
     end_date = Column(Date, nullable=True)

     status = Column(
          Enum(RentalStatus, name="rental_status", values_callable=lambda e: [m.value for m in e]),
          default=RentalStatus.PENDING,
          nullable=False,
          index=True
     )

     # Snapshot of the property's rent at request time
     monthly_rent = Column(Numeric(12, 2), nullable=False)

     created_at = Column(DateTime, server_default=func.now(), nullable=True)

     def __repr__(self):
          return f"<Rental(id={self.id}, property_id={self.property_id}, status='{self.status.value}')>"
