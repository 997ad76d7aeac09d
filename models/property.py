# models/property.py
from sqlalchemy import Column, String, Text, Numeric, Date, Boolean, DateTime, ForeignKey, func
from .base import Base


class Property(Base):
     """
     Property model - a rentable home owned by exactly one landlord.
     Table name: properties

     ``available`` is advisory; occupancy is decided from the rentals table.
     """

     id = Column(String(64), primary_key=True)
     owner_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
     address = Column(String(500), nullable=False)
     rent = Column(Numeric(12, 2), nullable=False)
     available = Column(Boolean, default=True, nullable=False)
     description = Column(Text, nullable=True)

     # Landlord's offered rental window
     start_date = Column(Date, nullable=True)
     end_date = Column(Date, nullable=True)
     most_recent_rental_end_date = Column(Date, nullable=True)

     created_at = Column(DateTime, server_default=func.now(), nullable=True)

     def __repr__(self):
          return f"<Property(id={self.id}, owner_id={self.owner_id}, available={self.available})>"
