# models/user.py
from sqlalchemy import Column, String, Boolean, DateTime, Enum, func
from .base import Base
from schemas.user import UserRole


class User(Base):
     """
     User model - every actor (tenant, landlord, bank, ministry).
     Table name: users
     """

     id = Column(String(64), primary_key=True)
     name = Column(String(200), nullable=False)
     email = Column(String(255), unique=True, nullable=False, index=True)
     role = Column(
          Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
          nullable=False,
     )
     verified = Column(Boolean, default=False, nullable=False)
     created_at = Column(DateTime, server_default=func.now(), nullable=True)

     def __repr__(self):
          return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
