# schemas/user.py
"""
Pydantic schemas for users and the bearer identity.
"""
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class UserRole(str, Enum):
     """Actor roles; each role has its own dashboard."""
     TENANT = "tenant"
     LANDLORD = "landlord"
     BANK = "bank"
     MINISTRY = "ministry"


class User(BaseModel):
     """User record as held in the ``users`` collection."""
     id: str
     name: str
     email: str
     role: UserRole
     verified: bool = False
     created_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


class Identity(BaseModel):
     """Resolved caller: who is asking and in which role."""
     user_id: str
     role: UserRole


class RegisterRequest(BaseModel):
     name: str = Field(..., min_length=1, max_length=200)
     email: str = Field(..., min_length=3, max_length=255)
     role: UserRole

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "name": "Rahim Uddin",
                    "email": "rahim@example.com",
                    "role": "tenant"
               }
          }
     )


class TokenRequest(BaseModel):
     email: str = Field(..., min_length=3, max_length=255)
