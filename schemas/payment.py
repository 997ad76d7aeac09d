# schemas/payment.py
"""
Pydantic schemas for rent payments.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class PaymentStatus(str, Enum):
     PAID = "paid"
     PENDING = "pending"
     OVERDUE = "overdue"
     FAILED = "failed"


class Payment(BaseModel):
     """Append-only payment record; one per (rental_id, month)."""
     id: str
     rental_id: str
     amount: Decimal
     month: str
     status: PaymentStatus
     timestamp: datetime
     method: Optional[str] = None

     model_config = ConfigDict(from_attributes=True)


class PaymentCreate(BaseModel):
     """Request body for POST /api/payments/create."""

     rental_id: str = Field(..., min_length=1)
     month: str = Field(..., pattern=r"^\d{4}-(0[1-9]|1[0-2])$", description="Billing month, YYYY-MM")
     amount: Decimal = Field(..., gt=0, description="Must equal the rental's monthly rent")
     method: Optional[str] = Field(None, max_length=50)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "rental_id": "r_81be0c",
                    "month": "2026-10",
                    "amount": 18000,
                    "method": "mobile_banking",
               }
          }
     )
