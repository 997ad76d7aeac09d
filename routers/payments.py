# routers/payments.py
"""
Payment and receipt API routes.

POST /api/payments/create: tenant pays one month of rent for a live rental.
Each (rental, month) can be paid once; the amount must equal the rent.
"""
from fastapi import APIRouter, Depends, status

from dependencies import get_payment_service, require_role, verify_token
from schemas.user import Identity, UserRole
from schemas.payment import PaymentCreate
from services.payment_service import PaymentService

router = APIRouter(prefix="/api/payments", tags=["payments"])
receipts_router = APIRouter(prefix="/api/receipts", tags=["payments"])


@router.post("/create", status_code=status.HTTP_201_CREATED, summary="Pay rent")
def create_payment(
     body: PaymentCreate,
     identity: Identity = Depends(require_role(UserRole.TENANT)),
     payments: PaymentService = Depends(get_payment_service),
):
     """
     Record a rent payment.

     - **rental_id**: One of the tenant's live rentals
     - **month**: Billing month, YYYY-MM
     - **amount**: Exactly the rental's monthly rent
     """
     payment = payments.create_payment(identity, body)
     return {"success": True, "message": "Payment successful", "payment": payment}


@router.get("", summary="List my payments")
def list_payments(
     identity: Identity = Depends(verify_token),
     payments: PaymentService = Depends(get_payment_service),
):
     return {"success": True, "payments": payments.list_payments(identity)}


@receipts_router.get("/{payment_id}", summary="Payment receipt")
def get_receipt(
     payment_id: str,
     identity: Identity = Depends(verify_token),
     payments: PaymentService = Depends(get_payment_service),
):
     return {"success": True, "receipt": payments.get_receipt(identity, payment_id)}
