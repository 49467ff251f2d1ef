"""
Payment Routes — Razorpay order creation and checkout verification.

The client never reports a payment as successful: `/verify` only accepts the
signed triple returned by the Razorpay checkout and the server recomputes the
signature before any state changes.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.payment import Payment
from app.models.user import User
from app.schemas.schemas import (
    PaymentCreateRequest, PaymentOrderResponse, VerifyPaymentRequest,
    PaymentOut, EnrollmentOut,
)
from app.services.errors import PaymentError
from app.services.payment_service import PaymentService
from app.utils.auth import get_current_user, is_owner_or_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["Payments"])


@router.post("/create", response_model=PaymentOrderResponse)
def create_order(
    payload: PaymentCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a Razorpay order for a paid course (or return the pending one)."""
    try:
        order = PaymentService.create_order(db, user, payload.course_id)
    except PaymentError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return PaymentOrderResponse(**order)


@router.post("/verify", response_model=EnrollmentOut)
def verify_payment(
    payload: VerifyPaymentRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Verify the checkout signature and unlock the course."""
    try:
        return PaymentService.reconcile(
            db, user,
            order_id=payload.razorpay_order_id,
            payment_id=payload.razorpay_payment_id,
            signature=payload.razorpay_signature,
        )
    except PaymentError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/history", response_model=list[PaymentOut])
def get_payment_history(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return db.query(Payment).filter(
        Payment.user_id == user.id,
    ).order_by(Payment.created_at.desc()).all()


@router.get("/{payment_id}", response_model=PaymentOut)
def get_payment(
    payment_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    payment = db.query(Payment).filter(Payment.id == payment_id).first()
    if not payment or not is_owner_or_admin(user, payment.user_id):
        raise HTTPException(status_code=404, detail="Payment not found")
    return payment
