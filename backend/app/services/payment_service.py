"""
Payment Service — Order initiation and reconciliation of Razorpay checkouts.

Reconciliation checks the checkout signature against the server-held secret,
then marks the Payment completed and unlocks the Enrollment in a single
transaction. Client-supplied amounts and statuses are never trusted.
"""
import logging
import time
from datetime import datetime
from typing import Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.payment import Payment
from app.models.user import User
from app.services.enrollment_service import EnrollmentService
from app.services.errors import PaymentError, EnrollmentError
from app.services.notification_service import NotificationService
from app.services.payment_gateway import RazorpayGateway, GatewayError

logger = logging.getLogger(__name__)


def to_paise(amount: float) -> int:
    return int(round(amount * 100))


class PaymentService:

    @staticmethod
    def create_order(db: Session, user: User, course_id: str) -> Dict:
        """Create (or reuse) a pending Razorpay order for a paid course.

        Returns:
            dict with orderId-ready keys: order_id, amount (paise), currency, receipt.
        """
        settings = get_settings()

        try:
            course = EnrollmentService.get_enrollable_course(db, course_id)
        except EnrollmentError as e:
            raise PaymentError(e.message, e.status_code)

        if EnrollmentService.find(db, user.id, course.id):
            raise PaymentError("Already enrolled in this course")

        if not course.price or course.price < 0:
            raise PaymentError("Invalid course price")

        pending = db.query(Payment).filter(
            Payment.user_id == user.id,
            Payment.course_id == course.id,
            Payment.status == "pending",
        ).first()
        if pending:
            logger.info("reusing pending order %s for user=%s", pending.order_id, user.id)
            return {
                "order_id": pending.order_id,
                "amount": to_paise(pending.amount),
                "currency": settings.CURRENCY,
                "receipt": pending.receipt,
            }

        receipt = f"receipt_{int(time.time() * 1000)}"
        notes = {"courseId": course.id, "userId": user.id}

        try:
            order = RazorpayGateway.create_order(to_paise(course.price), receipt, notes)
        except GatewayError as e:
            if e.auth_failed:
                raise PaymentError("Payment service configuration error", 500)
            raise PaymentError(f"Failed to create Razorpay order: {e.message}", 500)

        payment = Payment(
            user_id=user.id,
            course_id=course.id,
            amount=course.price,
            order_id=order["id"],
            payment_id=None,
            status="pending",
            payment_method="razorpay",
            receipt=order.get("receipt") or receipt,
            notes=notes,
        )
        db.add(payment)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.error("duplicate order id from gateway: %s", order["id"])
            raise PaymentError("Failed to create payment", 500)

        logger.info("payment %s pending: order=%s amount=%s", payment.id, payment.order_id, payment.amount)
        return {
            "order_id": order["id"],
            "amount": order.get("amount", to_paise(course.price)),
            "currency": order.get("currency", settings.CURRENCY),
            "receipt": payment.receipt,
        }

    @staticmethod
    def _notify_paid(db: Session, payment: Payment, course: Course) -> None:
        NotificationService.emit(
            db, payment.user_id,
            "Payment Received",
            f"Payment of ₹{payment.amount:g} received for course: {course.title}",
            "payment", payment.id, "Payment",
        )
        NotificationService.emit(
            db, payment.user_id,
            "Course Enrollment Successful",
            f"Your payment for {course.title} has been confirmed. "
            "You can now access the course content.",
            "enrollment", course.id, "Course",
        )

    @staticmethod
    def reconcile(
        db: Session,
        user: User,
        order_id: str,
        payment_id: str,
        signature: str,
    ) -> Enrollment:
        """Verify a checkout and unlock the course.

        Raises:
            PaymentError: 400 on a bad signature, 404 for unknown orders,
                409 when the writes could not be applied.
        """
        try:
            valid = RazorpayGateway.verify_signature(order_id, payment_id, signature)
        except GatewayError:
            raise PaymentError("Payment service configuration error", 500)

        if not valid:
            logger.warning("signature mismatch for order %s (user=%s)", order_id, user.id)
            raise PaymentError("Invalid payment signature")

        payment = db.query(Payment).filter(Payment.order_id == order_id).first()
        if not payment or payment.user_id != user.id:
            raise PaymentError("Payment not found", 404)

        if payment.status == "refunded":
            raise PaymentError("Payment has been refunded")

        if payment.status == "completed":
            existing = EnrollmentService.find(db, payment.user_id, payment.course_id)
            if existing:
                logger.info("order %s already reconciled; returning enrollment %s", order_id, existing.id)
                return existing

        course = db.query(Course).filter(Course.id == payment.course_id).first()
        if not course:
            raise PaymentError("Course not found", 404)

        newly_completed = payment.status != "completed"
        if newly_completed:
            payment.payment_id = payment_id
            payment.status = "completed"
            payment.completed_at = datetime.utcnow()

        try:
            enrollment = EnrollmentService.record_paid(db, payment.user_id, course, payment.payment_id)
            if newly_completed:
                PaymentService._notify_paid(db, payment, course)
            db.commit()
        except IntegrityError:
            db.rollback()
            # A concurrent verification of the same order may have won the race
            done = db.query(Payment).filter(
                Payment.order_id == order_id,
                Payment.status == "completed",
            ).first()
            existing = EnrollmentService.find(db, user.id, course.id)
            if done and existing:
                return existing
            logger.error("reconciliation of order %s rolled back", order_id)
            raise PaymentError("Payment could not be reconciled", 409)

        db.refresh(enrollment)
        logger.info("order %s reconciled: payment=%s enrollment=%s", order_id, payment_id, enrollment.id)
        return enrollment
