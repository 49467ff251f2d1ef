"""
Student Routes — The learner's own courses, certificates, suggestions,
payments and upcoming webinars.
"""
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.payment import Payment
from app.models.user import User
from app.models.webinar import Webinar
from app.schemas.schemas import EnrollmentOut, CourseOut, PaymentOut, WebinarOut
from app.services.webinar_service import WebinarService
from app.utils.auth import get_current_user

router = APIRouter(prefix="/api/student", tags=["Student"])

RECOMMENDATION_LIMIT = 6


@router.get("/courses", response_model=list[EnrollmentOut])
def get_enrolled_courses(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return db.query(Enrollment).filter(
        Enrollment.user_id == user.id,
    ).order_by(Enrollment.enrolled_at.desc()).all()


@router.get("/certificates", response_model=list[EnrollmentOut])
def get_certificates(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Finished courses with an issued certificate."""
    return db.query(Enrollment).filter(
        Enrollment.user_id == user.id,
        Enrollment.progress == 100,
        Enrollment.certificate_issued.is_(True),
    ).all()


@router.get("/recommendations", response_model=list[CourseOut])
def get_recommendations(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    enrolled = db.query(Enrollment.course_id).filter(Enrollment.user_id == user.id)
    return db.query(Course).filter(
        Course.id.notin_(enrolled),
        Course.published.is_(True),
        Course.approved.is_(True),
    ).order_by(Course.created_at.desc()).limit(RECOMMENDATION_LIMIT).all()


@router.get("/payments", response_model=list[PaymentOut])
def get_payments(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return db.query(Payment).filter(
        Payment.user_id == user.id,
    ).order_by(Payment.created_at.desc()).all()


@router.get("/webinars", response_model=list[WebinarOut])
def get_upcoming_webinars(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    webinars = db.query(Webinar).filter(
        Webinar.start_time > datetime.utcnow(),
    ).order_by(Webinar.start_time.asc()).all()
    return [WebinarService.to_out(w) for w in webinars if WebinarService.is_attending(w, user.email)]
