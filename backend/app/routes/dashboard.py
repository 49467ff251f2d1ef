"""
Dashboard Routes — Aggregated figures for the admin, instructor and
student home screens.
"""
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.payment import Payment
from app.models.user import User
from app.models.webinar import Webinar
from app.schemas.schemas import CourseOut, UserOut
from app.services.webinar_service import WebinarService
from app.utils.auth import get_current_user, require_admin, require_instructor

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


def completed_revenue(db: Session, *filters) -> float:
    """Sum of completed payments in INR."""
    return db.query(func.coalesce(func.sum(Payment.amount), 0.0)).filter(
        Payment.status == "completed", *filters
    ).scalar() or 0.0


def _average(values) -> float:
    values = list(values)
    return round(sum(values) / len(values), 2) if values else 0.0


@router.get("/admin")
def get_admin_stats(
    user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    total_users = db.query(func.count(User.id)).scalar() or 0
    total_courses = db.query(func.count(Course.id)).scalar() or 0
    total_instructors = db.query(func.count(User.id)).filter(
        User.role == "instructor"
    ).scalar() or 0

    pending = db.query(User).filter(
        User.approved.is_(False),
        User.role.in_(["instructor", "admin"]),
    ).order_by(User.created_at.desc()).all()

    recent = db.query(Payment).order_by(Payment.created_at.desc()).limit(10).all()
    courses = db.query(Course).order_by(Course.created_at.desc()).all()

    return {
        "totalUsers": total_users,
        "totalCourses": total_courses,
        "totalInstructors": total_instructors,
        "totalRevenue": completed_revenue(db),
        "pendingApprovals": [UserOut.model_validate(u).model_dump(by_alias=True) for u in pending],
        "recentActivities": [
            {
                "_id": p.id,
                "type": "payment",
                "description": f"{p.user.name if p.user else 'A user'} enrolled in "
                               f"{p.course.title if p.course else 'a removed course'}",
                "status": p.status,
                "createdAt": p.created_at,
            }
            for p in recent
        ],
        "detailedCourses": [CourseOut.model_validate(c).model_dump(by_alias=True) for c in courses],
    }


@router.get("/instructor")
def get_instructor_stats(
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    courses = db.query(Course).filter(Course.instructor_id == user.id).all()
    course_ids = [c.id for c in courses]

    enrollments = []
    revenue = 0.0
    if course_ids:
        enrollments = db.query(Enrollment).filter(Enrollment.course_id.in_(course_ids)).all()
        revenue = completed_revenue(db, Payment.course_id.in_(course_ids))

    upcoming = db.query(Webinar).filter(
        Webinar.speaker_id == user.id,
        Webinar.start_time > datetime.utcnow(),
    ).order_by(Webinar.start_time.asc()).all()

    return {
        "courseStats": {
            "totalCourses": len(courses),
            "totalEnrollments": len(enrollments),
            "averageRating": _average(c.rating or 0 for c in courses),
            "totalRevenue": revenue,
            "studentProgress": _average(e.progress or 0 for e in enrollments),
        },
        "upcomingWebinars": [WebinarService.to_out(w) for w in upcoming],
    }


@router.get("/student")
def get_student_stats(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    enrollments = db.query(Enrollment).filter(Enrollment.user_id == user.id).all()

    learning_minutes = sum(
        lesson.get("duration", 0) or 0
        for e in enrollments if e.course
        for lesson in e.course.lessons or []
    )

    upcoming = [
        w for w in db.query(Webinar).filter(
            Webinar.start_time > datetime.utcnow()
        ).order_by(Webinar.start_time.asc()).all()
        if WebinarService.is_attending(w, user.email)
    ]

    return {
        "totalCourses": len(enrollments),
        "completedCourses": sum(1 for e in enrollments if e.progress == 100),
        "learningHours": round(learning_minutes / 60, 1),
        "averageRating": _average(e.course.rating or 0 for e in enrollments if e.course),
        "upcomingWebinars": [WebinarService.to_out(w) for w in upcoming],
    }
