"""
Admin Routes — User management, course management, analytics and exports.
"""
import logging
import math
from collections import defaultdict
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.blog import Blog
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.notification import Notification
from app.models.payment import Payment
from app.models.user import User
from app.routes.course import build_course, apply_course_update
from app.routes.dashboard import completed_revenue
from app.schemas.schemas import (
    UserOut, UserPage, UserUpdateRequest, CourseOut, CourseCreateRequest,
    CourseUpdateRequest, MessageResponse,
)
from app.services.course_service import CourseService
from app.services.errors import ServiceError
from app.utils.auth import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)


def _get_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _get_course(db: Session, course_id: str) -> Course:
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    return course


# ─── Users ───────────────────────────────────────────────────────────

@router.get("/users", response_model=UserPage)
def list_users(
    page: int = 1,
    limit: int = 10,
    role: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Paged user list, newest first."""
    page = max(page, 1)
    limit = min(max(limit, 1), 100)

    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    if status:
        query = query.filter(User.status == status)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))

    total = query.count()
    users = query.order_by(User.created_at.desc()).offset((page - 1) * limit).limit(limit).all()

    return UserPage(
        users=[UserOut.model_validate(u) for u in users],
        total_pages=math.ceil(total / limit),
        current_page=page,
        total=total,
    )


@router.patch("/users/{user_id}", response_model=UserOut)
def update_user(
    user_id: str,
    payload: UserUpdateRequest,
    db: Session = Depends(get_db),
):
    """Change role, status or approval."""
    user = _get_user(db, user_id)
    if payload.role:
        user.role = payload.role
    if payload.status:
        user.status = payload.status
    if payload.approved is not None:
        user.approved = payload.approved

    db.commit()
    db.refresh(user)
    logger.info("user %s updated: role=%s status=%s approved=%s", user.id, user.role, user.status, user.approved)
    return user


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Remove an account that owns no payments, courses or blogs."""
    user = _get_user(db, user_id)
    if user.id == admin.id:
        raise HTTPException(status_code=400, detail="You cannot remove your own account")

    owns_records = (
        db.query(Payment.id).filter(Payment.user_id == user.id).first()
        or db.query(Course.id).filter(Course.instructor_id == user.id).first()
        or db.query(Blog.id).filter(Blog.author_id == user.id).first()
    )
    if owns_records:
        raise HTTPException(
            status_code=400,
            detail="User has payments, courses or blogs and cannot be removed; deactivate instead",
        )

    db.query(Enrollment).filter(Enrollment.user_id == user.id).delete(synchronize_session=False)
    db.query(Notification).filter(Notification.user_id == user.id).update(
        {Notification.user_id: None}, synchronize_session=False
    )
    db.delete(user)
    db.commit()
    return MessageResponse(message="User removed")


# ─── Courses ─────────────────────────────────────────────────────────

@router.get("/courses/stats")
def get_course_stats(db: Session = Depends(get_db)):
    total = db.query(func.count(Course.id)).scalar() or 0
    pending = db.query(func.count(Course.id)).filter(Course.approved.is_(False)).scalar() or 0
    published = db.query(func.count(Course.id)).filter(
        Course.published.is_(True), Course.approved.is_(True)
    ).scalar() or 0

    categories = db.query(Course.category, func.count(Course.id)).group_by(Course.category).all()
    courses = db.query(Course).order_by(Course.created_at.desc()).all()

    return {
        "totalCourses": total,
        "pendingApproval": pending,
        "publishedCourses": published,
        "totalRevenue": completed_revenue(db),
        "categoryStats": [{"_id": category, "count": count} for category, count in categories],
        "courses": [CourseOut.model_validate(c).model_dump(by_alias=True) for c in courses],
    }


@router.post("/courses", response_model=CourseOut, status_code=201)
def admin_create_course(
    payload: CourseCreateRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Create an approved, published course, optionally for another instructor."""
    course = build_course(db, payload, admin)
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


@router.put("/courses/{course_id}", response_model=CourseOut)
def admin_update_course(
    course_id: str,
    payload: CourseUpdateRequest,
    db: Session = Depends(get_db),
):
    course = _get_course(db, course_id)
    apply_course_update(course, payload, allow_approval=True)
    db.commit()
    db.refresh(course)
    return course


@router.delete("/courses/{course_id}", response_model=MessageResponse)
def admin_delete_course(course_id: str, db: Session = Depends(get_db)):
    course = _get_course(db, course_id)
    try:
        CourseService.delete(db, course)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return MessageResponse(message="Course removed")


# ─── Analytics ───────────────────────────────────────────────────────

@router.get("/analytics/revenue")
def get_revenue_analytics(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
):
    """Completed revenue grouped by calendar month, oldest first.

    Accepts `startDate` / `endDate`; both must be given to filter.
    """
    query = db.query(Payment).filter(Payment.status == "completed")
    if start_date and end_date:
        query = query.filter(Payment.created_at >= start_date, Payment.created_at <= end_date)

    buckets = defaultdict(lambda: {"total": 0.0, "count": 0})
    for payment in query.all():
        key = (payment.created_at.year, payment.created_at.month)
        buckets[key]["total"] += payment.amount
        buckets[key]["count"] += 1

    return [
        {"_id": {"year": year, "month": month}, **totals}
        for (year, month), totals in sorted(buckets.items())
    ]


# ─── Exports ─────────────────────────────────────────────────────────

@router.get("/export/users")
def export_users(db: Session = Depends(get_db)):
    return [
        {
            "ID": u.id,
            "Name": u.name,
            "Email": u.email,
            "Role": u.role,
            "Status": u.status,
            "Approved": u.approved,
            "Created At": u.created_at,
        }
        for u in db.query(User).order_by(User.created_at.asc()).all()
    ]


@router.get("/export/courses")
def export_courses(db: Session = Depends(get_db)):
    return [
        {
            "ID": c.id,
            "Title": c.title,
            "Instructor": c.instructor.name if c.instructor else "",
            "Category": c.category,
            "Price": c.price,
            "Published": c.published,
            "Approved": c.approved,
            "Created At": c.created_at,
        }
        for c in db.query(Course).order_by(Course.created_at.asc()).all()
    ]
