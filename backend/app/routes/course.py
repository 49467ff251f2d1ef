"""
Course Routes — Catalogue browsing and instructor course management.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.course import Course
from app.models.user import User
from app.schemas.schemas import (
    CourseCreateRequest, CourseUpdateRequest, CourseOut, CourseDetailOut, MessageResponse,
)
from app.services.course_service import CourseService
from app.services.enrollment_service import EnrollmentService
from app.services.errors import ServiceError
from app.utils.auth import get_current_user, require_admin, require_instructor, is_owner_or_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/courses", tags=["Courses"])


def _get_course(db: Session, course_id: str) -> Course:
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    return course


def build_course(db: Session, payload: CourseCreateRequest, user: User) -> Course:
    """New course owned by the caller; admins may assign another instructor."""
    is_admin = user.role == "admin"
    instructor_id = user.id
    if is_admin and payload.instructor_id:
        instructor = db.query(User).filter(
            User.id == payload.instructor_id,
            User.role.in_(["instructor", "admin"]),
        ).first()
        if not instructor:
            raise HTTPException(status_code=400, detail="Invalid instructor")
        instructor_id = instructor.id

    return Course(
        title=payload.title,
        description=payload.description,
        price=payload.price,
        category=payload.category,
        instructor_id=instructor_id,
        lessons=CourseService.lessons_to_json(payload.lessons),
        thumbnail=payload.thumbnail_url or payload.thumbnail or "",
        approved=is_admin,
        published=is_admin,
    )


@router.get("", response_model=list[CourseOut])
def list_courses(
    category: Optional[str] = None,
    search: Optional[str] = None,
    instructor: Optional[str] = None,
    published: str = "true",
    db: Session = Depends(get_db),
):
    """List courses. `published=all` disables the published/approved filter (admin view)."""
    query = db.query(Course)
    if published != "all":
        query = query.filter(
            Course.published.is_(published.lower() == "true"),
            Course.approved.is_(True),
        )
    if category:
        query = query.filter(Course.category == category)
    if instructor:
        query = query.filter(Course.instructor_id == instructor)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Course.title.ilike(pattern), Course.description.ilike(pattern)))

    return query.order_by(Course.created_at.desc()).all()


@router.get("/{course_id}", response_model=CourseDetailOut)
def get_course(
    course_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Course detail with the caller's enrollment state and per-lesson access."""
    course = _get_course(db, course_id)
    enrollment = EnrollmentService.find(db, user.id, course.id)

    detail = CourseDetailOut.model_validate(course)
    detail.lessons = CourseService.lessons_with_access(course, enrollment)
    detail.is_enrolled = enrollment is not None
    detail.payment_status = enrollment.payment_status if enrollment else "none"
    return detail


@router.post("", response_model=CourseOut, status_code=201)
def create_course(
    payload: CourseCreateRequest,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    """Create a course. Admin-created courses are approved and published at once."""
    course = build_course(db, payload, user)
    db.add(course)
    db.commit()
    db.refresh(course)

    logger.info("course created: %s by %s", course.id, user.id)
    return course


@router.put("/{course_id}", response_model=CourseOut)
def update_course(
    course_id: str,
    payload: CourseUpdateRequest,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    """Partial update by the owning instructor or an admin."""
    course = _get_course(db, course_id)
    if not is_owner_or_admin(user, course.instructor_id):
        raise HTTPException(status_code=403, detail="Not authorized to update this course")

    apply_course_update(course, payload, allow_approval=user.role == "admin")
    db.commit()
    db.refresh(course)
    return course


def apply_course_update(course: Course, payload: CourseUpdateRequest, allow_approval: bool) -> None:
    """Copy the fields present in the request onto the course."""
    fields = payload.model_dump(exclude_unset=True)
    thumbnail_url = fields.pop("thumbnail_url", None)
    lessons = fields.pop("lessons", None)
    if not allow_approval:
        fields.pop("approved", None)

    if lessons is not None:
        course.lessons = CourseService.lessons_to_json(payload.lessons)
    if thumbnail_url:
        fields["thumbnail"] = thumbnail_url
    if not fields.get("thumbnail"):
        # Never blank out an existing thumbnail
        fields.pop("thumbnail", None)

    for key, value in fields.items():
        if value is not None:
            setattr(course, key, value)


@router.delete("/{course_id}", response_model=MessageResponse)
def delete_course(
    course_id: str,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    course = _get_course(db, course_id)
    if not is_owner_or_admin(user, course.instructor_id):
        raise HTTPException(status_code=403, detail="Not authorized to delete this course")

    try:
        CourseService.delete(db, course)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return MessageResponse(message="Course removed")


@router.patch("/{course_id}/approve", response_model=CourseOut)
def toggle_course_approval(
    course_id: str,
    user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Flip the approval flag."""
    course = _get_course(db, course_id)
    course.approved = not course.approved
    db.commit()
    db.refresh(course)
    return course
