"""
Enrollment Routes — Free enrollment, the student's course list and progress.
Paid enrollments are created by payment verification, not here.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.enrollment import Enrollment
from app.models.user import User
from app.schemas.schemas import EnrollmentOut, ProgressUpdateRequest
from app.services.enrollment_service import EnrollmentService
from app.services.errors import EnrollmentError
from app.utils.auth import get_current_user

router = APIRouter(prefix="/api/enrollments", tags=["Enrollments"])


@router.post("/enroll/{course_id}", response_model=EnrollmentOut, status_code=201)
def enroll_in_course(
    course_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Enroll in a free course."""
    try:
        return EnrollmentService.enroll_free(db, user, course_id)
    except EnrollmentError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/my-courses", response_model=list[EnrollmentOut])
def get_my_courses(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return db.query(Enrollment).filter(
        Enrollment.user_id == user.id,
    ).order_by(Enrollment.enrolled_at.desc()).all()


@router.patch("/progress/{course_id}", response_model=EnrollmentOut)
def update_progress(
    course_id: str,
    payload: ProgressUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return EnrollmentService.update_progress(
            db, user, course_id,
            progress=payload.progress,
            completed_lesson_id=payload.completed_lesson_id,
        )
    except EnrollmentError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
