"""
Enrollment Service — Free enrollment, paid enrollment upsert and progress.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.user import User
from app.services.errors import EnrollmentError
from app.services.notification_service import NotificationService
from app.utils.validators import clamp_progress

logger = logging.getLogger(__name__)

# Payment states that grant access to every lesson
UNLOCKED_STATUSES = ("completed", "free")


class EnrollmentService:

    @staticmethod
    def get_enrollable_course(db: Session, course_id: str) -> Course:
        """Load a course that is open for enrollment or raise."""
        course = db.query(Course).filter(Course.id == course_id).first()
        if not course:
            raise EnrollmentError("Course not found", 404)
        if not course.published or not course.approved:
            raise EnrollmentError("Course is not available for enrollment")
        return course

    @staticmethod
    def find(db: Session, user_id: str, course_id: str) -> Optional[Enrollment]:
        return db.query(Enrollment).filter(
            Enrollment.user_id == user_id,
            Enrollment.course_id == course_id,
        ).first()

    @staticmethod
    def add_student(course: Course, user_id: str) -> None:
        students = list(course.enrolled_students or [])
        if user_id not in students:
            students.append(user_id)
            course.enrolled_students = students

    @staticmethod
    def enroll_free(db: Session, user: User, course_id: str) -> Enrollment:
        """Enroll a user in a free course. No Payment row is written."""
        course = EnrollmentService.get_enrollable_course(db, course_id)

        if course.price and course.price > 0:
            raise EnrollmentError("This course requires payment. Please complete payment to enroll.")

        if EnrollmentService.find(db, user.id, course.id):
            raise EnrollmentError("Already enrolled in this course")

        enrollment = Enrollment(
            user_id=user.id,
            course_id=course.id,
            payment_status="free",
            payment_id="",
            status="active",
        )
        db.add(enrollment)
        EnrollmentService.add_student(course, user.id)

        try:
            db.flush()
            NotificationService.emit(
                db, user.id,
                "New Course Enrollment",
                f"{user.name} has enrolled in {course.title}",
                "enrollment", enrollment.id, "Enrollment",
            )
            db.commit()
        except IntegrityError:
            # A concurrent request inserted the same (user, course) pair first
            db.rollback()
            raise EnrollmentError("Already enrolled in this course")

        db.refresh(enrollment)
        logger.info("free enrollment: user=%s course=%s", user.id, course.id)
        return enrollment

    @staticmethod
    def record_paid(db: Session, user_id: str, course: Course, payment_id: str) -> Enrollment:
        """Create or unlock the enrollment backing a verified payment.

        Stages changes only; the reconciliation flow owns the commit.
        An enrollment that is already unlocked keeps its original payment
        reference.
        """
        enrollment = EnrollmentService.find(db, user_id, course.id)
        now = datetime.utcnow()

        if enrollment is None:
            enrollment = Enrollment(
                user_id=user_id,
                course_id=course.id,
                payment_status="completed",
                payment_id=payment_id,
                status="active",
                enrolled_at=now,
            )
            db.add(enrollment)
        elif enrollment.payment_status not in UNLOCKED_STATUSES:
            enrollment.payment_status = "completed"
            enrollment.payment_id = payment_id
            enrollment.status = "active"
            enrollment.enrolled_at = now
        else:
            logger.warning(
                "payment %s verified for already unlocked enrollment %s; keeping %s",
                payment_id, enrollment.id, enrollment.payment_id,
            )

        EnrollmentService.add_student(course, user_id)
        db.flush()
        return enrollment

    @staticmethod
    def update_progress(
        db: Session,
        user: User,
        course_id: str,
        progress: Optional[float] = None,
        completed_lesson_id: Optional[str] = None,
    ) -> Enrollment:
        enrollment = EnrollmentService.find(db, user.id, course_id)
        if not enrollment:
            raise EnrollmentError("Enrollment not found", 404)

        previous = enrollment.progress or 0
        if progress is not None:
            enrollment.progress = clamp_progress(progress)

        if completed_lesson_id:
            lessons = list(enrollment.completed_lessons or [])
            if not any(item.get("lessonId") == completed_lesson_id for item in lessons):
                lessons.append({
                    "lessonId": completed_lesson_id,
                    "completedAt": datetime.utcnow().isoformat(),
                })
                enrollment.completed_lessons = lessons

        enrollment.last_accessed_at = datetime.utcnow()

        if previous < 100 and enrollment.progress == 100:
            NotificationService.emit(
                db, user.id,
                "Course Completion",
                f"{user.name} has completed the course: {course_id}",
                "course", course_id, "Course",
            )

        db.commit()
        db.refresh(enrollment)
        return enrollment
