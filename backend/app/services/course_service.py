"""
Course Service — Lesson normalisation, access computation and removal rules.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.database import new_id
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.payment import Payment
from app.schemas.schemas import Lesson
from app.services.errors import ServiceError

logger = logging.getLogger(__name__)


class CourseService:

    @staticmethod
    def lessons_to_json(lessons: List[Lesson]) -> list[dict]:
        """Serialise lessons for storage, giving each a stable `_id`."""
        stored = []
        for lesson in lessons:
            item = lesson.model_dump(by_alias=True)
            item["_id"] = item.get("_id") or new_id()
            stored.append(item)
        return stored

    @staticmethod
    def lessons_with_access(course: Course, enrollment: Optional[Enrollment]) -> list[dict]:
        """First lesson is always open; the rest need a paid or free enrollment."""
        unlocked_all = enrollment is not None and enrollment.payment_status in ("completed", "free")
        lessons = sorted(course.lessons or [], key=lambda l: l.get("order", 0))
        return [
            {**lesson, "unlocked": idx == 0 or unlocked_all}
            for idx, lesson in enumerate(lessons)
        ]

    @staticmethod
    def delete(db: Session, course: Course) -> None:
        """Remove a course with its free enrollments and abandoned orders.

        Courses with completed payments are kept: those rows back
        financial records.
        """
        paid = db.query(Payment).filter(
            Payment.course_id == course.id,
            Payment.status.in_(["completed", "refunded"]),
        ).count()
        if paid:
            raise ServiceError("Course has paid enrollments and cannot be removed")

        db.query(Enrollment).filter(Enrollment.course_id == course.id).delete(synchronize_session=False)
        db.query(Payment).filter(Payment.course_id == course.id).delete(synchronize_session=False)
        db.delete(course)
        db.commit()
        logger.info("course %s removed", course.id)
