from app.routes.user import router as user_router
from app.routes.course import router as course_router
from app.routes.enrollment import router as enrollment_router
from app.routes.payment import router as payment_router
from app.routes.blog import router as blog_router
from app.routes.webinar import router as webinar_router
from app.routes.webinar_registration import router as webinar_registration_router
from app.routes.notification import router as notification_router
from app.routes.dashboard import router as dashboard_router
from app.routes.admin import router as admin_router
from app.routes.student import router as student_router

__all__ = [
    "user_router", "course_router", "enrollment_router", "payment_router",
    "blog_router", "webinar_router", "webinar_registration_router",
    "notification_router", "dashboard_router", "admin_router", "student_router",
]
