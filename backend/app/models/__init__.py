from app.models.user import User
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.payment import Payment
from app.models.notification import Notification
from app.models.blog import Blog
from app.models.webinar import Webinar, WebinarRegistration

__all__ = [
    "User", "Course", "Enrollment", "Payment", "Notification",
    "Blog", "Webinar", "WebinarRegistration",
]
