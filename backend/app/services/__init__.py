from app.services.errors import ServiceError, PaymentError, EnrollmentError
from app.services.notification_service import NotificationService
from app.services.payment_gateway import RazorpayGateway, GatewayError
from app.services.enrollment_service import EnrollmentService
from app.services.payment_service import PaymentService
from app.services.course_service import CourseService
from app.services.webinar_service import WebinarService

__all__ = [
    "ServiceError", "PaymentError", "EnrollmentError",
    "NotificationService", "RazorpayGateway", "GatewayError",
    "EnrollmentService", "PaymentService", "CourseService", "WebinarService",
]
