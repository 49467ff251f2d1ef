"""
Service Errors — Raised by services, translated to HTTP responses by routes.
"""


class ServiceError(Exception):
    """A business-rule failure carrying the HTTP status it maps to."""

    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class PaymentError(ServiceError):
    pass


class EnrollmentError(ServiceError):
    pass
