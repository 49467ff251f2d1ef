"""
Pydantic Schemas — Request & Response models for API validation.

Bodies are camelCase on the wire and identifiers are exposed as `_id`,
the shape the frontend already consumes.
"""
from datetime import datetime
from typing import Optional, Dict, List, Any

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from app.utils.validators import (
    ROLES, USER_STATUSES, WEBINAR_STATUSES,
    normalize_email, is_http_url, parse_json_list, normalize_tags, to_naive_utc,
)


class APIModel(BaseModel):
    """Base for every schema exchanged with the frontend."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# ──────────────── Users / Auth ────────────────

class UserBrief(APIModel):
    id: str = Field(..., alias="_id")
    name: str
    email: str
    profile_image: Optional[str] = ""


class UserOut(APIModel):
    id: str = Field(..., alias="_id")
    name: str
    email: str
    role: str
    status: str
    approved: bool
    profile_image: Optional[str] = ""
    created_at: Optional[datetime] = None


class AuthResponse(UserOut):
    token: Optional[str] = Field(None, description="Absent until the account is approved and active")


class RegisterRequest(APIModel):
    name: str
    email: str
    password: str
    role: str = "student"
    profile_image: Optional[str] = ""

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    @field_validator("role")
    @classmethod
    def check_role(cls, v: str) -> str:
        if v not in ROLES:
            raise ValueError("Role must be student, instructor, or admin")
        return v


class LoginRequest(APIModel):
    email: str
    password: str = Field(..., description="Password is required")

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return normalize_email(v)


class ProfileUpdateRequest(APIModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    profile_image: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Name is required")
        return v.strip() if v else v

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return normalize_email(v) if v is not None else v

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        if v is not None and len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v


class UserUpdateRequest(APIModel):
    """Admin-side role / status / approval change."""
    role: Optional[str] = None
    status: Optional[str] = None
    approved: Optional[bool] = None

    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        if v is not None and v not in ROLES:
            raise ValueError("Invalid role")
        return v

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        if v is not None and v not in USER_STATUSES:
            raise ValueError("Invalid status")
        return v


class UserPage(APIModel):
    users: List[UserOut]
    total_pages: int
    current_page: int
    total: int


# ──────────────── Courses ────────────────

class Lesson(APIModel):
    id: Optional[str] = Field(None, alias="_id")
    title: str
    content: str
    duration: float
    order: int
    video: str = ""

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Lesson title is required")
        return v.strip()

    @field_validator("content")
    @classmethod
    def check_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Lesson content is required")
        return v

    @field_validator("duration")
    @classmethod
    def check_duration(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Lesson duration must be positive")
        return v

    @field_validator("order")
    @classmethod
    def check_order(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Lesson order must be non-negative")
        return v


def _check_course_title(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Course title is required")
    if not 3 <= len(v) <= 100:
        raise ValueError("Title must be between 3 and 100 characters")
    return v


def _check_course_description(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Course description is required")
    if len(v) < 20:
        raise ValueError("Description must be at least 20 characters")
    return v


class CourseCreateRequest(APIModel):
    title: str
    description: str
    price: float
    category: str
    lessons: List[Lesson] = []
    thumbnail: Optional[str] = None
    thumbnail_url: Optional[str] = None
    instructor_id: Optional[str] = None     # honoured for admin-created courses only

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        return _check_course_title(v)

    @field_validator("description")
    @classmethod
    def check_description(cls, v: str) -> str:
        return _check_course_description(v)

    @field_validator("price")
    @classmethod
    def check_price(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Price cannot be negative")
        return v

    @field_validator("category")
    @classmethod
    def check_category(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Category is required")
        return v.strip()

    @field_validator("lessons", mode="before")
    @classmethod
    def check_lessons(cls, v):
        return parse_json_list(v)


class CourseUpdateRequest(APIModel):
    """Partial update: only fields present in the body are applied."""
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    lessons: Optional[List[Lesson]] = None
    thumbnail: Optional[str] = None
    thumbnail_url: Optional[str] = None
    published: Optional[bool] = None
    approved: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v):
        return _check_course_title(v) if v is not None else v

    @field_validator("description")
    @classmethod
    def check_description(cls, v):
        return _check_course_description(v) if v is not None else v

    @field_validator("price")
    @classmethod
    def check_price(cls, v):
        if v is not None and v < 0:
            raise ValueError("Price cannot be negative")
        return v

    @field_validator("lessons", mode="before")
    @classmethod
    def check_lessons(cls, v):
        return parse_json_list(v) if v is not None else v


class CourseBrief(APIModel):
    id: str = Field(..., alias="_id")
    title: str
    description: Optional[str] = None
    thumbnail: Optional[str] = ""
    price: Optional[float] = None


class CourseOut(APIModel):
    id: str = Field(..., alias="_id")
    title: str
    description: str
    price: float
    category: str
    instructor_id: str
    instructor: Optional[UserBrief] = None
    lessons: List[Dict[str, Any]] = []
    thumbnail: Optional[str] = ""
    published: bool
    approved: bool
    enrolled_students: List[str] = []
    rating: float = 0.0
    reviews: List[Dict[str, Any]] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CourseDetailOut(CourseOut):
    is_enrolled: bool = False
    payment_status: str = "none"


# ──────────────── Enrollments ────────────────

class ProgressUpdateRequest(APIModel):
    progress: Optional[float] = None
    completed_lesson_id: Optional[str] = None

    @field_validator("progress", mode="before")
    @classmethod
    def check_progress(cls, v):
        if v is None:
            return v
        if isinstance(v, bool) or not isinstance(v, (int, float, str)):
            raise ValueError("Progress must be a number")
        try:
            v = float(v)
        except ValueError:
            raise ValueError("Progress must be a number")
        if not 0 <= v <= 100:
            raise ValueError("Progress must be between 0 and 100")
        return v


class EnrollmentOut(APIModel):
    id: str = Field(..., alias="_id")
    user_id: str
    course_id: str
    course: Optional[CourseBrief] = None
    progress: float = 0.0
    completed_lessons: List[Dict[str, Any]] = []
    payment_status: str
    payment_id: Optional[str] = ""
    status: Optional[str] = "active"
    certificate_issued: bool = False
    certificate_url: Optional[str] = ""
    enrolled_at: Optional[datetime] = None
    last_accessed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ──────────────── Payments ────────────────

class PaymentCreateRequest(APIModel):
    course_id: str

    @field_validator("course_id")
    @classmethod
    def check_course_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Course ID is required")
        return v.strip()


class PaymentOrderResponse(APIModel):
    order_id: str
    amount: int                 # paise
    currency: str = "INR"
    receipt: str


class VerifyPaymentRequest(BaseModel):
    """Razorpay checkout handler payload, forwarded verbatim by the client."""
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str

    @field_validator("razorpay_order_id")
    @classmethod
    def check_order_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Order ID is required")
        return v.strip()

    @field_validator("razorpay_payment_id")
    @classmethod
    def check_payment_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Payment ID is required")
        return v.strip()

    @field_validator("razorpay_signature")
    @classmethod
    def check_signature(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Payment signature is required")
        return v.strip()


class PaymentOut(APIModel):
    id: str = Field(..., alias="_id")
    user_id: str
    course_id: str
    course: Optional[CourseBrief] = None
    amount: float
    order_id: str
    payment_id: Optional[str] = None
    status: str
    payment_method: str
    receipt: str
    refund_id: Optional[str] = None
    notes: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


# ──────────────── Notifications ────────────────

class NotificationOut(APIModel):
    id: str = Field(..., alias="_id")
    user_id: Optional[str] = None
    user: Optional[UserBrief] = None
    title: str
    message: str
    type: str
    is_read: bool
    related_id: Optional[str] = None
    on_model: Optional[str] = None
    created_at: Optional[datetime] = None


class UnreadCountResponse(APIModel):
    count: int


# ──────────────── Blogs ────────────────

class BlogRequest(APIModel):
    title: str
    content: str
    tags: Optional[Any] = None
    published: Optional[bool] = None
    thumbnail: Optional[str] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Blog title is required")
        if not 3 <= len(v) <= 100:
            raise ValueError("Title must be between 3 and 100 characters")
        return v

    @field_validator("content")
    @classmethod
    def check_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Blog content is required")
        if len(v.strip()) < 50:
            raise ValueError("Content must be at least 50 characters")
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def check_tags(cls, v):
        return normalize_tags(v)


class CommentRequest(APIModel):
    content: str

    @field_validator("content")
    @classmethod
    def check_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Comment content is required")
        if len(v) > 500:
            raise ValueError("Comment must be between 1 and 500 characters")
        return v


class BlogOut(APIModel):
    id: str = Field(..., alias="_id")
    title: str
    content: str
    author_id: str
    author: Optional[UserBrief] = None
    tags: List[str] = []
    published: bool
    thumbnail: Optional[str] = ""
    likes: List[str] = []
    comments: List[Dict[str, Any]] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ──────────────── Webinars ────────────────

class AgendaItem(APIModel):
    time: str = ""
    topic: str = ""
    description: str = ""


class WebinarResource(APIModel):
    name: str = ""
    type: str = ""
    url: str = ""


class WebinarRequest(APIModel):
    title: str
    description: str
    start_time: datetime
    duration: int
    link: str
    end_time: Optional[datetime] = None
    speaker: Optional[str] = None
    speaker_image: Optional[str] = None
    speaker_role: Optional[str] = None
    speaker_company: Optional[str] = None
    speaker_bio: Optional[str] = None
    speaker_experience: Optional[str] = None
    speaker_expertise: Optional[List[str]] = None
    price: Optional[float] = None
    max_attendees: Optional[int] = None
    recording_url: Optional[str] = None
    long_description: Optional[str] = None
    language: Optional[str] = None
    level: Optional[str] = None
    learning_outcomes: Optional[List[str]] = None
    prerequisites: Optional[List[str]] = None
    agenda: Optional[List[AgendaItem]] = None
    resources: Optional[List[WebinarResource]] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Webinar title is required")
        if not 3 <= len(v) <= 100:
            raise ValueError("Title must be between 3 and 100 characters")
        return v

    @field_validator("description")
    @classmethod
    def check_description(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Webinar description is required")
        if len(v) < 20:
            raise ValueError("Description must be at least 20 characters")
        return v

    @field_validator("start_time")
    @classmethod
    def check_start_time(cls, v: datetime) -> datetime:
        v = to_naive_utc(v)
        if v <= datetime.utcnow():
            raise ValueError("Start time must be in the future")
        return v

    @field_validator("end_time")
    @classmethod
    def check_end_time(cls, v):
        return to_naive_utc(v) if v is not None else v

    @field_validator("duration")
    @classmethod
    def check_duration(cls, v: int) -> int:
        if not 15 <= v <= 480:
            raise ValueError("Duration must be between 15 minutes and 8 hours")
        return v

    @field_validator("link")
    @classmethod
    def check_link(cls, v: str) -> str:
        if not is_http_url(v):
            raise ValueError("Please enter a valid URL")
        return v.strip()

    @field_validator("max_attendees")
    @classmethod
    def check_max_attendees(cls, v):
        if v is not None and v < 1:
            raise ValueError("Maximum attendees must be at least 1")
        return v

    @field_validator("recording_url")
    @classmethod
    def check_recording_url(cls, v):
        if v and not is_http_url(v):
            raise ValueError("Please enter a valid URL for the recording")
        return v


class WebinarStatusRequest(APIModel):
    status: str

    @field_validator("status")
    @classmethod
    def check_status(cls, v: str) -> str:
        if v not in WEBINAR_STATUSES:
            raise ValueError("Status must be scheduled, live, completed or cancelled")
        return v


class SpeakerOut(APIModel):
    id: Optional[str] = Field(None, alias="_id")
    name: str = ""
    email: str = ""
    role: str = ""
    company: str = ""
    bio: str = ""
    expertise: List[str] = []
    experience: str = ""
    profile_image: str = ""


class WebinarOut(APIModel):
    id: str = Field(..., alias="_id")
    title: str
    description: str
    long_description: Optional[str] = ""
    speaker: SpeakerOut
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: int
    link: str
    recording_url: Optional[str] = ""
    price: float = 0.0
    status: str
    max_attendees: int
    attendees: List[Dict[str, Any]] = []
    language: Optional[str] = None
    level: Optional[str] = None
    learning_outcomes: List[str] = []
    prerequisites: List[str] = []
    agenda: List[Dict[str, Any]] = []
    resources: List[Dict[str, Any]] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class WebinarRegistrationRequest(APIModel):
    name: str
    email: str
    phone: str
    institute: Optional[str] = ""
    year: Optional[str] = ""

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        try:
            return normalize_email(v)
        except ValueError:
            raise ValueError("Valid email is required")

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Phone is required")
        return v.strip()


class WebinarRegistrationResponse(APIModel):
    message: str
    webinar: WebinarOut


class IsRegisteredResponse(APIModel):
    registered: bool


# ──────────────── Generic ────────────────

class MessageResponse(APIModel):
    message: str
