"""
Validators — Rule-based checks shared by request schemas.
"""
import json
import re
from datetime import datetime, timezone

ROLES = ("student", "instructor", "admin")
USER_STATUSES = ("active", "inactive", "pending")
WEBINAR_STATUSES = ("scheduled", "live", "completed", "cancelled")

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$")
_URL_RE = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)
_HEX_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def normalize_email(email: str | None) -> str:
    """Validate an e-mail address and return it stripped and lower-cased."""
    if not email or not _EMAIL_RE.match(email.strip()):
        raise ValueError("Please include a valid email")
    return email.strip().lower()


def is_http_url(value: str | None) -> bool:
    """Validate an absolute http(s) URL."""
    if not value:
        return False
    return bool(_URL_RE.match(value.strip()))


def looks_like_id(value) -> bool:
    """True for strings shaped like our primary keys."""
    return isinstance(value, str) and bool(_HEX_ID_RE.match(value))


def parse_json_list(value):
    """Accept a list or a JSON-encoded list (multipart form fields arrive as strings)."""
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            raise ValueError("Lessons must be a valid array")
    if not isinstance(value, list):
        raise ValueError("Lessons must be an array")
    return value


def normalize_tags(tags) -> list[str]:
    """A single tag string becomes a one-item list; anything else non-list becomes []."""
    if isinstance(tags, str):
        tags = [tags]
    elif not isinstance(tags, list):
        return []
    cleaned = []
    for tag in tags:
        tag = str(tag).strip()
        if not tag:
            raise ValueError("Tag cannot be empty")
        cleaned.append(tag)
    return cleaned


def clamp_progress(progress: float) -> float:
    """Clamp course progress into 0-100."""
    return min(max(float(progress), 0.0), 100.0)


def to_naive_utc(value: datetime) -> datetime:
    """Store datetimes as naive UTC, matching datetime.utcnow() columns."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
