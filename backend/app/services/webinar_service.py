"""
Webinar Service — Speaker resolution, attendee bookkeeping and the
speaker-flattened response shape.
"""
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from app.models.user import User
from app.models.webinar import Webinar
from app.services.errors import ServiceError
from app.utils.validators import looks_like_id

DEFAULT_SPEAKER_IMAGE = (
    "https://images.unsplash.com/photo-1494790108755-2616b612b786?w=200&h=200&fit=crop&crop=face"
)
DEFAULT_DURATION_MINUTES = 90


class WebinarService:

    @staticmethod
    def resolve_speaker(db: Session, speaker: Optional[str]) -> Optional[User]:
        """Accept a user id or an exact user name."""
        if not speaker:
            return None
        if looks_like_id(speaker):
            user = db.query(User).filter(User.id == speaker).first()
            if user:
                return user
        return db.query(User).filter(User.name == speaker).first()

    @staticmethod
    def apply_speaker(db: Session, webinar: Webinar, speaker: Optional[str], speaker_image: Optional[str]) -> None:
        user = WebinarService.resolve_speaker(db, speaker)
        if user:
            webinar.speaker_id = user.id
            webinar.speaker_name = ""
        elif speaker:
            # Free-form guest speaker
            webinar.speaker_id = None
            webinar.speaker_name = speaker
            webinar.speaker_image = speaker_image or webinar.speaker_image or DEFAULT_SPEAKER_IMAGE

    @staticmethod
    def default_end_time(start_time: datetime, duration: Optional[int]) -> datetime:
        return start_time + timedelta(minutes=duration or DEFAULT_DURATION_MINUTES)

    @staticmethod
    def is_attending(webinar: Webinar, email: str) -> bool:
        email = email.lower()
        return any((a.get("email") or "").lower() == email for a in webinar.attendees or [])

    @staticmethod
    def add_attendee(webinar: Webinar, email: str, paid: bool = False) -> None:
        """Reserve a seat, enforcing status, start time and capacity."""
        if webinar.status == "cancelled":
            raise ServiceError("This webinar has been cancelled")
        if webinar.start_time < datetime.utcnow():
            raise ServiceError("This webinar has already started or ended")
        if len(webinar.attendees or []) >= (webinar.max_attendees or 0):
            raise ServiceError("Webinar has reached maximum capacity")
        if WebinarService.is_attending(webinar, email):
            raise ServiceError("Already registered for this webinar")

        webinar.attendees = [*(webinar.attendees or []), {"email": email.lower(), "paid": paid}]

    @staticmethod
    def to_out(webinar: Webinar) -> dict:
        """Flatten registered and guest speakers into one `speaker` object."""
        if webinar.speaker is not None:
            speaker = {
                "_id": webinar.speaker.id,
                "name": webinar.speaker.name,
                "email": webinar.speaker.email,
                "profileImage": webinar.speaker.profile_image or "",
            }
        else:
            speaker = {"_id": None, "name": webinar.speaker_name or "", "email": "",
                       "profileImage": webinar.speaker_image or ""}
        speaker.update({
            "role": webinar.speaker_role or "",
            "company": webinar.speaker_company or "",
            "bio": webinar.speaker_bio or "",
            "expertise": webinar.speaker_expertise or [],
            "experience": webinar.speaker_experience or "",
        })

        return {
            "_id": webinar.id,
            "title": webinar.title,
            "description": webinar.description,
            "longDescription": webinar.long_description or "",
            "speaker": speaker,
            "startTime": webinar.start_time,
            "endTime": webinar.end_time,
            "duration": webinar.duration,
            "link": webinar.link,
            "recordingUrl": webinar.recording_url or "",
            "price": webinar.price or 0.0,
            "status": webinar.status,
            "maxAttendees": webinar.max_attendees,
            "attendees": webinar.attendees or [],
            "language": webinar.language,
            "level": webinar.level,
            "learningOutcomes": webinar.learning_outcomes or [],
            "prerequisites": webinar.prerequisites or [],
            "agenda": webinar.agenda or [],
            "resources": webinar.resources or [],
            "createdAt": webinar.created_at,
            "updatedAt": webinar.updated_at,
        }
