from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from .utils import sanitize_string


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UserOut(CamelModel):
    id: int
    username: str
    email: str
    role: str
    club_name: Optional[str] = None
    created_at: datetime


class RegisterRequest(CamelModel):
    username: str
    email: str
    password: str


class LoginRequest(CamelModel):
    username_or_email: str
    password: str


class SessionOut(CamelModel):
    username: str
    session_id: str
    role: str
    club: Optional[str] = None
    membership_status: Optional[str] = None


class SessionInfo(CamelModel):
    valid: bool
    username: Optional[str] = None
    role: Optional[str] = None
    club: Optional[str] = None


class SessionUpdate(CamelModel):
    role: Optional[str] = None
    club: Optional[str] = None
    membership_status: Optional[str] = None


class ClubCreate(CamelModel):
    club_name: str
    description: str
    member_max: int

    @field_validator("club_name", "description")
    @classmethod
    def must_not_be_empty(cls, value: str):
        cleaned = sanitize_string(value)
        if not cleaned:
            raise ValueError("must not be empty")
        return cleaned

    @field_validator("member_max")
    @classmethod
    def must_be_positive(cls, value: int):
        if value < 1:
            raise ValueError("memberMax must be at least 1")
        return value


class ClubUpdate(CamelModel):
    description: Optional[str] = None
    member_max: Optional[int] = None
    banner_image: Optional[str] = None
    banner_color: Optional[str] = None


class ClubOut(CamelModel):
    id: int
    club_name: str
    description: str
    member_count: int
    member_max: int
    banner_image: Optional[str] = None
    banner_color: str
    is_full: bool = False


class ClubMemberOut(CamelModel):
    username: str
    role: str


class EventCreate(CamelModel):
    club_name: str
    title: str
    description: str = ""
    start_date: datetime
    end_date: Optional[datetime] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def as_naive_utc(cls, value: Optional[datetime]):
        # stored columns are naive UTC
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class EventOut(CamelModel):
    id: int
    club_name: str
    title: str
    description: str
    start_date: datetime
    end_date: Optional[datetime] = None


class ClubDetail(CamelModel):
    club: ClubOut
    events: list[EventOut]


class ClubCreated(CamelModel):
    club: ClubOut
    session_update: SessionUpdate


class JoinResult(CamelModel):
    status: str
    message: str
    session_update: Optional[SessionUpdate] = None


class NotificationOut(CamelModel):
    id: int
    type: str
    message: str
    sender_username: Optional[str] = None
    link: Optional[str] = None
    is_read: bool
    created_at: datetime


class SendMessageRequest(CamelModel):
    message: str
    recipient: Optional[str] = None
    send_to_all_club: bool = False


class ClubPage(BaseModel):
    data: list[ClubOut]
    page: int
    pages: int
    total: int
    limit: int


class EventPage(BaseModel):
    data: list[EventOut]
    page: int
    pages: int
    total: int
    limit: int


class NotificationPage(BaseModel):
    data: list[NotificationOut]
    page: int
    pages: int
    total: int
    limit: int
