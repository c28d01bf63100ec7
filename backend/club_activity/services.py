import logging
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from .models import Club, Event, Notification, User
from .schemas import ClubOut, EventOut, NotificationOut
from .utils import PaginationSpec, paginate_response

logger = logging.getLogger(__name__)

# Public sort names accepted from the query string -> column names
CLUB_ORDER = {"clubName": "club_name", "memberCount": "member_count"}
EVENT_ORDER = {"startDate": "start_date", "title": "title", "clubName": "club_name"}
NOTIFICATION_ORDER = {"created": "created_at", "type": "type", "read": "is_read"}


def serialize_club(club: Club) -> ClubOut:
    return ClubOut(
        id=club.id,
        club_name=club.club_name,
        description=club.description,
        member_count=club.member_count,
        member_max=club.member_max,
        banner_image=club.banner_image,
        banner_color=club.banner_color,
        is_full=club.member_count >= club.member_max,
    )


def serialize_event(event: Event) -> EventOut:
    return EventOut.model_validate(event)


def serialize_notification(notification: Notification) -> NotificationOut:
    return NotificationOut.model_validate(notification)


def ordered(stmt: Select, model, spec: PaginationSpec, tiebreak) -> Select:
    # order_key comes from an allow-list, so the column lookup cannot be steered
    column = model.__table__.c[spec.order_key]
    column = column.desc() if spec.direction == "DESC" else column.asc()
    return stmt.order_by(column, tiebreak.asc())


def paginate(db: Session, stmt: Select, model, spec: PaginationSpec, serializer) -> dict[str, Any]:
    total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar() or 0
    rows = (
        db.execute(ordered(stmt, model, spec, model.id).limit(spec.limit).offset(spec.offset))
        .scalars()
        .all()
    )
    return paginate_response([serializer(row) for row in rows], total, spec)


def notify(
    db: Session,
    username: str,
    message: str,
    type: str = "system",
    sender: str | None = None,
    link: str | None = None,
) -> Notification:
    notification = Notification(
        username=username,
        sender_username=sender,
        type=type,
        message=message,
        link=link,
    )
    db.add(notification)
    logger.info("Notification type=%s to=%s from=%s", type, username, sender or "-")
    return notification


def club_officers(db: Session, club_name: str) -> list[User]:
    return (
        db.execute(
            select(User).where(
                User.club_name == club_name,
                User.membership_status == "approved",
                User.role.in_(["CL", "VP"]),
            )
        )
        .scalars()
        .all()
    )


def club_members(db: Session, club_name: str) -> list[User]:
    return (
        db.execute(
            select(User)
            .where(User.club_name == club_name, User.membership_status == "approved")
            .order_by(User.username.asc())
        )
        .scalars()
        .all()
    )
