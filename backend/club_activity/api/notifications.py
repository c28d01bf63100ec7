from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ..deps import OFFICER_ROLES, get_db, get_user, is_member_of
from ..models import Notification, User
from ..schemas import NotificationOut, NotificationPage, SendMessageRequest
from ..services import NOTIFICATION_ORDER, club_members, notify, paginate, serialize_notification
from ..utils import build_pagination, sanitize_string

router = APIRouter()


@router.get("/api/notifications", response_model=NotificationPage)
def list_notifications(
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_user),
):
    spec = build_pagination(request.query_params, NOTIFICATION_ORDER, "created_at")
    stmt = select(Notification).where(Notification.username == user.username)
    if spec.search:
        like_pattern = f"%{spec.search}%"
        stmt = stmt.where(
            or_(
                Notification.message.ilike(like_pattern),
                Notification.sender_username.ilike(like_pattern),
            )
        )
    return paginate(db, stmt, Notification, spec, serialize_notification)


@router.post("/api/notifications/send")
def send_message(
    payload: SendMessageRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_user),
):
    message = sanitize_string(payload.message)
    if not message:
        raise HTTPException(status_code=400, detail="Message is required")
    if not user.club_name or not is_member_of(user, user.club_name):
        raise HTTPException(status_code=403, detail="Club membership required")

    members = club_members(db, user.club_name)
    if payload.send_to_all_club:
        if user.role not in OFFICER_ROLES:
            raise HTTPException(status_code=403, detail="Only club leaders can message the whole club")
        recipients = [m.username for m in members if m.username != user.username]
    else:
        if not payload.recipient:
            raise HTTPException(
                status_code=400,
                detail="Please select a recipient or choose to send to all club members",
            )
        if payload.recipient not in {m.username for m in members}:
            raise HTTPException(status_code=404, detail="Recipient is not a member of your club")
        recipients = [payload.recipient]

    for recipient in recipients:
        notify(db, recipient, message, type="email", sender=user.username)
    return {"status": "sent", "recipients": len(recipients)}


def _set_read(db: Session, user: User, notification_id: int, is_read: bool) -> NotificationOut:
    notification = db.get(Notification, notification_id)
    if not notification or notification.username != user.username:
        raise HTTPException(status_code=404, detail="Notification not found")
    notification.is_read = is_read
    db.flush()
    return serialize_notification(notification)


@router.put("/api/notifications/{notification_id}/read", response_model=NotificationOut)
def mark_read(notification_id: int, db: Session = Depends(get_db), user: User = Depends(get_user)):
    return _set_read(db, user, notification_id, True)


@router.put("/api/notifications/{notification_id}/unread", response_model=NotificationOut)
def mark_unread(notification_id: int, db: Session = Depends(get_db), user: User = Depends(get_user)):
    return _set_read(db, user, notification_id, False)
