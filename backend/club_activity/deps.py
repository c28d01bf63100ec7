import logging

from fastapi import Depends, Header, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from .auth_utils import session_matches
from .db import get_session
from .models import User

logger = logging.getLogger(__name__)

OFFICER_ROLES = {"CL", "VP"}


def get_db():
    with get_session() as session:
        yield session


def get_user(
    x_username: str | None = Header(default=None),
    x_session_id: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    if not x_username or not x_session_id:
        raise HTTPException(status_code=401, detail="Session headers missing")

    user = db.execute(select(User).where(User.username == x_username)).scalar_one_or_none()
    if not user or not session_matches(user.session_id, x_session_id):
        logger.warning("Rejected session for username=%s", x_username)
        raise HTTPException(status_code=401, detail="Session is invalid or expired")
    return user


def is_member_of(user: User, club_name: str) -> bool:
    return user.club_name == club_name and user.membership_status == "approved"


def ensure_member(user: User, club_name: str) -> None:
    if user.role == "ADM":
        return
    if not is_member_of(user, club_name):
        raise HTTPException(status_code=403, detail="Club membership required")


def ensure_officer(user: User, club_name: str) -> None:
    """Allow only the leader or vice president of ``club_name``.

    Administrators are always allowed.
    """
    if user.role == "ADM":
        return
    if user.role not in OFFICER_ROLES or not is_member_of(user, club_name):
        raise HTTPException(status_code=403, detail="Only club leaders can do this")


def ensure_leader(user: User, club_name: str) -> None:
    if user.role == "ADM":
        return
    if user.role != "CL" or not is_member_of(user, club_name):
        raise HTTPException(status_code=403, detail="Only the club leader can update the club")
