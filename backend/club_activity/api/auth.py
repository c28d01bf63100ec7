import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from ..auth_utils import hash_password, new_session_id, verify_password
from ..deps import get_db, get_user
from ..models import User
from ..schemas import LoginRequest, RegisterRequest, SessionInfo, SessionOut, UserOut
from ..utils import is_valid_email, is_valid_username, sanitize_string, validate_password

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/auth/register", response_model=UserOut)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    username = sanitize_string(payload.username)
    email = sanitize_string(payload.email).lower()

    if not is_valid_username(username):
        raise HTTPException(
            status_code=400,
            detail="Username must be 3-30 characters of letters, digits or underscores",
        )
    if not is_valid_email(email):
        raise HTTPException(status_code=400, detail="Invalid email address")
    password_check = validate_password(payload.password)
    if not password_check.valid:
        raise HTTPException(status_code=400, detail=password_check.message)

    existing = db.execute(
        select(User).where(or_(User.email == email, func.lower(User.username) == username.lower()))
    ).first()
    if existing:
        raise HTTPException(status_code=400, detail="Username or email already registered")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(payload.password),
        role="STU",
    )
    db.add(user)
    db.flush()
    db.refresh(user)
    logger.info("Registered user %s", username)
    return UserOut.model_validate(user)


@router.post("/api/auth/login", response_model=SessionOut)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    identifier = payload.username_or_email.strip()
    user = db.execute(
        select(User).where(
            or_(User.email == identifier.lower(), User.username == identifier)
        )
    ).scalar_one_or_none()
    if not user or not verify_password(payload.password, user.password_hash):
        logger.warning("Failed login for %s", identifier)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    user.session_id = new_session_id()
    db.flush()
    logger.info("User %s logged in", user.username)
    return SessionOut(
        username=user.username,
        session_id=user.session_id,
        role=user.role,
        club=user.club_name,
        membership_status=user.membership_status,
    )


@router.post("/api/auth/logout")
def logout(db: Session = Depends(get_db), user: User = Depends(get_user)):
    user.session_id = None
    logger.info("User %s logged out", user.username)
    return {"status": "logged_out"}


@router.get("/api/session", response_model=SessionInfo)
def current_session(user: User = Depends(get_user)):
    return SessionInfo(valid=True, username=user.username, role=user.role, club=user.club_name)
