from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ..deps import ensure_officer, get_db, get_user
from ..models import Club, Event, User
from ..schemas import EventCreate, EventOut, EventPage
from ..services import EVENT_ORDER, club_members, notify, paginate, serialize_event
from ..utils import build_pagination, sanitize_string

router = APIRouter()


@router.get("/api/events", response_model=EventPage)
def list_events(
    request: Request,
    club: str | None = None,
    db: Session = Depends(get_db),
):
    spec = build_pagination(request.query_params, EVENT_ORDER, "start_date")
    now = datetime.utcnow()
    stmt = select(Event).where(or_(Event.start_date >= now, Event.end_date >= now))
    if club:
        stmt = stmt.where(Event.club_name == club)
    if spec.search:
        like_pattern = f"%{spec.search}%"
        stmt = stmt.where(or_(Event.title.ilike(like_pattern), Event.description.ilike(like_pattern)))
    return paginate(db, stmt, Event, spec, serialize_event)


@router.post("/api/events", response_model=EventOut, status_code=201)
def create_event(
    payload: EventCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_user),
):
    ensure_officer(user, payload.club_name)
    club = db.execute(select(Club).where(Club.club_name == payload.club_name)).scalar_one_or_none()
    if not club:
        raise HTTPException(status_code=404, detail="Club not found")

    title = sanitize_string(payload.title)
    if not title:
        raise HTTPException(status_code=400, detail="Title is required")
    if payload.end_date and payload.end_date < payload.start_date:
        raise HTTPException(status_code=400, detail="End date cannot be before start date")

    event = Event(
        club_name=club.club_name,
        title=title,
        description=payload.description.strip(),
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    db.add(event)
    db.flush()
    db.refresh(event)

    for member in club_members(db, club.club_name):
        if member.username == user.username:
            continue
        notify(
            db,
            member.username,
            f"New event in {club.club_name}: {title}",
            type="event",
            sender=user.username,
            link=f"/ClubPage/{club.club_name}",
        )
    return serialize_event(event)
