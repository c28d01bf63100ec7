from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ..deps import ensure_leader, ensure_member, ensure_officer, get_db, get_user
from ..models import Club, Event, User
from ..schemas import (
    ClubCreate,
    ClubCreated,
    ClubDetail,
    ClubMemberOut,
    ClubOut,
    ClubPage,
    ClubUpdate,
    JoinResult,
    SessionUpdate,
)
from ..services import (
    CLUB_ORDER,
    club_members,
    club_officers,
    notify,
    paginate,
    serialize_club,
    serialize_event,
)
from ..utils import build_pagination, sanitize_string

router = APIRouter()


def get_club_or_404(db: Session, club_name: str) -> Club:
    club = db.execute(select(Club).where(Club.club_name == club_name)).scalar_one_or_none()
    if not club:
        raise HTTPException(status_code=404, detail="Club not found")
    return club


@router.get("/api/clubs", response_model=ClubPage)
def list_clubs(
    request: Request,
    status: str = "all",
    db: Session = Depends(get_db),
    user: User = Depends(get_user),
):
    spec = build_pagination(request.query_params, CLUB_ORDER, "member_count")

    stmt = select(Club)
    if spec.search:
        like_pattern = f"%{spec.search}%"
        stmt = stmt.where(
            or_(Club.club_name.ilike(like_pattern), Club.description.ilike(like_pattern))
        )
    if status == "full":
        stmt = stmt.where(Club.member_count >= Club.member_max)
    elif status == "notFull":
        stmt = stmt.where(Club.member_count < Club.member_max)

    return paginate(db, stmt, Club, spec, serialize_club)


@router.post("/api/clubs", response_model=ClubCreated, status_code=201)
def create_club(
    payload: ClubCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_user),
):
    if user.role != "STU" or user.club_name:
        raise HTTPException(status_code=403, detail="Only students without a club can create one")

    existing = db.execute(select(Club).where(Club.club_name == payload.club_name)).first()
    if existing:
        raise HTTPException(status_code=400, detail="Club already exists")

    club = Club(
        club_name=payload.club_name,
        description=payload.description,
        member_count=1,
        member_max=payload.member_max,
    )
    db.add(club)
    user.role = "CL"
    user.club_name = club.club_name
    user.membership_status = "approved"
    db.flush()
    db.refresh(club)
    return ClubCreated(
        club=serialize_club(club),
        session_update=SessionUpdate(role="CL", club=club.club_name, membership_status="approved"),
    )


@router.get("/api/clubs/{club_name}", response_model=ClubDetail)
def get_club(club_name: str, db: Session = Depends(get_db), user: User = Depends(get_user)):
    club = get_club_or_404(db, club_name)
    now = datetime.utcnow()
    events = (
        db.execute(
            select(Event)
            .where(
                Event.club_name == club.club_name,
                or_(Event.start_date >= now, Event.end_date >= now),
            )
            .order_by(Event.start_date.asc())
            .limit(5)
        )
        .scalars()
        .all()
    )
    return ClubDetail(club=serialize_club(club), events=[serialize_event(e) for e in events])


@router.put("/api/clubs/{club_name}", response_model=ClubOut)
def update_club(
    club_name: str,
    payload: ClubUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_user),
):
    ensure_leader(user, club_name)
    club = get_club_or_404(db, club_name)

    if payload.member_max is not None:
        if payload.member_max < club.member_count:
            raise HTTPException(
                status_code=400, detail="Max members cannot be lower than current members"
            )
        club.member_max = payload.member_max
    if payload.description is not None:
        description = sanitize_string(payload.description)
        if description:
            club.description = description
    if payload.banner_image is not None:
        club.banner_image = sanitize_string(payload.banner_image) or None
    if payload.banner_color:
        club.banner_color = sanitize_string(payload.banner_color)[:20]
    db.flush()
    return serialize_club(club)


@router.put("/api/clubs/{club_name}/join", response_model=JoinResult)
def join_club(
    club_name: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_user),
):
    club = get_club_or_404(db, club_name)
    if user.club_name == club.club_name:
        if user.membership_status == "approved":
            return JoinResult(status="approved", message="Already a member")
        return JoinResult(status="pending", message="Request already pending")
    if user.club_name:
        raise HTTPException(status_code=409, detail="You already belong to a club")
    if club.member_count >= club.member_max:
        raise HTTPException(status_code=409, detail="Club is full")

    user.club_name = club.club_name
    user.membership_status = "pending"
    for officer in club_officers(db, club.club_name):
        notify(
            db,
            officer.username,
            f"{user.username} wants to join {club.club_name}",
            type="join_request",
            sender=user.username,
            link=f"/ClubPage/{club.club_name}",
        )
    return JoinResult(
        status="pending",
        message="Join request submitted",
        session_update=SessionUpdate(club=club.club_name, membership_status="pending"),
    )


@router.get("/api/clubs/{club_name}/members", response_model=list[ClubMemberOut])
def list_members(club_name: str, db: Session = Depends(get_db), user: User = Depends(get_user)):
    ensure_member(user, club_name)
    get_club_or_404(db, club_name)
    return [ClubMemberOut(username=m.username, role=m.role) for m in club_members(db, club_name)]


@router.post("/api/clubs/{club_name}/members/{username}/approve")
def approve_member(
    club_name: str,
    username: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_user),
):
    ensure_officer(user, club_name)
    club = get_club_or_404(db, club_name)
    member = db.execute(
        select(User).where(
            User.username == username,
            User.club_name == club_name,
            User.membership_status == "pending",
        )
    ).scalar_one_or_none()
    if not member:
        raise HTTPException(status_code=404, detail="Join request not found")
    if club.member_count >= club.member_max:
        raise HTTPException(status_code=409, detail="Club is full")

    member.membership_status = "approved"
    member.role = "CM"
    club.member_count += 1
    notify(
        db,
        member.username,
        f"Your request to join {club.club_name} was approved",
        sender=user.username,
        link=f"/ClubPage/{club.club_name}",
    )
    return {"status": "approved"}
