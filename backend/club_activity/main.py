from datetime import datetime, timedelta
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select
from sqlalchemy.orm import Session

from .api import auth, clubs, events, notifications
from .auth_utils import hash_password
from .config import CORS_ORIGIN
from .db import Base, engine, get_session
from .deps import get_db
from .logging_config import setup_logging
from .models import Club, Event, Notification, User

__all__ = ["app", "get_db", "seed_data"]

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="School Club Activity (FastAPI + SQLite)")

# CORS for the browser frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[CORS_ORIGIN],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(clubs.router)
app.include_router(events.router)
app.include_router(notifications.router)


@app.on_event("startup")
def startup() -> None:
    Base.metadata.create_all(engine)
    with get_session() as session:
        seed_data(session)


def seed_data(session: Session) -> None:
    chess = session.execute(select(Club).where(Club.club_name == "Chess Club")).scalar_one_or_none()
    if chess:
        return

    logger.info("Seeding demo data")
    session.add(
        Club(
            club_name="Chess Club",
            description="Weekly games, puzzles and tournament prep.",
            member_count=2,
            member_max=20,
        )
    )
    session.add(
        Club(
            club_name="Robotics",
            description="Build and program robots for the regional league.",
            member_count=1,
            member_max=1,
            banner_color="#f97316",
        )
    )
    session.add_all(
        [
            User(
                username="chess_lead",
                email="chess_lead@school.edu",
                password_hash=hash_password("password123"),
                role="CL",
                club_name="Chess Club",
                membership_status="approved",
            ),
            User(
                username="chess_member",
                email="chess_member@school.edu",
                password_hash=hash_password("password123"),
                role="CM",
                club_name="Chess Club",
                membership_status="approved",
            ),
            User(
                username="robo_lead",
                email="robo_lead@school.edu",
                password_hash=hash_password("password123"),
                role="CL",
                club_name="Robotics",
                membership_status="approved",
            ),
            User(
                username="student1",
                email="student1@school.edu",
                password_hash=hash_password("password123"),
                role="STU",
            ),
        ]
    )
    session.add(
        Event(
            club_name="Chess Club",
            title="Blitz Night",
            description="Five-minute games, all levels welcome.",
            start_date=datetime.utcnow() + timedelta(days=2),
            end_date=datetime.utcnow() + timedelta(days=2, hours=3),
        )
    )
    session.add(
        Notification(
            username="chess_member",
            sender_username="chess_lead",
            type="event",
            message="New event in Chess Club: Blitz Night",
            link="/ClubPage/Chess Club",
        )
    )
