import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
from datetime import timedelta
from typing import Optional

import structlog
from sqlalchemy import insert, select
from sqlalchemy.engine import Connection

from facility_booking.db.engine import engine
from facility_booking.logging_config import setup_logging
from facility_booking.models.base import Base
from facility_booking.models.class_schedules import ClassSchedule
from facility_booking.models.rooms import Room
from facility_booking.models.users import User
from facility_booking.services.points import adjust_points
from facility_booking.utils.datetime import utc_now

setup_logging()
logger = structlog.get_logger(__name__)

DEMO_USERS = [
    {"email": "admin@example.com", "name": "Admin User", "points": 1000},
    {"email": "member@example.com", "name": "Demo Member", "points": 0},
]

DEMO_ROOMS = [
    {"name": "Room 101", "capacity": 4},
    {"name": "Room 102", "capacity": 8},
]


def _get_or_create_user(conn: Connection, email: str, name: str) -> tuple[int, bool]:
    existing: Optional[int] = conn.execute(select(User.id).where(User.email == email)).scalar()
    if existing is not None:
        return existing, False
    user_id = conn.execute(insert(User).values(email=email, name=name).returning(User.id)).scalar_one()
    return user_id, True


def _get_or_create_room(conn: Connection, name: str, capacity: int) -> int:
    existing: Optional[int] = conn.execute(select(Room.id).where(Room.name == name)).scalar()
    if existing is not None:
        return existing
    return conn.execute(
        insert(Room).values(name=name, capacity=capacity).returning(Room.id)
    ).scalar_one()


def main() -> None:
    """
    Insert demo users, rooms and a class session. Safe to run repeatedly.

    Starting points balances go through the points ledger so the cached
    balance and the ledger stay in agreement.
    """
    parser = argparse.ArgumentParser(description="Seed demo data for local development")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables from the ORM models first (use alembic for real databases)",
    )
    args = parser.parse_args()

    if args.create_tables:
        Base.metadata.create_all(engine)
        logger.info("tables_created")

    new_users: list[tuple[int, int]] = []
    with engine.begin() as conn:
        for user in DEMO_USERS:
            user_id, created = _get_or_create_user(conn, user["email"], user["name"])
            if created and user["points"]:
                new_users.append((user_id, user["points"]))

        room_ids = [_get_or_create_room(conn, r["name"], r["capacity"]) for r in DEMO_ROOMS]

        starts_at = (utc_now() + timedelta(days=1)).replace(hour=9, minute=0, second=0, microsecond=0)
        has_class = conn.execute(
            select(ClassSchedule.id).where(ClassSchedule.title == "Morning Yoga")
        ).scalar()
        if has_class is None:
            conn.execute(
                insert(ClassSchedule).values(
                    title="Morning Yoga",
                    room_id=room_ids[1],
                    starts_at=starts_at,
                    ends_at=starts_at + timedelta(hours=1),
                    capacity=8,
                )
            )

    for user_id, points in new_users:
        adjust_points(engine, user_id, points, "Welcome bonus")

    logger.info("seed_completed", users=len(DEMO_USERS), rooms=len(room_ids))


if __name__ == "__main__":
    main()
