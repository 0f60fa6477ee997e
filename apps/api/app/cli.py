"""Operational commands: ``python -m app.cli <command>``."""

from __future__ import annotations

import argparse
import sys
from datetime import date, datetime, time, timedelta

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.auth.password import check_password_policy, hash_password
from app.core.logging import configure_logging
from app.db import SessionLocal, engine
from app.models import AdminUser, Base, Prayer
from app.services.availability import local_zone

logger = structlog.get_logger(__name__)

FRIDAY = 4  # datetime.weekday()
PRAYER_TIME = time(13, 30)


def upcoming_fridays(today: date, count: int) -> list[date]:
    """Next ``count`` Fridays strictly after ``today``."""
    days_ahead = (FRIDAY - today.weekday()) % 7 or 7
    first = today + timedelta(days=days_ahead)
    return [first + timedelta(weeks=i) for i in range(count)]


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    logger.info("database_initialized", url=engine.url.render_as_string(hide_password=True))


def create_admin(db: Session, email: str, password: str) -> AdminUser:
    check_password_policy(password)
    email = email.strip().lower()
    admin = db.scalar(select(AdminUser).where(AdminUser.email == email))
    if admin:
        admin.password_hash = hash_password(password)
        admin.active = True
    else:
        admin = AdminUser(email=email, password_hash=hash_password(password), active=True)
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("admin_upserted", admin_id=str(admin.id), email=email)
    return admin


def seed(db: Session, weeks: int = 4, capacity: int = 150) -> list[Prayer]:
    tz = local_zone()
    prayers = []
    for i, day in enumerate(upcoming_fridays(datetime.now(tz).date(), weeks)):
        prayer = Prayer(
            title=f"Friday Prayer - Week {i + 1}",
            scheduled_at=datetime.combine(day, PRAYER_TIME, tzinfo=tz),
            capacity=capacity,
            location="Main Prayer Hall",
            notes="Please arrive 15 minutes early",
            active=i == 0,
            auto_activation=True,
        )
        db.add(prayer)
        prayers.append(prayer)
    db.commit()
    for prayer in prayers:
        logger.info("prayer_seeded", prayer_id=str(prayer.id), scheduled_at=prayer.scheduled_at.isoformat())
    return prayers


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="app.cli", description="Friday prayer registration admin tasks")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="create database tables")

    admin = sub.add_parser("create-admin", help="create or reset an admin account")
    admin.add_argument("--email", required=True)
    admin.add_argument("--password", required=True)

    seed_cmd = sub.add_parser("seed", help="create prayer slots for the upcoming Fridays")
    seed_cmd.add_argument("--weeks", type=int, default=4)
    seed_cmd.add_argument("--capacity", type=int, default=150)
    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)

    if args.command == "init-db":
        init_db()
        return 0

    db = SessionLocal()
    try:
        if args.command == "create-admin":
            try:
                create_admin(db, args.email, args.password)
            except ValueError as exc:
                logger.error("admin_rejected", email=args.email, error=str(exc))
                return 2
        elif args.command == "seed":
            if args.weeks < 1 or args.capacity < 1:
                logger.error("invalid_seed_arguments", weeks=args.weeks, capacity=args.capacity)
                return 2
            seed(db, weeks=args.weeks, capacity=args.capacity)
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
