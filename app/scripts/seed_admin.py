# ===================================
# app/scripts/seed_admin.py
# ===================================
"""
Create the initial administrator (and optionally a few demo sweets).

    python -m app.scripts.seed_admin [--sample-sweets]

Credentials come from ADMIN_EMAIL / ADMIN_PASSWORD / ADMIN_NAME.
"""
import argparse
import logging
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import SessionLocal, init_db
from app.core.logging_config import setup_logging
from app.models.sweet import Sweet
from app.models.user import UserRole
from app.repositories.sweet_repo import SweetRepository
from app.repositories.user_repo import create_user, get_user_by_email
from app.schemas.user import UserCreate

logger = logging.getLogger(__name__)

SAMPLE_SWEETS = [
    {"name": "Chocolate Bar", "category": "Chocolate", "price": 2.50, "quantity": 25,
     "description": "Smooth milk chocolate bar"},
    {"name": "Gummy Bears", "category": "Gummies", "price": 1.75, "quantity": 40,
     "description": "Fruit flavoured gummy bears"},
    {"name": "Lollipop", "category": "Hard Candy", "price": 0.50, "quantity": 60,
     "description": "Classic swirl lollipop"},
    {"name": "Salted Caramel Fudge", "category": "Fudge", "price": 3.25, "quantity": 3,
     "description": "Handmade fudge with sea salt"},
]


def seed_admin(db: Session) -> bool:
    """Create the admin user; returns False when it already exists"""
    if get_user_by_email(db, settings.admin_email):
        logger.info(f"Admin user already exists: {settings.admin_email}")
        return False

    admin = create_user(
        db,
        UserCreate(
            name=settings.admin_name,
            email=settings.admin_email,
            password=settings.admin_password,
        ),
        role=UserRole.ADMIN.value,
    )
    if admin is None:
        logger.info(f"Admin user already exists: {settings.admin_email}")
        return False

    logger.info(f"Admin user created: id={admin.id} email={admin.email}")
    return True


def seed_sample_sweets(db: Session) -> int:
    """Insert the demo catalogue when no sweet exists yet"""
    if db.query(Sweet.id).first() is not None:
        logger.info("Sweets already present, sample catalogue skipped")
        return 0

    sweet_repo = SweetRepository(db)
    for data in SAMPLE_SWEETS:
        sweet_repo.create_sweet(dict(data))
    logger.info(f"{len(SAMPLE_SWEETS)} sample sweets created")
    return len(SAMPLE_SWEETS)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Seed the Sweet Shop database")
    parser.add_argument(
        "--sample-sweets",
        action="store_true",
        help="also insert a small demo catalogue when it is empty",
    )
    args = parser.parse_args(argv)

    setup_logging()
    init_db()

    with SessionLocal() as db:
        seed_admin(db)
        if args.sample_sweets:
            seed_sample_sweets(db)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
