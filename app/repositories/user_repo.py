# ===================================
# app/repositories/user_repo.py
# ===================================
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from datetime import datetime

from app.models.user import User, RevokedToken, UserRole
from app.schemas.user import UserCreate
from app.core.security import get_password_hash


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    """Fetch a user by id"""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Fetch a user by email"""
    return db.query(User).filter(User.email == email.lower()).first()


def create_user(db: Session, user: UserCreate, role: Optional[str] = None) -> Optional[User]:
    """Create a user; returns None when the email is already taken"""
    db_user = User(
        name=user.name,
        email=user.email.lower(),
        password_hash=get_password_hash(user.password),
        role=role or UserRole(user.role).value,
        is_active=True
    )

    db.add(db_user)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent registration with the same email
        db.rollback()
        return None
    db.refresh(db_user)
    return db_user


def update_last_login(db: Session, user_id: int) -> None:
    """Record the time of the last successful login"""
    db.query(User).filter(User.id == user_id).update(
        {"last_login": datetime.utcnow()}
    )
    db.commit()


# Revoked access tokens
def revoke_token(db: Session, jti: str, user_id: Optional[int], expires_at: datetime) -> RevokedToken:
    """Record a token id as revoked until its natural expiry"""
    existing = db.query(RevokedToken).filter(RevokedToken.jti == jti).first()
    if existing:
        return existing

    db_token = RevokedToken(
        jti=jti,
        user_id=user_id,
        expires_at=expires_at
    )
    db.add(db_token)
    try:
        db.commit()
    except IntegrityError:
        # Same token revoked by a concurrent logout
        db.rollback()
        return db.query(RevokedToken).filter(RevokedToken.jti == jti).one()
    db.refresh(db_token)
    return db_token


def is_token_revoked(db: Session, jti: str) -> bool:
    return db.query(RevokedToken.id).filter(RevokedToken.jti == jti).first() is not None


def cleanup_expired_tokens(db: Session) -> int:
    """Delete revocation records whose tokens have expired"""
    expired_count = db.query(RevokedToken).filter(
        RevokedToken.expires_at < datetime.utcnow()
    ).delete(synchronize_session=False)

    db.commit()
    return expired_count
