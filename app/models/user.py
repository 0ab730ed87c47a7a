# ===================================
# app/models/user.py
# ===================================
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from enum import Enum

from app.core.database import Base


class UserRole(str, Enum):
    """User roles"""
    USER = "user"
    ADMIN = "admin"


# Token scopes granted to each role
ROLE_SCOPES = {
    UserRole.USER.value: ["sweets:read", "sweets:purchase"],
    UserRole.ADMIN.value: ["sweets:read", "sweets:purchase", "sweets:write", "admin"],
}


class User(Base):
    __tablename__ = "user"
    __table_args__ = (
        CheckConstraint("role IN ('user', 'admin')", name="check_user_role"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)

    # Authentication
    password_hash = Column(String, nullable=False)
    role = Column(String(20), default=UserRole.USER.value, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    last_login = Column(DateTime(timezone=True), nullable=True)

    # Relations
    revoked_tokens = relationship("RevokedToken", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def has_role(self, role_name: str) -> bool:
        """Checks whether the user holds the given role"""
        return self.role == role_name

    @property
    def scopes(self) -> list[str]:
        """Scopes granted by the user's role"""
        return list(ROLE_SCOPES.get(self.role, []))


class RevokedToken(Base):
    """Access tokens invalidated by a logout before their expiry"""
    __tablename__ = "revoked_token"

    id = Column(Integer, primary_key=True, index=True)
    jti = Column(String(64), unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey('user.id', ondelete='CASCADE'), nullable=True)
    expires_at = Column(DateTime, nullable=False, index=True)

    # Timestamps
    revoked_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relations
    user = relationship("User", back_populates="revoked_tokens")

    def __repr__(self):
        return f"<RevokedToken(id={self.id}, user_id={self.user_id})>"
