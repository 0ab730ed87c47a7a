"""
Models package initialization.
This file imports all models to make them available to Alembic for autogeneration.
"""

# IMPORTANT: use the SAME Base as database.py
from app.core.database import Base

# Import all models here so they are registered with Base.metadata
from .user import User, RevokedToken, UserRole  # noqa: F401
from .sweet import Sweet  # noqa: F401

__all__ = ['Base', 'User', 'RevokedToken', 'UserRole', 'Sweet']
