# ===================================
# app/api/deps.py
# ===================================
from fastapi import Depends, HTTPException, status

from app.core.security import get_current_active_user
from app.models.user import User


def require_admin(current_user: User = Depends(get_current_active_user)) -> User:
    """
    Check that the user is an administrator
    """
    if not current_user.has_role("admin"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user


def get_pagination_params(
    page: int = 1,
    limit: int = 10,
    max_limit: int = 100
) -> tuple[int, int]:
    """
    Turn page/limit into (skip, limit), clamped to sane bounds
    """
    if page < 1:
        page = 1
    if limit < 1:
        limit = 1
    if limit > max_limit:
        limit = max_limit

    return (page - 1) * limit, limit
