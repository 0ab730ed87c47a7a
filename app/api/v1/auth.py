# ===================================
# app/api/v1/auth.py
# ===================================
import logging
from typing import Any, Optional
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Request, Response, Security, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.config import settings
from app.core.security import (
    security,
    verify_password,
    create_access_token,
    decode_token,
    get_token_from_request,
    get_current_active_user
)
from app.models.user import User as UserModel, UserRole
from app.repositories.user_repo import (
    get_user_by_id,
    get_user_by_email,
    create_user,
    update_last_login,
    revoke_token
)
from app.schemas.user import (
    UserCreate,
    LoginRequest,
    AuthResponse,
    Token,
    User,
    UserResponse
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _issue_token(response: Response, user: UserModel) -> Token:
    """Sign a token for the user and set it as the httpOnly auth cookie"""
    access_token = create_access_token(
        subject=user.id,
        scopes=user.scopes,
        claims={"email": user.email, "role": user.role}
    )
    max_age = settings.jwt_access_token_expire_minutes * 60

    response.set_cookie(
        key=settings.auth_cookie_name,
        value=access_token,
        max_age=max_age,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.auth_cookie_samesite,
    )

    return Token(
        access_token=access_token,
        token_type="bearer",
        expires_in=max_age,
        user=User.from_orm(user)
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserCreate,
    response: Response,
    db: Session = Depends(get_db)
) -> Any:
    """
    Register a new user
    """
    if user_data.role == UserRole.ADMIN and not settings.allow_admin_registration:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin registration is disabled"
        )

    if get_user_by_email(db, email=user_data.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists"
        )

    user = create_user(db=db, user=user_data)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists"
        )

    logger.info(f"User registered: id={user.id} role={user.role}")

    return AuthResponse(
        message="Registration successful",
        data=_issue_token(response, user)
    )


@router.post("/login", response_model=AuthResponse)
def login(
    login_data: LoginRequest,
    response: Response,
    db: Session = Depends(get_db)
) -> Any:
    """
    Log a user in
    """
    user = get_user_by_email(db, email=login_data.email)

    if not user or not verify_password(login_data.password, user.password_hash):
        logger.warning(f"Failed login for {login_data.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account disabled"
        )

    update_last_login(db, user.id)
    db.refresh(user)

    return AuthResponse(
        message="Login successful",
        data=_issue_token(response, user)
    )


@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    current_user: UserModel = Depends(get_current_active_user)
) -> Any:
    """
    Current user's information
    """
    return UserResponse(
        message="User retrieved successfully",
        data=User.from_orm(current_user)
    )


@router.post("/logout")
def logout(
    request: Request,
    response: Response,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    db: Session = Depends(get_db)
) -> Any:
    """
    Log out: clear the cookie and revoke the presented token
    """
    token = get_token_from_request(request, credentials)
    if token:
        try:
            payload = decode_token(token)
        except HTTPException:
            payload = None

        if payload and payload.get("jti") and payload.get("exp"):
            sub = str(payload.get("sub") or "")
            owner = get_user_by_id(db, int(sub)) if sub.isdigit() else None
            revoke_token(
                db,
                jti=payload["jti"],
                user_id=owner.id if owner else None,
                expires_at=datetime.utcfromtimestamp(payload["exp"])
            )

    response.delete_cookie(
        key=settings.auth_cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.auth_cookie_samesite,
    )

    return {
        "success": True,
        "message": "Logout successful"
    }
