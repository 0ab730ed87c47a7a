# ===================================
# app/core/security.py
# ===================================

import secrets
from datetime import datetime, timedelta
from typing import Any, Union, Optional, List
from jose import jwt, JWTError
from passlib.context import CryptContext
from fastapi import HTTPException, Request, status, Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token; the auth cookie is the fallback so no automatic 403 here
security = HTTPBearer(auto_error=False)

MISSING_TOKEN_MESSAGE = "Access token is required"
INVALID_TOKEN_MESSAGE = "Invalid or expired token"


def create_access_token(
    subject: Union[str, Any],
    expires_delta: timedelta = None,
    scopes: List[str] = None,
    claims: dict = None
) -> str:
    """Create a signed JWT access token"""
    now = datetime.utcnow()
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(
            minutes=settings.jwt_access_token_expire_minutes
        )

    to_encode = dict(claims or {})
    to_encode.update({
        "exp": expire,
        "iat": now,
        "sub": str(subject),
        "jti": secrets.token_hex(16),
        "scopes": scopes or []
    })
    encoded_jwt = jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )
    return encoded_jwt


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against its hash"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password, rounds=settings.password_hash_rounds)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token"""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm]
        )
        return payload
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=INVALID_TOKEN_MESSAGE,
        )


def get_token_from_request(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = None
) -> Optional[str]:
    """Bearer header first, then the auth cookie"""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.auth_cookie_name) or None


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    db: Session = Depends(get_db)
):
    """Resolve the current user from the access token"""
    from app.repositories.user_repo import get_user_by_id, is_token_revoked  # Local import to avoid circular imports

    token = get_token_from_request(request, credentials)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=MISSING_TOKEN_MESSAGE,
            headers={"WWW-Authenticate": "Bearer"},
        )

    invalid_token = HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=INVALID_TOKEN_MESSAGE,
    )

    payload = decode_token(token)
    user_id = payload.get("sub")
    jti = payload.get("jti")
    if user_id is None or not str(user_id).isdigit():
        raise invalid_token

    if jti and is_token_revoked(db, jti):
        raise invalid_token

    user = get_user_by_id(db, user_id=int(user_id))
    if user is None:
        raise invalid_token

    # Token data kept on the user for logout
    user.token_jti = jti
    user.token_exp = payload.get("exp")
    return user


def get_current_active_user(current_user = Depends(get_current_user)):
    """Current user, provided the account is active"""
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=INVALID_TOKEN_MESSAGE
        )
    return current_user


def require_scope(required_scope: str):
    """Dependency factory checking a permission scope (taken from the stored role)"""
    def scope_checker(current_user = Depends(get_current_active_user)):
        user_scopes = current_user.scopes

        # Admin can do everything
        if "admin" in user_scopes:
            return current_user

        if required_scope not in user_scopes:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Admin access required" if required_scope in ("admin", "sweets:write")
                else f"Missing permission: {required_scope}"
            )
        return current_user

    return scope_checker

