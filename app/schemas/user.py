# ===================================
# app/schemas/user.py
# ===================================
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, validator

from app.models.user import UserRole


class UserBase(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    email: EmailStr

    @validator("name", pre=True)
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @validator("email")
    def normalize_email(cls, v):
        return v.lower()


class UserCreate(UserBase):
    password: str = Field(min_length=6, max_length=128)
    role: UserRole = UserRole.USER


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @validator("email")
    def normalize_email(cls, v):
        return v.lower()


class User(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole
    is_active: bool = True
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: User


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    data: Token


class UserResponse(BaseModel):
    success: bool = True
    message: str
    data: User
