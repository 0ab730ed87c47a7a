"""Shared fixtures: in-memory SQLite, seeded users and tokens."""

import os
from datetime import datetime

# Must be set before the app modules build their settings and engine
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["ALLOW_ADMIN_REGISTRATION"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from app.core.database import Base, SessionLocal, engine
from app.core.security import create_access_token, get_password_hash
from app.main import app
from app.models.sweet import Sweet
from app.models.user import User, UserRole

PASSWORD = "password123"
OLD_TIMESTAMP = datetime(2000, 1, 1)


def create_user(email: str, role: str = UserRole.USER.value, name: str = "Test User",
                password: str = PASSWORD, is_active: bool = True) -> int:
    with SessionLocal() as session:
        user = User(
            name=name,
            email=email,
            password_hash=get_password_hash(password),
            role=role,
            is_active=is_active,
        )
        session.add(user)
        session.commit()
        return user.id


def create_sweet(name: str = "Chocolate Bar", category: str = "Chocolate",
                 price: float = 2.5, quantity: int = 10,
                 description: str = "Delicious milk chocolate bar") -> int:
    with SessionLocal() as session:
        sweet = Sweet(
            name=name,
            category=category,
            price=price,
            quantity=quantity,
            description=description,
        )
        session.add(sweet)
        session.commit()
        return sweet.id


def get_quantity(sweet_id: int) -> int:
    with SessionLocal() as session:
        return session.get(Sweet, sweet_id).quantity


def age_sweet(sweet_id: int, updated_at: datetime = OLD_TIMESTAMP) -> None:
    with SessionLocal() as session:
        session.get(Sweet, sweet_id).updated_at = updated_at
        session.commit()


def get_updated_at(sweet_id: int) -> datetime:
    with SessionLocal() as session:
        return session.get(Sweet, sweet_id).updated_at.replace(tzinfo=None)


def set_role(user_id: int, role: str) -> None:
    with SessionLocal() as session:
        session.get(User, user_id).role = role
        session.commit()


def token_for(user_id: int, role: str) -> str:
    scopes = ["sweets:read", "sweets:purchase"]
    if role == UserRole.ADMIN.value:
        scopes += ["sweets:write", "admin"]
    return create_access_token(subject=user_id, scopes=scopes, claims={"role": role})


@pytest.fixture(autouse=True)
def database():
    """Fresh schema for every test"""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def user_id():
    return create_user("user@example.com")


@pytest.fixture
def admin_id():
    return create_user("admin@example.com", role=UserRole.ADMIN.value, name="Test Admin")


@pytest.fixture
def user_headers(user_id):
    return {"Authorization": f"Bearer {token_for(user_id, UserRole.USER.value)}"}


@pytest.fixture
def admin_headers(admin_id):
    return {"Authorization": f"Bearer {token_for(admin_id, UserRole.ADMIN.value)}"}


@pytest.fixture
def sweet_id():
    return create_sweet()
