# ===================================
# app/core/database.py
# ===================================
import logging
from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from typing import Generator

from app.core.config import settings

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    options = {
        "pool_pre_ping": True,
        "echo": settings.debug,  # Log SQL statements in debug mode
        "future": True,
    }
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        # An in-memory database only lives as long as its single connection
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            options["poolclass"] = StaticPool
    return options


# SQLAlchemy engine
engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True
)

Base = declarative_base()


def get_db() -> Generator:
    """
    Database session generator for FastAPI dependency injection
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """
    Creates the tables, with the PostgreSQL extensions used by the search indexes
    """
    import app.models  # noqa: F401  (registers the models on Base.metadata)

    if engine.dialect.name == "postgresql":
        try:
            with engine.begin() as conn:
                conn.execute(text("CREATE EXTENSION IF NOT EXISTS pg_trgm"))
            logger.info("PostgreSQL extension pg_trgm ready")
        except Exception as e:
            logger.warning(f"PostgreSQL extension pg_trgm unavailable: {e}")

    Base.metadata.create_all(bind=engine)
    logger.info("Tables created")


def check_db_connection() -> bool:
    """
    Checks the database connection
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection error: {e}")
        return False
