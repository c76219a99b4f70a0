"""Database engine and session factory"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, Session
from insights_gateway.config import settings


def build_engine(database_url: str) -> Engine:
    """
    Create an engine for Postgres (pooled) or SQLite (local runs and tests).

    SQLite connections are shared across the threads FastAPI runs sync
    endpoints on, so same-thread checking is disabled there.
    """
    if make_url(database_url).get_backend_name() == "sqlite":
        return create_engine(database_url, connect_args={"check_same_thread": False})

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=3600,
    )


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
