# school_billing/core/db.py - engine, session factory and request-scoped sessions
import sqlite3
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from school_billing.core.config import settings
from school_billing.models.base import Base


def _engine_kwargs(url: str) -> dict:
    kwargs = {"pool_pre_ping": True, "echo": settings.DB_ECHO, "future": True}
    if not url.startswith("sqlite"):
        kwargs["pool_size"] = settings.DB_POOL_SIZE
        kwargs["pool_timeout"] = settings.DB_POOL_TIMEOUT
    return kwargs


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE RESTRICT/CASCADE unless asked per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

@contextmanager
def db_session():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

# FastAPI dependency
def get_db():
    with db_session() as db:
        yield db

def create_tables():
    """Create all tables in the database"""
    from school_billing import models  # noqa: F401  ensure models are registered
    Base.metadata.create_all(bind=engine)
