"""
Database engine, session management, and base model.

Every model inherits from Base. Every request gets a session
from get_db().
"""

import uuid

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from pharmacy_ledger.config import get_settings

settings = get_settings()

# SQLite connections are bound to the creating thread unless told otherwise;
# FastAPI runs sync endpoints in a worker thread pool.
connect_args = (
    {"check_same_thread": False}
    if settings.DATABASE_URL.startswith("sqlite")
    else {}
)

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
)

# autocommit=False: callers decide when a transaction group is committed.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


def generate_object_id() -> str:
    """Return a new 24-character hexadecimal record identifier."""
    return uuid.uuid4().hex[:24]


def get_db():
    """
    Provide a database session for a single request.

    The try/finally pattern ensures the session is always
    closed, even if the endpoint raises.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
