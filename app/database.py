# app/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy with SQLite by default and PostgreSQL in production.
All models are auto-imported here so create_tables() creates every table in one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from app.config import settings


def make_engine(url: str, **kwargs):
    """
    Build an engine for the given URL.
    SQLite connections are shared across request threads, so the same-thread
    check is disabled and writers wait on the file lock instead of failing.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False, "timeout": 30})
    else:
        kwargs.setdefault("pool_pre_ping", True)   # Auto-reconnect if DB connection drops
        kwargs.setdefault("pool_size", 10)
        kwargs.setdefault("max_overflow", 20)
    return create_engine(url, echo=False, **kwargs)   # echo=True logs all SQL (debug only)


engine = make_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from app.models.floor import Floor                         # noqa
    from app.models.zone import Zone                           # noqa
    from app.models.spot import Spot                           # noqa
    from app.models.gate import Gate                           # noqa
    from app.models.spot_gate_distance import SpotGateDistance # noqa
    from app.models.ticket import Ticket                       # noqa
    from app.models.alert import Alert                         # noqa

    Base.metadata.create_all(bind=bind or engine)
