"""
Database connection, session management, and table creation.
Uses SQLAlchemy against PostgreSQL or SQLite. All models are imported in
create_tables() so one call creates every table.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import settings


def build_engine(url: str):
    """SQLite needs check_same_thread off; PostgreSQL gets a pooled engine."""
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,          # Auto-reconnect if DB connection drops
        pool_size=10,
        max_overflow=20,
        echo=False,                  # Set True to log all SQL queries (debug only)
    )


engine = build_engine(settings.DATABASE_URL)

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
    Creates all DB tables. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from app.models.floor import Floor                    # noqa
    from app.models.parking_slot import ParkingSlot       # noqa
    from app.models.parking_record import ParkingRecord   # noqa
    from app.models.rate_entry import RateEntry           # noqa
    from app.models.audit_log import AuditLog             # noqa

    Base.metadata.create_all(bind=bind or engine)
