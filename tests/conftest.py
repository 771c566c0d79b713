"""Shared fixtures: SQLite-backed sessions with the real schema and a small layout."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.database import create_tables
from app.models.floor import Floor
from app.models.parking_slot import ParkingSlot

T0 = datetime(2026, 3, 2, 9, 0, 0)


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def file_session_factory(tmp_path):
    """Separate connections per session, so two sessions really race."""
    engine = create_engine(f"sqlite:///{tmp_path / 'race.db'}", connect_args={"check_same_thread": False})
    create_tables(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def build_layout(session):
    """
    Floor 1: 1 CAR, 2 CAR, 3 BIKE
    Floor 2: 1 CAR, 2 TRUCK
    """
    session.add_all([Floor(floor_number=1, description="Ground Floor"),
                     Floor(floor_number=2, description="Level 2")])
    session.flush()
    session.add_all([
        ParkingSlot(floor_number=1, slot_number=1, vehicle_type="CAR", occupied=False),
        ParkingSlot(floor_number=1, slot_number=2, vehicle_type="CAR", occupied=False),
        ParkingSlot(floor_number=1, slot_number=3, vehicle_type="BIKE", occupied=False),
        ParkingSlot(floor_number=2, slot_number=1, vehicle_type="CAR", occupied=False),
        ParkingSlot(floor_number=2, slot_number=2, vehicle_type="TRUCK", occupied=False),
    ])
    session.commit()


@pytest.fixture
def layout(db):
    build_layout(db)
    return db


def get_slot(session, floor_number, slot_number):
    return session.query(ParkingSlot).filter(
        ParkingSlot.floor_number == floor_number,
        ParkingSlot.slot_number == slot_number,
    ).one()
