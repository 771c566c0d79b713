"""
Occupancy ledger: the authoritative record of who is parked where.

A slot is occupied exactly when it has an open ParkingRecord (exit_time IS NULL).
The "one open record per (floor, slot)" rule is checked here before every write
and enforced again by the partial unique index on parking_records, so two
sessions racing for the same slot cannot both commit.

Nothing in this module commits. Callers (allocation, exit, override services)
pair each mutation with a cache sync and, for admin paths, an audit entry, then
commit once.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.errors import (
    AlreadyClosed, EntryNotFound, NotOpen, SlotAlreadyOccupied, TargetOccupied, ValidationError,
)
from app.models.parking_record import ParkingRecord
from app.services.billing_service import elapsed_minutes
from app.utils.logger import get_logger

logger = get_logger(__name__)


def normalize_plate(plate: Optional[str]) -> str:
    if plate is None or not plate.strip():
        raise ValidationError("License plate is required")
    return plate.strip().upper()


def _open_query(db: Session, floor_number: Optional[int], slot_number: int):
    q = db.query(ParkingRecord).filter(
        ParkingRecord.slot_number == slot_number,
        ParkingRecord.exit_time.is_(None),
    )
    if floor_number is not None:
        q = q.filter(ParkingRecord.floor_number == floor_number)
    return q.order_by(ParkingRecord.floor_number)


def find_open(db: Session, floor_number: Optional[int], slot_number: int,
              for_update: bool = False) -> Optional[ParkingRecord]:
    """Open record at the slot, or None. ``for_update`` locks the row."""
    q = _open_query(db, floor_number, slot_number)
    if for_update:
        q = q.with_for_update()
    return q.first()


def get_entry(db: Session, entry_id: int, for_update: bool = False) -> ParkingRecord:
    q = db.query(ParkingRecord).filter(ParkingRecord.id == entry_id)
    if for_update:
        q = q.with_for_update()
    record = q.first()
    if record is None:
        raise EntryNotFound(f"Parking record {entry_id} not found")
    return record


def find_open_by_plate(db: Session, plate: str) -> Optional[ParkingRecord]:
    return (
        db.query(ParkingRecord)
        .filter(ParkingRecord.license_plate == normalize_plate(plate),
                ParkingRecord.exit_time.is_(None))
        .order_by(ParkingRecord.entry_time.desc())
        .first()
    )


def list_open(db: Session, floor_number: Optional[int] = None):
    q = db.query(ParkingRecord).filter(ParkingRecord.exit_time.is_(None))
    if floor_number is not None:
        q = q.filter(ParkingRecord.floor_number == floor_number)
    return q.order_by(ParkingRecord.floor_number, ParkingRecord.slot_number).all()


def open_entries_by_location(db: Session, floor_number: Optional[int] = None) -> dict:
    """{(floor_number, slot_number): open record} in a single query."""
    located = {}
    for record in list_open(db, floor_number):
        key = (record.floor_number, record.slot_number)
        if key in located:
            # Only reachable if the unique index is missing from the schema
            logger.error(f"[LEDGER] Duplicate open records at floor {key[0]} slot {key[1]}: "
                         f"{located[key].id}, {record.id}")
            continue
        located[key] = record
    return located


def open_entry(db: Session, plate: str, vehicle_type: str, floor_number: int, slot_number: int,
               entry_time: Optional[datetime] = None) -> ParkingRecord:
    """Insert an open record. Raises SlotAlreadyOccupied if the slot has one."""
    plate = normalize_plate(plate)
    if find_open(db, floor_number, slot_number) is not None:
        raise SlotAlreadyOccupied(f"Slot {slot_number} on floor {floor_number} is already occupied")

    record = ParkingRecord(
        license_plate=plate,
        vehicle_type=vehicle_type,
        floor_number=floor_number,
        slot_number=slot_number,
        entry_time=entry_time or datetime.utcnow(),
    )
    db.add(record)
    try:
        db.flush()
    except IntegrityError:
        # Lost the race to a concurrent entry for the same slot
        db.rollback()
        logger.warning(f"[LEDGER] Unique open-record constraint hit at floor {floor_number} slot {slot_number}")
        raise SlotAlreadyOccupied(f"Slot {slot_number} on floor {floor_number} is already occupied")

    logger.info(f"[LEDGER] Opened #{record.id} plate={plate} at F{floor_number}-{slot_number}")
    return record


def close_entry(db: Session, entry_id: int, exit_time: datetime, billable_hours: int,
                charge: float) -> ParkingRecord:
    """The only way a record leaves the open state. A record is closed once."""
    record = get_entry(db, entry_id, for_update=True)
    if record.exit_time is not None:
        raise AlreadyClosed(f"Parking record {entry_id} is already closed")

    record.exit_time = exit_time
    record.duration_minutes = elapsed_minutes(record.entry_time, exit_time)
    record.billable_hours = billable_hours
    record.charge = charge
    db.flush()
    logger.info(f"[LEDGER] Closed #{record.id} plate={record.license_plate} "
                f"{record.duration_minutes}min → {billable_hours}h = {charge}")
    return record


def reassign_slot(db: Session, entry_id: int, new_floor_number: int, new_slot_number: int) -> ParkingRecord:
    """Move an open record to another slot, if that slot has no open record."""
    record = get_entry(db, entry_id, for_update=True)
    if record.exit_time is not None:
        raise NotOpen(f"Parking record {entry_id} is closed")

    occupant = find_open(db, new_floor_number, new_slot_number, for_update=True)
    if occupant is not None and occupant.id != record.id:
        raise TargetOccupied(f"Slot {new_slot_number} on floor {new_floor_number} is already occupied")

    record.floor_number = new_floor_number
    record.slot_number = new_slot_number
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise TargetOccupied(f"Slot {new_slot_number} on floor {new_floor_number} is already occupied")
    return record


def correct_plate(db: Session, entry_id: int, new_plate: str) -> ParkingRecord:
    record = get_entry(db, entry_id, for_update=True)
    if record.exit_time is not None:
        raise NotOpen(f"Parking record {entry_id} is closed; plate can no longer be changed")
    record.license_plate = normalize_plate(new_plate)
    db.flush()
    return record


def slot_history(db: Session, slot_number: int, floor_number: Optional[int] = None, limit: int = 20):
    """Closed records for a slot, most recent exit first."""
    q = db.query(ParkingRecord).filter(
        ParkingRecord.slot_number == slot_number,
        ParkingRecord.exit_time.isnot(None),
    )
    if floor_number is not None:
        q = q.filter(ParkingRecord.floor_number == floor_number)
    return q.order_by(ParkingRecord.exit_time.desc()).limit(limit).all()


def vehicle_history(db: Session, start: Optional[datetime] = None, end: Optional[datetime] = None,
                    vehicle_type: Optional[str] = None, slot_number: Optional[int] = None,
                    plate: Optional[str] = None, limit: int = 200):
    """Closed records filtered by entry time range, class, slot and plate."""
    q = db.query(ParkingRecord).filter(ParkingRecord.exit_time.isnot(None))
    if start:
        q = q.filter(ParkingRecord.entry_time >= start)
    if end:
        q = q.filter(ParkingRecord.entry_time <= end)
    if vehicle_type:
        q = q.filter(ParkingRecord.vehicle_type == vehicle_type.upper())
    if slot_number is not None:
        q = q.filter(ParkingRecord.slot_number == slot_number)
    if plate:
        q = q.filter(ParkingRecord.license_plate == normalize_plate(plate))
    return q.order_by(ParkingRecord.exit_time.desc()).limit(limit).all()
