"""
Normal vehicle exit: bill the open record at a slot, close it, free the cache.
Also used by override_service.force_exit so both paths bill identically.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from app.errors import EntryNotFound, ParkingError
from app.models.parking_record import ParkingRecord
from app.services.billing_service import billable_hours, charge, elapsed_minutes
from app.services.ledger_service import close_entry, find_open, find_open_by_plate
from app.services.reconciliation_service import sync
from app.services.slot_service import find_slot
from app.utils.logger import get_logger

logger = get_logger(__name__)


def release_slot(db: Session, slot_number: int, floor_number: Optional[int] = None,
                 now: Optional[datetime] = None) -> ParkingRecord:
    """Close and bill the slot's open record. Does not commit."""
    now = now or datetime.utcnow()
    slot = find_slot(db, floor_number, slot_number)
    record = find_open(db, slot.floor_number, slot.slot_number, for_update=True)
    if record is None:
        raise EntryNotFound(f"No vehicle found in slot {slot.slot_number} on floor {slot.floor_number}")

    hours = billable_hours(elapsed_minutes(record.entry_time, now))
    amount = charge(db, record.vehicle_type, hours)
    close_entry(db, record.id, now, hours, amount)
    sync(db, slot, None)
    return record


def exit_by_slot(db: Session, slot_number: int, floor_number: Optional[int] = None,
                 now: Optional[datetime] = None) -> ParkingRecord:
    try:
        record = release_slot(db, slot_number, floor_number, now)
        db.commit()
    except ParkingError as e:
        db.rollback()
        logger.warning(f"[EXIT] Exit from slot {slot_number} failed: {e}")
        raise
    logger.info(f"[EXIT] {record.license_plate} left F{record.floor_number}-{record.slot_number}, "
                f"charged {record.charge}")
    return record


def exit_by_plate(db: Session, plate: str, now: Optional[datetime] = None) -> ParkingRecord:
    """Exit located through the ledger by plate, not through the slot cache."""
    record = find_open_by_plate(db, plate)
    if record is None:
        raise EntryNotFound(f"Vehicle {plate} is not parked")
    return exit_by_slot(db, record.slot_number, record.floor_number, now)
