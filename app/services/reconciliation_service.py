"""
Reconciliation of the slot occupancy cache with the ledger.

parking_slots.occupied / record_id / license_plate are a read-through cache.
``sync`` rewrites them from the slot's open record (or its absence) and is
idempotent. It runs after every ledger mutation and on every slot listing, so
drift left by crashes or manual edits heals on the next read without a repair job.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.models.parking_record import ParkingRecord
from app.models.parking_slot import ParkingSlot
from app.services.billing_service import elapsed_minutes
from app.services.ledger_service import find_open, open_entries_by_location
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class SlotStatus:
    id: int
    floor_number: int
    slot_number: int
    vehicle_type: str
    occupied: bool
    license_plate: Optional[str] = None
    parked_vehicle_type: Optional[str] = None
    record_id: Optional[int] = None
    entry_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None


def cache_matches(slot: ParkingSlot, record: Optional[ParkingRecord]) -> bool:
    if record is None:
        return not slot.occupied and slot.record_id is None and slot.license_plate is None
    return (bool(slot.occupied)
            and slot.record_id == record.id
            and slot.license_plate == record.license_plate)


def sync(db: Session, slot: ParkingSlot, record: Optional[ParkingRecord]) -> bool:
    """Make the slot cache agree with ``record``. Returns True if it changed."""
    if cache_matches(slot, record):
        return False

    if record is None:
        slot.occupied = False
        slot.record_id = None
        slot.license_plate = None
    else:
        slot.occupied = True
        slot.record_id = record.id
        slot.license_plate = record.license_plate
    slot.cache_updated_at = datetime.utcnow()
    db.flush()
    logger.debug(f"[SYNC] F{slot.floor_number}-{slot.slot_number} occupied={slot.occupied}")
    return True


def sync_slot(db: Session, slot: ParkingSlot) -> Optional[ParkingRecord]:
    """Look up the slot's open record and sync the cache to it."""
    record = find_open(db, slot.floor_number, slot.slot_number)
    sync(db, slot, record)
    return record


def reconcile_slots(db: Session, slots) -> dict:
    """
    Heal the cache for a batch of slots using one open-record query.
    Returns {(floor_number, slot_number): open record}. Failure to write the
    healed cache (at flush or commit) is logged, not raised; the ledger answer
    is still returned.
    """
    located = open_entries_by_location(db)
    healed = 0
    try:
        for slot in slots:
            record = located.get((slot.floor_number, slot.slot_number))
            was_occupied = bool(slot.occupied)
            if sync(db, slot, record):
                healed += 1
                logger.warning(f"[SYNC] Cache drift healed at F{slot.floor_number}-{slot.slot_number}: "
                               f"cached occupied={was_occupied}, ledger occupied={record is not None}")
        if healed:
            db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"[SYNC] Could not persist healed slot cache: {e}")
    return located


def slot_statuses(db: Session, floor_number: Optional[int] = None,
                  now: Optional[datetime] = None) -> list:
    """Slot listing for dashboards, ordered by (floor, slot). Heals as it reads."""
    now = now or datetime.utcnow()
    q = db.query(ParkingSlot)
    if floor_number is not None:
        q = q.filter(ParkingSlot.floor_number == floor_number)
    slots = q.order_by(ParkingSlot.floor_number, ParkingSlot.slot_number).all()
    located = reconcile_slots(db, slots)

    statuses = []
    for slot in slots:
        record = located.get((slot.floor_number, slot.slot_number))
        status = SlotStatus(id=slot.id, floor_number=slot.floor_number, slot_number=slot.slot_number,
                            vehicle_type=slot.vehicle_type, occupied=record is not None)
        if record is not None:
            status.license_plate = record.license_plate
            status.parked_vehicle_type = record.vehicle_type
            status.record_id = record.id
            status.entry_time = record.entry_time
            status.duration_minutes = elapsed_minutes(record.entry_time, now)
        statuses.append(status)

    logger.debug(f"[SLOTS] Serving {len(statuses)} slots, {sum(s.occupied for s in statuses)} occupied")
    return statuses
