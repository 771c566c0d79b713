"""
Allocation engine: picks a slot for an arriving vehicle and opens its record.

1. Preferred slot given → it must exist; class mismatch or an occupied slot
   fails (strict) or falls through to the scan (ALLOCATION_FALLBACK_TO_SCAN).
2. Scan slots in (floor, slot) order for the first matching class with no
   open record. Free means "no open record in the ledger", never the cached flag.
3. Open the record and sync the slot cache, all in one transaction.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from app.config import settings
from app.errors import NoSlotAvailable, ParkingError, SlotAlreadyOccupied, VehicleClassMismatch
from app.models.parking_record import ParkingRecord
from app.models.parking_slot import ParkingSlot
from app.models.vehicle_class import normalize_vehicle_class
from app.services.ledger_service import find_open, normalize_plate, open_entries_by_location, open_entry
from app.services.reconciliation_service import sync
from app.services.slot_service import find_slot
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _scan_for_free_slot(db: Session, vehicle_type: str) -> ParkingSlot:
    taken = open_entries_by_location(db)
    candidates = (
        db.query(ParkingSlot)
        .filter(ParkingSlot.vehicle_type == vehicle_type)
        .order_by(ParkingSlot.floor_number, ParkingSlot.slot_number)
        .all()
    )
    for slot in candidates:
        if (slot.floor_number, slot.slot_number) not in taken:
            return slot
    raise NoSlotAvailable(f"No slot available for vehicle type: {vehicle_type}")


def _preferred_or_scan(db: Session, vehicle_type: str, preferred_slot: int,
                       floor_number: Optional[int]) -> ParkingSlot:
    fallback = settings.ALLOCATION_FALLBACK_TO_SCAN
    slot = find_slot(db, floor_number, preferred_slot)

    if slot.vehicle_type != vehicle_type:
        if not fallback:
            raise VehicleClassMismatch(
                f"Slot {slot.slot_number} on floor {slot.floor_number} is for "
                f"{slot.vehicle_type}, not {vehicle_type}")
        logger.info(f"[ALLOC] Preferred F{slot.floor_number}-{slot.slot_number} is {slot.vehicle_type}; scanning")
        return _scan_for_free_slot(db, vehicle_type)

    if find_open(db, slot.floor_number, slot.slot_number) is not None:
        if not fallback:
            raise SlotAlreadyOccupied(
                f"Slot {slot.slot_number} on floor {slot.floor_number} is already occupied")
        logger.info(f"[ALLOC] Preferred F{slot.floor_number}-{slot.slot_number} is occupied; scanning")
        return _scan_for_free_slot(db, vehicle_type)

    return slot


def allocate(db: Session, plate: str, vehicle_type: str, preferred_slot: Optional[int] = None,
             floor_number: Optional[int] = None, now: Optional[datetime] = None) -> ParkingRecord:
    """Park a vehicle. ``floor_number`` qualifies ``preferred_slot`` only."""
    plate = normalize_plate(plate)
    vehicle_type = normalize_vehicle_class(vehicle_type)

    try:
        if preferred_slot is not None:
            slot = _preferred_or_scan(db, vehicle_type, preferred_slot, floor_number)
        else:
            slot = _scan_for_free_slot(db, vehicle_type)

        record = open_entry(db, plate, vehicle_type, slot.floor_number, slot.slot_number, entry_time=now)
        sync(db, slot, record)
        db.commit()
    except ParkingError as e:
        db.rollback()
        logger.warning(f"[ALLOC] Booking failed for {plate} ({vehicle_type}): {e}")
        raise

    logger.info(f"[ALLOC] Parked {plate} ({vehicle_type}) in F{record.floor_number}-{record.slot_number}")
    return record
