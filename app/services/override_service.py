"""
Administrative overrides of slot occupancy.

Each override runs the same ledger primitives as the vehicle paths, re-syncs the
affected slot caches, appends exactly one audit entry, and commits once. The
actor identity comes from the caller and is trusted as given.

  force_exit      FORCE_EXIT            bill + close the open record
  mark_available  MARK_SLOT_AVAILABLE   clear a stuck cache (ledger untouched)
  change_slot     CHANGE_SLOT           move the open record to another slot
  correct_plate   UPDATE_LICENSE_PLATE  fix the plate on the open record
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from app.errors import EntryNotFound, ParkingError, ValidationError, VehicleStillPresent
from app.models.parking_record import ParkingRecord
from app.models.parking_slot import ParkingSlot
from app.services import ledger_service
from app.services.audit_service import record_action
from app.services.exit_service import release_slot
from app.services.reconciliation_service import sync
from app.services.slot_service import find_slot
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _floor_suffix(floor_number: Optional[int]) -> str:
    return f" on floor {floor_number}" if floor_number is not None else ""


def _locked_open_record(db: Session, slot: ParkingSlot) -> ParkingRecord:
    record = ledger_service.find_open(db, slot.floor_number, slot.slot_number, for_update=True)
    if record is None:
        raise EntryNotFound(f"No active vehicle in slot {slot.slot_number} on floor {slot.floor_number}")
    return record


def _run(db: Session, action: str, actor: str, work):
    """Commit ``work`` as one unit, rolling back on any core error."""
    try:
        result = work()
        db.commit()
    except ParkingError as e:
        db.rollback()
        logger.warning(f"[OVERRIDE][{action}] rejected for {actor}: {e}")
        raise
    return result


def force_exit(db: Session, slot_number: int, actor: str, floor_number: Optional[int] = None,
               now: Optional[datetime] = None) -> ParkingRecord:
    def work():
        record = release_slot(db, slot_number, floor_number, now)
        record_action(db, actor, "FORCE_EXIT",
                      f"Force exited vehicle {record.license_plate} from slot {record.slot_number}"
                      f"{_floor_suffix(record.floor_number)}",
                      {"recordId": record.id, "slotNumber": record.slot_number,
                       "floorNumber": record.floor_number, "licensePlate": record.license_plate,
                       "exitTime": record.exit_time.isoformat(),
                       "billableHours": record.billable_hours, "charge": record.charge})
        return record

    return _run(db, "FORCE_EXIT", actor, work)


def mark_available(db: Session, slot_number: int, actor: str,
                   floor_number: Optional[int] = None) -> ParkingSlot:
    """Clear a stuck cache. Refused while the ledger still has the vehicle parked."""
    def work():
        slot = find_slot(db, floor_number, slot_number)
        if ledger_service.find_open(db, slot.floor_number, slot.slot_number) is not None:
            raise VehicleStillPresent(
                "Cannot mark slot as available. Vehicle is still parked. Use Force Exit instead.")
        changed = sync(db, slot, None)
        record_action(db, actor, "MARK_SLOT_AVAILABLE",
                      f"Manually marked slot {slot.slot_number}{_floor_suffix(slot.floor_number)} as available",
                      {"slotNumber": slot.slot_number, "floorNumber": slot.floor_number,
                       "cacheChanged": changed})
        return slot

    return _run(db, "MARK_SLOT_AVAILABLE", actor, work)


def change_slot(db: Session, slot_number: int, new_slot_number: int, actor: str,
                floor_number: Optional[int] = None) -> ParkingRecord:
    """Move the parked vehicle to another slot on the same floor."""
    def work():
        source = find_slot(db, floor_number, slot_number)
        record = _locked_open_record(db, source)
        if new_slot_number == source.slot_number:
            raise ValidationError("New slot must differ from the current slot")
        target = find_slot(db, source.floor_number, new_slot_number)
        if target.vehicle_type != record.vehicle_type:
            logger.warning(f"[OVERRIDE][CHANGE_SLOT] {record.license_plate} ({record.vehicle_type}) "
                           f"moved into {target.vehicle_type} slot {target.slot_number}")

        ledger_service.reassign_slot(db, record.id, target.floor_number, target.slot_number)
        sync(db, source, None)
        sync(db, target, record)
        record_action(db, actor, "CHANGE_SLOT",
                      f"Changed slot from {source.slot_number} to {target.slot_number}"
                      f"{_floor_suffix(source.floor_number)}",
                      {"recordId": record.id, "floorNumber": source.floor_number,
                       "oldSlot": source.slot_number, "newSlot": target.slot_number,
                       "licensePlate": record.license_plate})
        return record

    return _run(db, "CHANGE_SLOT", actor, work)


def correct_plate(db: Session, slot_number: int, new_plate: str, actor: str,
                  floor_number: Optional[int] = None) -> ParkingRecord:
    def work():
        slot = find_slot(db, floor_number, slot_number)
        record = _locked_open_record(db, slot)
        old_plate = record.license_plate
        ledger_service.correct_plate(db, record.id, new_plate)
        sync(db, slot, record)
        record_action(db, actor, "UPDATE_LICENSE_PLATE",
                      f"Updated license plate from {old_plate} to {record.license_plate}",
                      {"recordId": record.id, "slotNumber": slot.slot_number,
                       "floorNumber": slot.floor_number, "oldLicensePlate": old_plate,
                       "newLicensePlate": record.license_plate})
        return record

    return _run(db, "UPDATE_LICENSE_PLATE", actor, work)
