"""
Slot catalog: floors and the slots on them.

Slots are identified by (floor_number, slot_number). Where a caller omits the
floor, the lowest-numbered floor that has the slot number is used. Occupancy is
never decided here; deletion asks the ledger.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.config import settings
from app.errors import DuplicateFloor, DuplicateSlot, FloorNotFound, SlotNotFound, SlotOccupied, ValidationError
from app.models.floor import Floor
from app.models.parking_slot import ParkingSlot
from app.models.vehicle_class import normalize_vehicle_class
from app.services.audit_service import record_action
from app.services.ledger_service import find_open
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Initial layout for an empty database: 5 bikes, 10 cars, 3 microbuses, 2 trucks
DEFAULT_LAYOUT = ["BIKE"] * 5 + ["CAR"] * 10 + ["MICROBUS"] * 3 + ["TRUCK"] * 2


# ── Floors ────────────────────────────────────────────────────────────────────

def create_floor(db: Session, floor_number: int, description: Optional[str] = None,
                 actor: Optional[str] = None) -> Floor:
    if floor_number is None or floor_number < 1:
        raise ValidationError("Floor number must be a positive integer")
    if db.query(Floor).filter(Floor.floor_number == floor_number).first():
        raise DuplicateFloor(f"Floor {floor_number} already exists")

    floor = Floor(floor_number=floor_number, description=description, created_at=datetime.utcnow())
    db.add(floor)
    if actor:
        record_action(db, actor, "ADD_FLOOR", f"Added floor {floor_number}",
                      {"floorNumber": floor_number, "description": description})
    db.commit()
    logger.info(f"[CATALOG] Created floor {floor_number}")
    return floor


def list_floors(db: Session):
    return db.query(Floor).order_by(Floor.floor_number).all()


def get_floor(db: Session, floor_number: int) -> Floor:
    floor = db.query(Floor).filter(Floor.floor_number == floor_number).first()
    if not floor:
        raise FloorNotFound(f"Floor {floor_number} not found")
    return floor


def ensure_default_floor(db: Session) -> Floor:
    """The floor used by single-floor deployments; created on first use."""
    number = settings.DEFAULT_FLOOR_NUMBER
    floor = db.query(Floor).filter(Floor.floor_number == number).first()
    if floor:
        return floor
    floor = Floor(floor_number=number, description="Ground Floor", created_at=datetime.utcnow())
    db.add(floor)
    db.commit()
    logger.info(f"[CATALOG] Initialized default floor {number}")
    return floor


# ── Slots ─────────────────────────────────────────────────────────────────────

def find_slot(db: Session, floor_number: Optional[int], slot_number: int) -> ParkingSlot:
    if slot_number is None or slot_number < 1:
        raise ValidationError("Slot number must be at least 1")
    q = db.query(ParkingSlot).filter(ParkingSlot.slot_number == slot_number)
    if floor_number is not None:
        q = q.filter(ParkingSlot.floor_number == floor_number)
    slot = q.order_by(ParkingSlot.floor_number).first()
    if not slot:
        where = f" on floor {floor_number}" if floor_number is not None else ""
        raise SlotNotFound(f"Slot {slot_number}{where} does not exist")
    return slot


def list_slots(db: Session, floor_number: Optional[int] = None):
    """Catalog rows ordered by (floor, slot). Cache fields are not reconciled here."""
    q = db.query(ParkingSlot)
    if floor_number is not None:
        q = q.filter(ParkingSlot.floor_number == floor_number)
    return q.order_by(ParkingSlot.floor_number, ParkingSlot.slot_number).all()


def _new_slot(db: Session, floor_number: int, slot_number: int, vehicle_type: str) -> ParkingSlot:
    if slot_number is None or slot_number < 1:
        raise ValidationError("Slot number must be at least 1")
    exists = db.query(ParkingSlot).filter(
        ParkingSlot.floor_number == floor_number,
        ParkingSlot.slot_number == slot_number,
    ).first()
    if exists:
        raise DuplicateSlot(f"Slot {slot_number} already exists on floor {floor_number}")

    slot = ParkingSlot(floor_number=floor_number, slot_number=slot_number,
                       vehicle_type=vehicle_type, occupied=False)
    db.add(slot)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise DuplicateSlot(f"Slot {slot_number} already exists on floor {floor_number}")
    return slot


def create_slot(db: Session, floor_number: int, slot_number: int, vehicle_type: str) -> ParkingSlot:
    vehicle_type = normalize_vehicle_class(vehicle_type)
    get_floor(db, floor_number)
    slot = _new_slot(db, floor_number, slot_number, vehicle_type)
    db.commit()
    logger.info(f"[CATALOG] Created slot F{floor_number}-{slot_number} ({vehicle_type})")
    return slot


def add_slots(db: Session, floor_number: int, vehicle_type: str, start_slot_number: int,
              number_of_slots: int, actor: Optional[str] = None):
    """Create a consecutive run of slots; all or nothing."""
    vehicle_type = normalize_vehicle_class(vehicle_type)
    get_floor(db, floor_number)
    if start_slot_number is None or start_slot_number < 1:
        raise ValidationError("Start slot number must be at least 1")
    if number_of_slots is None or number_of_slots < 1:
        raise ValidationError("Number of slots must be at least 1")

    try:
        created = [
            _new_slot(db, floor_number, start_slot_number + i, vehicle_type)
            for i in range(number_of_slots)
        ]
    except DuplicateSlot:
        db.rollback()
        raise

    if actor:
        record_action(db, actor, "ADD_SLOTS",
                      f"Added {number_of_slots} {vehicle_type} slot(s) to floor {floor_number}",
                      {"floorNumber": floor_number, "vehicleType": vehicle_type,
                       "startSlotNumber": start_slot_number, "numberOfSlots": number_of_slots})
    db.commit()
    logger.info(f"[CATALOG] Added {number_of_slots} {vehicle_type} slots to floor {floor_number}")
    return created


def delete_slot(db: Session, slot_id: int, actor: Optional[str] = None) -> None:
    slot = db.query(ParkingSlot).filter(ParkingSlot.id == slot_id).first()
    if not slot:
        raise SlotNotFound(f"Slot {slot_id} not found")
    if find_open(db, slot.floor_number, slot.slot_number, for_update=True) is not None:
        raise SlotOccupied("Cannot delete occupied slot. Please exit the vehicle first.")

    floor_number, slot_number = slot.floor_number, slot.slot_number
    db.delete(slot)
    if actor:
        record_action(db, actor, "DELETE_SLOT",
                      f"Deleted slot {slot_number} from floor {floor_number}",
                      {"slotId": slot_id, "slotNumber": slot_number, "floorNumber": floor_number})
    db.commit()
    logger.info(f"[CATALOG] Deleted slot F{floor_number}-{slot_number}")


def seed_default_layout(db: Session) -> int:
    """Populate an empty catalog with the default floor and 20 slots. Returns slots created."""
    if db.query(ParkingSlot).count() > 0:
        return 0
    floor = ensure_default_floor(db)
    for number, vehicle_type in enumerate(DEFAULT_LAYOUT, start=1):
        _new_slot(db, floor.floor_number, number, vehicle_type)
    db.commit()
    logger.info(f"[CATALOG] Initialized {len(DEFAULT_LAYOUT)} parking slots on floor {floor.floor_number}")
    return len(DEFAULT_LAYOUT)
