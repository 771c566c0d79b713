"""Vehicle-facing entry/exit endpoints and the live slot board."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from app.database import get_db
from app.schemas.parking import ParkRequest, ParkingRecordOut, SlotStatusOut
from app.services.allocation_service import allocate
from app.services.exit_service import exit_by_plate, exit_by_slot
from app.services.reconciliation_service import slot_statuses

router = APIRouter()


@router.post("/parking/park", response_model=ParkingRecordOut, summary="Park a vehicle")
def park(body: ParkRequest, db: Session = Depends(get_db)):
    """Allocates a slot (preferred slot first if given) and opens a parking record."""
    return allocate(db, body.license_plate, body.vehicle_type,
                    preferred_slot=body.preferred_slot, floor_number=body.floor_number)


@router.post("/parking/exit-by-slot", response_model=ParkingRecordOut, summary="Exit by slot")
def exit_slot(slot_number: int, floor_number: Optional[int] = None, db: Session = Depends(get_db)):
    """Closes the slot's open record and returns it with the charge."""
    return exit_by_slot(db, slot_number, floor_number)


@router.post("/parking/exit-by-plate/{plate}", response_model=ParkingRecordOut, summary="Exit by plate")
def exit_plate(plate: str, db: Session = Depends(get_db)):
    return exit_by_plate(db, plate)


@router.get("/parking/slots", response_model=list[SlotStatusOut], summary="Slot board")
def get_slots(floor_number: Optional[int] = None, db: Session = Depends(get_db)):
    """All slots ordered by floor then slot number. Occupancy comes from the ledger."""
    return slot_statuses(db, floor_number)
