"""Floors, slots and hourly rates: administrative catalog endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.routers.admin import require_actor
from app.schemas.catalog import FloorCreate, FloorOut, RateOut, RateUpdate, SlotOut, SlotsCreate
from app.schemas.parking import SlotStatusOut
from app.services import rate_service, slot_service
from app.services.reconciliation_service import slot_statuses

router = APIRouter()


@router.post("/admin/floors", response_model=FloorOut, summary="Create a floor")
def create_floor(body: FloorCreate, actor: str = Depends(require_actor), db: Session = Depends(get_db)):
    return slot_service.create_floor(db, body.floor_number, body.description, actor=actor)


@router.get("/admin/floors", response_model=list[FloorOut], summary="List floors")
def list_floors(db: Session = Depends(get_db)):
    return slot_service.list_floors(db)


@router.get("/admin/floors/{floor_number}", response_model=FloorOut)
def get_floor(floor_number: int, db: Session = Depends(get_db)):
    return slot_service.get_floor(db, floor_number)


@router.get("/admin/floors/{floor_number}/slots", response_model=list[SlotStatusOut])
def get_floor_slots(floor_number: int, db: Session = Depends(get_db)):
    """Slots on one floor, occupancy read from the ledger."""
    slot_service.get_floor(db, floor_number)
    return slot_statuses(db, floor_number)


@router.post("/admin/slots/add", response_model=list[SlotOut], summary="Add slots to a floor")
def add_slots(body: SlotsCreate, actor: str = Depends(require_actor), db: Session = Depends(get_db)):
    return slot_service.add_slots(db, body.floor_number, body.vehicle_type,
                                  body.start_slot_number, body.number_of_slots, actor=actor)


@router.delete("/admin/slots/{slot_id}", summary="Delete an empty slot")
def delete_slot(slot_id: int, actor: str = Depends(require_actor), db: Session = Depends(get_db)):
    slot_service.delete_slot(db, slot_id, actor=actor)
    return {"id": slot_id, "status": "deleted"}


@router.get("/admin/charges", response_model=list[RateOut], summary="List hourly rates")
def list_charges(db: Session = Depends(get_db)):
    return rate_service.list_rates(db)


@router.get("/admin/charges/{vehicle_type}", response_model=RateOut)
def get_charge(vehicle_type: str, db: Session = Depends(get_db)):
    rate = rate_service.get_rate(db, vehicle_type)
    if not rate:
        raise HTTPException(status_code=404, detail=f"No configured rate for {vehicle_type.upper()}")
    return rate


@router.put("/admin/charges/{vehicle_type}", response_model=RateOut, summary="Set an hourly rate")
def update_charge(vehicle_type: str, body: RateUpdate, actor: str = Depends(require_actor),
                  db: Session = Depends(get_db)):
    return rate_service.update_rate(db, vehicle_type, body.hourly_rate, active=body.active, actor=actor)
