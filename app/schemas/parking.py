# app/schemas/parking.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class ParkRequest(BaseModel):
    license_plate: str
    vehicle_type: str               # BIKE | CAR | MICROBUS | TRUCK
    preferred_slot: Optional[int] = None
    floor_number: Optional[int] = None


class ParkingRecordOut(BaseModel):
    id: int
    license_plate: str
    vehicle_type: str
    floor_number: int
    slot_number: int
    entry_time: datetime
    exit_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    billable_hours: Optional[int] = None
    charge: Optional[float] = None

    class Config:
        from_attributes = True


class SlotStatusOut(BaseModel):
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

    class Config:
        from_attributes = True
