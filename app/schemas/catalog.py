# app/schemas/catalog.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class FloorCreate(BaseModel):
    floor_number: int
    description: Optional[str] = None


class FloorOut(BaseModel):
    id: int
    floor_number: int
    description: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class SlotsCreate(BaseModel):
    floor_number: int
    vehicle_type: str
    start_slot_number: int
    number_of_slots: int = 1


class SlotOut(BaseModel):
    id: int
    floor_number: int
    slot_number: int
    vehicle_type: str
    occupied: bool
    record_id: Optional[int]
    license_plate: Optional[str]

    class Config:
        from_attributes = True


class RateUpdate(BaseModel):
    hourly_rate: float
    active: Optional[bool] = None


class RateOut(BaseModel):
    id: int
    vehicle_type: str
    hourly_rate: float
    active: bool
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
