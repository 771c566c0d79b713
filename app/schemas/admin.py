# app/schemas/admin.py
from pydantic import BaseModel
from datetime import datetime
from typing import Any, Optional


class ForceExitRequest(BaseModel):
    slot_number: int
    floor_number: Optional[int] = None


class ChangeSlotRequest(BaseModel):
    slot_number: int
    new_slot_number: int
    floor_number: Optional[int] = None


class CorrectPlateRequest(BaseModel):
    slot_number: int
    new_license_plate: str
    floor_number: Optional[int] = None


class AuditLogOut(BaseModel):
    id: int
    admin_username: str
    action: str
    description: Optional[str]
    details: Optional[Any]
    timestamp: datetime

    class Config:
        from_attributes = True


class DashboardStatsOut(BaseModel):
    total_slots: int
    available_slots: int
    occupied_slots: int
    vehicles_parked_today: int
    today_revenue: float
    currently_parked_vehicles: int

    class Config:
        from_attributes = True


class SlotDetailOut(BaseModel):
    floor_number: int
    slot_number: int
    vehicle_type: str
    occupied: bool
    record_id: Optional[int] = None
    license_plate: Optional[str] = None
    parked_vehicle_type: Optional[str] = None
    entry_time: Optional[datetime] = None
    duration_minutes: int
    billable_hours: int
    hourly_rate: float
    current_charge: float
    overdue: bool

    class Config:
        from_attributes = True
