"""
Read models for the admin dashboard: facility totals and per-slot detail.
Occupancy is counted from the ledger; reads take no locks.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.models.parking_record import ParkingRecord
from app.models.parking_slot import ParkingSlot
from app.services.billing_service import current_charge
from app.services.ledger_service import open_entries_by_location
from app.services.reconciliation_service import reconcile_slots
from app.services.slot_service import find_slot


@dataclass
class DashboardStats:
    total_slots: int
    available_slots: int
    occupied_slots: int
    vehicles_parked_today: int
    today_revenue: float
    currently_parked_vehicles: int


@dataclass
class SlotDetail:
    floor_number: int
    slot_number: int
    vehicle_type: str
    occupied: bool
    record_id: Optional[int] = None
    license_plate: Optional[str] = None
    parked_vehicle_type: Optional[str] = None
    entry_time: Optional[datetime] = None
    duration_minutes: int = 0
    billable_hours: int = 0
    hourly_rate: float = 0.0
    current_charge: float = 0.0
    overdue: bool = False


def dashboard_stats(db: Session, now: Optional[datetime] = None) -> DashboardStats:
    now = now or datetime.utcnow()
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    end_of_day = start_of_day + timedelta(days=1)

    locations = {(s.floor_number, s.slot_number) for s in db.query(ParkingSlot).all()}
    parked = open_entries_by_location(db)
    occupied = len(locations & set(parked))

    parked_today = db.query(func.count(ParkingRecord.id)).filter(
        ParkingRecord.entry_time >= start_of_day,
        ParkingRecord.entry_time < end_of_day,
    ).scalar() or 0
    revenue = db.query(func.sum(ParkingRecord.charge)).filter(
        ParkingRecord.exit_time >= start_of_day,
        ParkingRecord.exit_time < end_of_day,
    ).scalar() or 0.0

    return DashboardStats(
        total_slots=len(locations),
        available_slots=len(locations) - occupied,
        occupied_slots=occupied,
        vehicles_parked_today=parked_today,
        today_revenue=float(revenue),
        currently_parked_vehicles=len(parked),
    )


def slot_detail(db: Session, slot_number: int, floor_number: Optional[int] = None,
                now: Optional[datetime] = None) -> SlotDetail:
    """Occupancy and live charge preview for one slot; re-syncs its cache."""
    slot = find_slot(db, floor_number, slot_number)
    record = reconcile_slots(db, [slot]).get((slot.floor_number, slot.slot_number))

    detail = SlotDetail(floor_number=slot.floor_number, slot_number=slot.slot_number,
                        vehicle_type=slot.vehicle_type, occupied=record is not None)
    if record is None:
        return detail

    preview = current_charge(db, record, now)
    detail.record_id = record.id
    detail.license_plate = record.license_plate
    detail.parked_vehicle_type = record.vehicle_type
    detail.entry_time = record.entry_time
    detail.duration_minutes = preview.elapsed_minutes
    detail.billable_hours = preview.billable_hours
    detail.hourly_rate = preview.hourly_rate
    detail.current_charge = preview.amount
    detail.overdue = preview.overdue
    return detail
