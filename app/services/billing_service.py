"""
Billing calculator.

Billable hours: minimum 1; under 60 minutes is 1 hour; otherwise elapsed time
rounded up to the next full hour (60 → 1, 61 → 2, 121 → 3).
Charge = billable hours × hourly rate for the vehicle class.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from app.config import settings
from app.models.parking_record import ParkingRecord
from app.services.rate_service import get_hourly_rate


@dataclass
class ChargePreview:
    elapsed_minutes: int
    billable_hours: int
    hourly_rate: float
    amount: float
    overdue: bool


def billable_hours(elapsed_minutes: int) -> int:
    if elapsed_minutes < 60:
        return 1
    return math.ceil(elapsed_minutes / 60)


def elapsed_minutes(entry_time: datetime, until: datetime) -> int:
    """Whole minutes between entry and ``until``; never negative."""
    seconds = (until - entry_time).total_seconds()
    return max(0, int(seconds // 60))


def charge(db: Session, vehicle_type: Optional[str], hours: int) -> float:
    return hours * get_hourly_rate(db, vehicle_type)


def current_charge(db: Session, record: ParkingRecord, now: Optional[datetime] = None) -> ChargePreview:
    """Live charge for an open entry, without closing it."""
    now = now or datetime.utcnow()
    minutes = elapsed_minutes(record.entry_time, now)
    hours = billable_hours(minutes)
    rate = get_hourly_rate(db, record.vehicle_type)
    return ChargePreview(
        elapsed_minutes=minutes,
        billable_hours=hours,
        hourly_rate=rate,
        amount=hours * rate,
        overdue=minutes > settings.OVERDUE_AFTER_MINUTES,
    )
