"""
Rate table: the active hourly rate per vehicle class.

Billing asks for ``get_hourly_rate``; an active RateEntry wins, otherwise the
built-in DEFAULT_HOURLY_RATES table applies. The defaults are fixed data, not
configuration, so a fresh install bills sensibly before any rate is set.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from app.errors import ValidationError
from app.models.rate_entry import RateEntry
from app.models.vehicle_class import VehicleClass, normalize_vehicle_class
from app.services.audit_service import record_action
from app.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_HOURLY_RATES = {
    VehicleClass.BIKE.value: 50.0,
    VehicleClass.CAR.value: 100.0,
    VehicleClass.MICROBUS.value: 150.0,
    VehicleClass.TRUCK.value: 200.0,
}
FALLBACK_HOURLY_RATE = 100.0


def default_hourly_rate(vehicle_type: Optional[str]) -> float:
    if vehicle_type is None:
        return FALLBACK_HOURLY_RATE
    return DEFAULT_HOURLY_RATES.get(str(vehicle_type).upper(), FALLBACK_HOURLY_RATE)


def get_hourly_rate(db: Session, vehicle_type: Optional[str]) -> float:
    """Active configured rate for the class, else the built-in default."""
    if vehicle_type is None:
        return FALLBACK_HOURLY_RATE
    rate = db.query(RateEntry).filter(
        RateEntry.vehicle_type == str(vehicle_type).upper(),
        RateEntry.active == True,  # noqa: E712
    ).first()
    if rate:
        return rate.hourly_rate
    return default_hourly_rate(vehicle_type)


def list_rates(db: Session):
    return db.query(RateEntry).order_by(RateEntry.vehicle_type).all()


def get_rate(db: Session, vehicle_type: str):
    """Configured RateEntry for a class, or None."""
    vehicle_type = normalize_vehicle_class(vehicle_type)
    return db.query(RateEntry).filter(RateEntry.vehicle_type == vehicle_type).first()


def update_rate(db: Session, vehicle_type: str, hourly_rate: float,
                active: Optional[bool] = None, actor: Optional[str] = None):
    """Create or update the rate for a class. Audited when an actor is given."""
    vehicle_type = normalize_vehicle_class(vehicle_type)
    if hourly_rate is None or hourly_rate <= 0:
        raise ValidationError("Hourly rate must be greater than zero")

    rate = db.query(RateEntry).filter(RateEntry.vehicle_type == vehicle_type).first()
    previous = rate.hourly_rate if rate else None
    if rate is None:
        rate = RateEntry(vehicle_type=vehicle_type, hourly_rate=hourly_rate,
                         active=True if active is None else active)
        db.add(rate)
    else:
        rate.hourly_rate = hourly_rate
        if active is not None:
            rate.active = active
    rate.updated_at = datetime.utcnow()

    if actor:
        record_action(db, actor, "UPDATE_CHARGE",
                      f"Updated {vehicle_type} hourly rate to {hourly_rate}",
                      {"vehicleType": vehicle_type, "oldRate": previous,
                       "newRate": hourly_rate, "active": rate.active})
    db.commit()
    logger.info(f"[RATES] {vehicle_type} = {hourly_rate}/h active={rate.active}")
    return rate
