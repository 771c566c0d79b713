"""
Vehicle classes a slot can be restricted to.
Closed set. Billing defaults and slot restrictions are keyed by these values.
"""

from enum import Enum

from app.errors import ValidationError


class VehicleClass(str, Enum):
    BIKE = "BIKE"
    CAR = "CAR"
    MICROBUS = "MICROBUS"
    TRUCK = "TRUCK"


def normalize_vehicle_class(value) -> str:
    """Case-insensitive parse of a vehicle class; returns the canonical string."""
    if isinstance(value, VehicleClass):
        return value.value
    if value is None or not str(value).strip():
        raise ValidationError("Vehicle type is required")
    candidate = str(value).strip().upper()
    try:
        return VehicleClass(candidate).value
    except ValueError:
        allowed = ", ".join(v.value for v in VehicleClass)
        raise ValidationError(f"Unknown vehicle type '{value}' (expected one of: {allowed})")
