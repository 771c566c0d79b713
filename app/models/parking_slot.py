"""
Parking slot catalog table.
occupied / record_id / license_plate are a cache of the ledger (parking_records),
owned by reconciliation_service. Never read them to decide whether a slot is free.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from app.database import Base


class ParkingSlot(Base):
    __tablename__ = "parking_slots"
    __table_args__ = (
        UniqueConstraint("floor_number", "slot_number", name="uq_slot_floor_number"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    floor_number = Column(Integer, ForeignKey("floors.floor_number"), nullable=False, index=True)
    slot_number = Column(Integer, nullable=False)
    vehicle_type = Column(String(20), nullable=False)   # BIKE | CAR | MICROBUS | TRUCK

    # Cached occupancy (advisory)
    occupied = Column(Boolean, default=False, nullable=False)
    record_id = Column(Integer)                 # open parking_records.id, if any
    license_plate = Column(String(50))
    cache_updated_at = Column(DateTime)

    def __repr__(self):
        return (f"<ParkingSlot F{self.floor_number}-{self.slot_number} "
                f"type={self.vehicle_type} occupied={self.occupied}>")
