"""
Occupancy ledger ("parking records").
One row per visit: open while exit_time is NULL, closed exactly once on exit.
The partial unique index allows at most one open row per (floor, slot); this is
the only source of truth for occupancy.
"""

from sqlalchemy import Column, Integer, String, DateTime, Float, Index
from app.database import Base


class ParkingRecord(Base):
    __tablename__ = "parking_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    license_plate = Column(String(50), nullable=False, index=True)
    vehicle_type = Column(String(20), nullable=False)
    floor_number = Column(Integer, nullable=False)
    slot_number = Column(Integer, nullable=False)
    entry_time = Column(DateTime, nullable=False, index=True)
    exit_time = Column(DateTime, index=True)     # NULL while parked
    duration_minutes = Column(Integer)           # set on exit
    billable_hours = Column(Integer)             # set on exit
    charge = Column(Float)                       # set on exit

    __table_args__ = (
        Index(
            "uq_open_record_per_slot",
            "floor_number",
            "slot_number",
            unique=True,
            postgresql_where=exit_time.is_(None),
            sqlite_where=exit_time.is_(None),
        ),
    )

    @property
    def is_open(self) -> bool:
        return self.exit_time is None

    def __repr__(self):
        state = "open" if self.exit_time is None else "closed"
        return (f"<ParkingRecord {self.id} plate={self.license_plate} "
                f"F{self.floor_number}-{self.slot_number} {state}>")
