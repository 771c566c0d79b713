"""
Hourly rate per vehicle class ("parking charges").
Inactive rows are ignored by billing, which then uses the built-in defaults.
"""

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime
from app.database import Base


class RateEntry(Base):
    __tablename__ = "parking_charges"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_type = Column(String(20), unique=True, nullable=False, index=True)
    hourly_rate = Column(Float, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<RateEntry {self.vehicle_type} {self.hourly_rate}/h active={self.active}>"
