"""
Floors of the facility.
Slots reference floors by floor_number; a default floor covers single-floor sites.
"""

from sqlalchemy import Column, Integer, String, DateTime
from app.database import Base


class Floor(Base):
    __tablename__ = "floors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    floor_number = Column(Integer, unique=True, nullable=False, index=True)
    description = Column(String(200))
    created_at = Column(DateTime)

    def __repr__(self):
        return f"<Floor {self.floor_number} '{self.description}'>"
