# app/models/floor.py
"""
Floors table.
Holds the floor-level occupancy counter and the explicit active-zone pointer
used by the zone-based allocation strategy.
"""

from sqlalchemy import Column, Integer, String
from app.database import Base


class Floor(Base):
    __tablename__ = "floors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    level = Column(Integer, unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    capacity = Column(Integer, default=0, nullable=False)
    occupied_count = Column(Integer, default=0, nullable=False)
    active_zone_id = Column(Integer)          # zones.id of the single ACTIVE zone (null when none)

    def __repr__(self):
        return f"<Floor {self.level} {self.occupied_count}/{self.capacity} active_zone={self.active_zone_id}>"
