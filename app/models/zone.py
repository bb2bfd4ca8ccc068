# app/models/zone.py
"""
Zones table.
A fill-ordered group of spots on one floor. Status moves
AVAILABLE → ACTIVE → FULL under app.services.zone_state only.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from app.database import Base
from app.models.enums import ZoneStatus


class Zone(Base):
    __tablename__ = "zones"
    __table_args__ = (
        UniqueConstraint("floor_id", "fill_priority", name="uq_zone_floor_priority"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    floor_id = Column(Integer, ForeignKey("floors.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    status = Column(String(20), default=ZoneStatus.AVAILABLE.value, nullable=False)
    fill_priority = Column(Integer, nullable=False)
    capacity = Column(Integer, default=0, nullable=False)
    occupied_count = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<Zone {self.name} floor={self.floor_id} prio={self.fill_priority} status={self.status}>"
