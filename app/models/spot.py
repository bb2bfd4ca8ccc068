# app/models/spot.py
"""
Spots table — the durable record of every spot's identity, type, and state.
Status is written only by app.services.spot_registry.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from app.database import Base
from app.models.enums import SpotStatus


class Spot(Base):
    __tablename__ = "spots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(50), unique=True, nullable=False)      # e.g. "1A-07"
    floor_id = Column(Integer, ForeignKey("floors.id"), nullable=False, index=True)
    zone_id = Column(Integer, ForeignKey("zones.id"), nullable=False, index=True)
    spot_type = Column(String(20), nullable=False, index=True)  # MOTORCYCLE | COMPACT | LARGE
    status = Column(String(20), default=SpotStatus.VACANT.value, nullable=False, index=True)
    ticket_id = Column(Integer)                                 # tickets.id while OCCUPIED
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<Spot {self.code} type={self.spot_type} status={self.status}>"
