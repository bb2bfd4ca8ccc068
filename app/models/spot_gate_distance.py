# app/models/spot_gate_distance.py
"""
Proximity table: precomputed spot ↔ gate distance, used only for ranking.
A spot with no row for a gate is never offered by the proximity strategies.
"""

from sqlalchemy import Column, Integer, Float, ForeignKey, Index
from app.database import Base


class SpotGateDistance(Base):
    __tablename__ = "spot_gate_distances"
    __table_args__ = (
        Index("ix_distance_gate_rank", "gate_id", "distance", "spot_id"),
    )

    spot_id = Column(Integer, ForeignKey("spots.id"), primary_key=True)
    gate_id = Column(Integer, ForeignKey("gates.id"), primary_key=True)
    distance = Column(Float, nullable=False)    # metres

    def __repr__(self):
        return f"<SpotGateDistance spot={self.spot_id} gate={self.gate_id} d={self.distance}>"
