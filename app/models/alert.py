# app/models/alert.py
"""
Alerts table — operational notices raised by the allocation core.
occupancy_high: a floor crossed OCCUPANCY_ALERT_THRESHOLD.
invariant_violation: the ledger detected state that only a bug can produce.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text
from app.database import Base


class Alert(Base):
    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    alert_type = Column(String(50), nullable=False, index=True)
    floor_id = Column(Integer)
    zone_id = Column(Integer)
    spot_id = Column(Integer)
    description = Column(Text)
    is_resolved = Column(Integer, default=0, nullable=False)
    triggered_at = Column(DateTime, nullable=False, index=True)
    resolved_at = Column(DateTime)

    def __repr__(self):
        return f"<Alert {self.id} type={self.alert_type} resolved={self.is_resolved}>"
