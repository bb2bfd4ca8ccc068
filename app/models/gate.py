# app/models/gate.py
"""Gates table — entry/exit points of a floor."""

from sqlalchemy import Column, Integer, String, ForeignKey
from app.database import Base
from app.models.enums import GateStatus


class Gate(Base):
    __tablename__ = "gates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(50), unique=True, nullable=False)
    floor_id = Column(Integer, ForeignKey("floors.id"), nullable=False)
    gate_type = Column(String(20), nullable=False)              # ENTRY | EXIT | ENTRY_EXIT
    status = Column(String(30), default=GateStatus.OPERATIONAL.value, nullable=False)

    def __repr__(self):
        return f"<Gate {self.code} type={self.gate_type} status={self.status}>"
