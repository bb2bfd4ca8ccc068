# app/models/ticket.py
"""
Tickets table.
One row per parked vehicle. Created in the same transaction that occupies
the spot and closed in the same transaction that frees it.
spot_id never changes after creation.
"""

from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey
from app.database import Base
from app.models.enums import TicketStatus


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    plate_number = Column(String(50), index=True)
    vehicle_type = Column(String(20), nullable=False)        # MOTORCYCLE | CAR | TRUCK
    spot_id = Column(Integer, ForeignKey("spots.id"), nullable=False, index=True)
    entry_gate_id = Column(Integer, ForeignKey("gates.id"), nullable=False)
    entry_time = Column(DateTime, nullable=False, index=True)
    exit_gate_id = Column(Integer, ForeignKey("gates.id"))
    exit_time = Column(DateTime)
    status = Column(String(20), default=TicketStatus.ACTIVE.value, nullable=False, index=True)
    fee = Column(Float)                                        # set on exit

    def __repr__(self):
        return f"<Ticket {self.id} plate={self.plate_number} spot={self.spot_id} status={self.status}>"
