# app/schemas/ticket.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class TicketCreate(BaseModel):
    plate_number: Optional[str] = None
    vehicle_type: str          # MOTORCYCLE | CAR | TRUCK
    entry_gate_id: int


class TicketExit(BaseModel):
    exit_gate_id: int


class TicketOut(BaseModel):
    id: int
    plate_number: Optional[str]
    vehicle_type: str
    spot_id: int
    spot_code: Optional[str] = None
    entry_gate_id: int
    entry_time: datetime
    exit_gate_id: Optional[int]
    exit_time: Optional[datetime]
    status: str
    fee: Optional[float]

    class Config:
        from_attributes = True
