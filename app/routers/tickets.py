# app/routers/tickets.py
"""Vehicle entry (allocate + open ticket) and exit (free spot + close ticket) endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.ticket import TicketCreate, TicketExit, TicketOut
from app.services.entry_exit_service import exit_vehicle, get_ticket, park_vehicle, spot_for_ticket

router = APIRouter()


def _with_spot_code(db: Session, ticket):
    spot = spot_for_ticket(db, ticket)
    ticket.spot_code = spot.code if spot else None
    return ticket


@router.post("/tickets", response_model=TicketOut, status_code=status.HTTP_201_CREATED,
             summary="Vehicle entry — allocate a spot and open a ticket")
def create_ticket(body: TicketCreate, db: Session = Depends(get_db)):
    """409 when the lot is full for this vehicle type, 503 when allocation is contended."""
    allocation = park_vehicle(db, body.plate_number, body.vehicle_type, body.entry_gate_id)
    return _with_spot_code(db, allocation.ticket)


@router.post("/tickets/{ticket_id}/exit", response_model=TicketOut,
             summary="Vehicle exit — free the spot, close the ticket, compute the fee")
def close_ticket(ticket_id: int, body: TicketExit, db: Session = Depends(get_db)):
    ticket = exit_vehicle(db, ticket_id, body.exit_gate_id)
    return _with_spot_code(db, ticket)


@router.get("/tickets/{ticket_id}", response_model=TicketOut, summary="Look up a ticket")
def read_ticket(ticket_id: int, db: Session = Depends(get_db)):
    return _with_spot_code(db, get_ticket(db, ticket_id))
