# app/services/entry_exit_service.py
"""
Entry/exit workflow around the allocation core.

  park_vehicle → validate → allocator.allocate (spot + ticket, one commit)
                 → occupancy alert past OCCUPANCY_ALERT_THRESHOLD
  exit_vehicle → validate exit gate → allocator.release (free spot + close ticket + fee, one commit)

Invariant violations are rolled back, logged at CRITICAL, stored as an
alert, and re-raised. Payment settlement happens outside this service.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.models.enums import TicketStatus
from app.models.spot import Spot
from app.models.ticket import Ticket
from app.services import allocator
from app.services.alert_service import check_floor_occupancy, record_invariant_violation
from app.services.errors import InvariantViolation, TicketNotFoundError, TicketStateError
from app.services.gate_service import validate_exit_gate
from app.utils.logger import get_logger

logger = get_logger(__name__)


def get_ticket(db: Session, ticket_id: int) -> Ticket:
    ticket = db.get(Ticket, ticket_id)
    if ticket is None:
        raise TicketNotFoundError(f"Ticket {ticket_id} not found")
    return ticket


def park_vehicle(db: Session, plate_number: Optional[str], vehicle_type, entry_gate_id: int,
                 strategy=None) -> allocator.Allocation:
    try:
        allocation = allocator.allocate(db, vehicle_type, entry_gate_id,
                                        plate_number=plate_number, strategy=strategy)
    except InvariantViolation as exc:
        record_invariant_violation(db, exc)
        raise

    logger.info(f"[ENTRY] Plate={plate_number} | Gate={entry_gate_id} | "
                f"Spot={allocation.spot.code} | Ticket={allocation.ticket.id}")
    check_floor_occupancy(db, allocation.spot.floor_id)
    return allocation


def exit_vehicle(db: Session, ticket_id: int, exit_gate_id: int,
                 exit_time: Optional[datetime] = None) -> Ticket:
    ticket = get_ticket(db, ticket_id)
    if ticket.status != TicketStatus.ACTIVE.value:
        raise TicketStateError(f"Ticket {ticket_id} is already {ticket.status}")
    validate_exit_gate(db, exit_gate_id)

    exit_time = exit_time or datetime.utcnow()
    if exit_time < ticket.entry_time:
        raise TicketStateError(f"Exit time {exit_time} is before entry time {ticket.entry_time}")

    try:
        allocator.release(db, ticket.spot_id, ticket_id=ticket.id,
                          exit_gate_id=exit_gate_id, exit_time=exit_time)
    except InvariantViolation as exc:
        record_invariant_violation(db, exc)
        raise

    duration_min = int((exit_time - ticket.entry_time).total_seconds() // 60)
    logger.info(f"[EXIT] Ticket={ticket.id} | Plate={ticket.plate_number} | "
                f"{duration_min} min | fee={ticket.fee:.2f}")
    return ticket


def spot_for_ticket(db: Session, ticket: Ticket) -> Spot:
    return db.get(Spot, ticket.spot_id)
