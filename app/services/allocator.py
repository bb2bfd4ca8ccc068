# app/services/allocator.py
"""
Concurrency-safe allocator.

allocate() runs the configured strategy inside an exclusive-access window
and then claims the candidate with the registry's conditional update:

  1. hold the strategy's search-scope locks (floor lock for zone-based,
     spot-type/gate lock for the proximity strategies)
  2. strategy.find_spot() → candidate, then commit the search
  3. hold the candidate's spot lock, try_reserve()
       lost  → commit, exclude the spot and search again (bounded by RESERVATION_MAX_RETRIES)
       won   → create the Ticket, occupy(), commit
  4. no candidate → commit any zone transitions, raise CapacityExhausted

Reservation, ticket, spot status and counters share one transaction, so a
failure or an abandoned call can never leave a claimed spot without a ticket:
the rollback (or closing the session uncommitted) undoes all of it.

SQLite holds one database-wide write lock per transaction, so a thread
never waits on an in-process lock while its session has a write open:
the search is committed before the spot lock is taken, and so is a lost
conditional UPDATE.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.models.enums import VEHICLE_SPOT_TYPE, TicketStatus, VehicleType
from app.models.spot import Spot
from app.models.ticket import Ticket
from app.services import occupancy_ledger, spot_registry
from app.services.errors import (
    CapacityExhausted,
    InvalidVehicleTypeError,
    InvariantViolation,
    TicketNotFoundError,
    TicketStateError,
)
from app.services.fee_service import calculate_fee
from app.services.gate_service import designated_exit_gate_id, validate_entry_gate
from app.services.lock_manager import KeyedLockManager, lock_manager, spot_key
from app.services.strategies import AllocationContext, AllocationStrategy, StrategyKind, get_strategy
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class Allocation:
    spot: Spot
    ticket: Ticket


def parse_vehicle_type(value) -> VehicleType:
    try:
        return VehicleType(value)
    except ValueError:
        raise InvalidVehicleTypeError(
            f"Unknown vehicle type '{value}'. Expected one of: {', '.join(v.value for v in VehicleType)}"
        ) from None


def build_context(db: Session, entry_gate_id: int, strategy: AllocationStrategy) -> AllocationContext:
    """
    Validate the entry gate and resolve its floor. The designated exit is
    resolved (and validated) only for the strategy that ranks by it.
    """
    gate = validate_entry_gate(db, entry_gate_id)
    exit_gate_id = None
    if strategy.kind == StrategyKind.NEAREST_TO_EXIT:
        exit_gate_id = designated_exit_gate_id(db)
    return AllocationContext(entry_gate_id=gate.id, floor_id=gate.floor_id, exit_gate_id=exit_gate_id)


def allocate(
    db: Session,
    vehicle_type,
    entry_gate_id: int,
    plate_number: Optional[str] = None,
    strategy: Optional[AllocationStrategy] = None,
    locks: KeyedLockManager = lock_manager,
    timeout: Optional[float] = None,
    max_retries: Optional[int] = None,
) -> Allocation:
    """
    Claim one spot for the vehicle and open its ticket.
    Raises CapacityExhausted, ContentionTimeout, or a validation error.
    """
    vehicle_type = parse_vehicle_type(vehicle_type)
    spot_type = VEHICLE_SPOT_TYPE[vehicle_type]
    strategy = strategy or get_strategy(settings.ALLOCATION_STRATEGY)
    timeout = settings.LOCK_TIMEOUT_SECONDS if timeout is None else timeout
    max_retries = settings.RESERVATION_MAX_RETRIES if max_retries is None else max_retries
    context = build_context(db, entry_gate_id, strategy)
    db.commit()   # end the read transaction before waiting on any lock

    try:
        with locks.hold(strategy.lock_scope(context, spot_type), timeout):
            lost = set()
            for attempt in range(1, max_retries + 1):
                spot = strategy.find_spot(db, spot_type, context, exclude=lost)
                if spot is None:
                    db.commit()   # keep zone transitions made during the search
                    logger.info(f"[ALLOC] {vehicle_type.value} at gate {entry_gate_id}: lot full for {spot_type.value}")
                    raise CapacityExhausted(spot_type)

                spot_id, spot_code = spot.id, spot.code
                # No write transaction may stay open while waiting on a spot lock
                db.commit()

                with locks.hold([spot_key(spot_id)], timeout):
                    if not spot_registry.try_reserve(db, spot_id):
                        db.commit()   # the failed UPDATE still opened a write transaction
                        lost.add(spot_id)
                        logger.info(f"[ALLOC] Lost race for spot {spot_code} (attempt {attempt}/{max_retries})")
                        continue

                    ticket = Ticket(
                        plate_number=plate_number,
                        vehicle_type=vehicle_type.value,
                        spot_id=spot_id,
                        entry_gate_id=entry_gate_id,
                        entry_time=datetime.utcnow(),
                        status=TicketStatus.ACTIVE.value,
                    )
                    db.add(ticket)
                    db.flush()
                    occupancy_ledger.occupy(db, spot_id, ticket.id)
                    db.commit()

                logger.info(
                    f"[ALLOC] {vehicle_type.value} plate={plate_number} → spot {spot_code} "
                    f"(ticket {ticket.id}, {strategy.kind.value})"
                )
                return Allocation(spot=spot, ticket=ticket)

            db.commit()
            logger.warning(f"[ALLOC] Gave up after {max_retries} lost reservations for {spot_type.value}")
            raise CapacityExhausted(spot_type, reason=f"lost {max_retries} reservation races")
    except CapacityExhausted:
        raise
    except Exception:
        db.rollback()
        raise


def _ticket_to_close(db: Session, spot_id: int, ticket_id: Optional[int]) -> Optional[Ticket]:
    if ticket_id is None:
        return (
            db.query(Ticket)
            .filter(Ticket.spot_id == spot_id, Ticket.status == TicketStatus.ACTIVE.value)
            .order_by(Ticket.id.asc())
            .first()
        )
    ticket = db.get(Ticket, ticket_id)
    if ticket is None:
        raise TicketNotFoundError(f"Ticket {ticket_id} not found")
    db.refresh(ticket)   # a concurrent exit may have closed it while we waited
    if ticket.status != TicketStatus.ACTIVE.value:
        raise TicketStateError(f"Ticket {ticket_id} is already {ticket.status}")
    if ticket.spot_id != spot_id:
        raise TicketStateError(f"Ticket {ticket_id} is for spot {ticket.spot_id}, not spot {spot_id}")
    return ticket


def release(db: Session, spot_id: int, locks: KeyedLockManager = lock_manager,
            timeout: Optional[float] = None, ticket_id: Optional[int] = None,
            exit_gate_id: Optional[int] = None, exit_time: Optional[datetime] = None) -> bool:
    """
    Idempotent release of a spot. False when it was already vacant.

    The ACTIVE ticket bound to the spot (or ticket_id, which must be ACTIVE
    and bound to it) is closed with its fee in the same commit, so a ticket
    never outlives its occupied spot.
    """
    timeout = settings.LOCK_TIMEOUT_SECONDS if timeout is None else timeout
    try:
        with locks.hold([spot_key(spot_id)], timeout):
            ticket = _ticket_to_close(db, spot_id, ticket_id)
            freed = occupancy_ledger.free(db, spot_id, ticket_id=ticket.id if ticket else None)
            if ticket is not None:
                if not freed:
                    raise InvariantViolation(
                        f"Active ticket {ticket.id} points at spot {spot_id}, which is already vacant",
                        spot_id=spot_id,
                    )
                exit_time = exit_time or datetime.utcnow()
                ticket.exit_gate_id = exit_gate_id
                ticket.exit_time = exit_time
                ticket.fee = calculate_fee(VEHICLE_SPOT_TYPE[VehicleType(ticket.vehicle_type)],
                                           ticket.entry_time, exit_time)
                ticket.status = TicketStatus.CLOSED.value
            db.commit()
    except Exception:
        db.rollback()
        raise
    if freed:
        logger.info(f"[ALLOC] Spot {spot_id} released" + (f", ticket {ticket.id} closed" if ticket else ""))
    return freed
