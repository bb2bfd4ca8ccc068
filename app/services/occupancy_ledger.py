# app/services/occupancy_ledger.py
"""
Occupancy Ledger — spot occupy/free transitions together with the zone and
floor occupied counters, in the caller's transaction.

Counters are maintained incrementally with SQL-side arithmetic
(occupied_count = occupied_count ± 1) and are never recomputed from the
spot table on the allocation path.
"""

from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session
from sqlalchemy.orm.util import identity_key

from app.models.enums import SpotStatus
from app.models.floor import Floor
from app.models.zone import Zone
from app.services import spot_registry
from app.services.errors import InvariantViolation, SpotNotFoundError
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _bump(db: Session, model, row_id: int, delta: int) -> bool:
    stmt = (
        update(model)
        .where(model.id == row_id)
        .values(occupied_count=model.occupied_count + delta)
        .execution_options(synchronize_session=False)
    )
    if delta < 0:
        stmt = stmt.where(model.occupied_count >= -delta)
    return db.execute(stmt).rowcount == 1


def _adjust_counters(db: Session, spot, delta: int):
    zone_id, floor_id = spot.zone_id, spot.floor_id
    if not _bump(db, Zone, zone_id, delta):
        raise InvariantViolation(f"Zone {zone_id} counter would go negative",
                                 spot_id=spot.id, zone_id=zone_id, floor_id=floor_id)
    if not _bump(db, Floor, floor_id, delta):
        raise InvariantViolation(f"Floor {floor_id} counter would go negative",
                                 spot_id=spot.id, zone_id=zone_id, floor_id=floor_id)
    # Loaded zone/floor rows now hold stale counters
    for model, row_id in ((Zone, zone_id), (Floor, floor_id)):
        cached = db.identity_map.get(identity_key(model, row_id))
        if cached is not None:
            db.expire(cached, ["occupied_count"])


def _require_spot(db: Session, spot_id: int):
    spot = spot_registry.get_spot(db, spot_id)
    if spot is None:
        raise SpotNotFoundError(f"Spot {spot_id} does not exist")
    return spot


def occupy(db: Session, spot_id: int, ticket_id: int):
    """
    RESERVED/VACANT → OCCUPIED for ticket_id, counters +1.
    Occupying again for the same ticket is a no-op. Any other OCCUPIED
    state means two claims were committed for one spot.
    """
    spot = _require_spot(db, spot_id)
    if not spot_registry.mark_occupied(db, spot_id, ticket_id):
        db.refresh(spot)
        if spot.status == SpotStatus.OCCUPIED.value and spot.ticket_id == ticket_id:
            return spot
        raise InvariantViolation(
            f"Spot {spot.code} is {spot.status} for ticket {spot.ticket_id}; cannot occupy for ticket {ticket_id}",
            spot_id=spot.id, zone_id=spot.zone_id, floor_id=spot.floor_id,
        )

    _adjust_counters(db, spot, +1)
    logger.debug(f"[LEDGER] Spot {spot.code} occupied by ticket {ticket_id}")
    return spot


def free(db: Session, spot_id: int, ticket_id: Optional[int] = None) -> bool:
    """
    OCCUPIED → VACANT, counters -1. Returns False when the spot was already
    VACANT (repeat release). With ticket_id, the spot must be held by that ticket.
    """
    spot = _require_spot(db, spot_id)
    db.refresh(spot)
    if (ticket_id is not None and spot.status == SpotStatus.OCCUPIED.value
            and spot.ticket_id != ticket_id):
        raise InvariantViolation(
            f"Spot {spot.code} is held by ticket {spot.ticket_id}, not ticket {ticket_id}",
            spot_id=spot.id, zone_id=spot.zone_id, floor_id=spot.floor_id,
        )

    previous = spot_registry.release(db, spot_id)
    if previous is None:
        logger.debug(f"[LEDGER] Spot {spot_id} already vacant — release ignored")
        return False
    if previous == SpotStatus.OCCUPIED:
        _adjust_counters(db, spot, -1)
    logger.debug(f"[LEDGER] Spot {spot.code} freed (was {previous.value})")
    return True
