# app/services/spot_registry.py
"""
Spot Registry — the single writer of Spot.status.

Every transition is a conditional UPDATE whose WHERE clause restates the
status it expects, so the vacancy check and the claim are one statement.
A rowcount of 0 means another transaction got there first.

  VACANT ──try_reserve──▶ RESERVED ──mark_occupied──▶ OCCUPIED
     ▲                                                   │
     └──────────────────────release──────────────────────┘
"""

from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session
from sqlalchemy.orm.util import identity_key

from app.models.enums import SpotStatus, SpotType
from app.models.spot import Spot
from app.models.spot_gate_distance import SpotGateDistance
from app.utils.logger import get_logger

logger = get_logger(__name__)


def get_spot(db: Session, spot_id: int) -> Optional[Spot]:
    return db.get(Spot, spot_id)


def find_candidates(
    db: Session,
    spot_type: SpotType,
    zone_id: Optional[int] = None,
    gate_id: Optional[int] = None,
    exclude: Iterable[int] = (),
    limit: Optional[int] = None,
) -> list[Spot]:
    """
    VACANT spots of `spot_type`, best first.

    zone_id  → only that zone, ordered by spot id
    gate_id  → only spots with a proximity row for that gate,
               ordered by distance then spot id
    neither  → the whole registry, ordered by spot id
    """
    q = db.query(Spot).filter(
        Spot.spot_type == SpotType(spot_type).value,
        Spot.status == SpotStatus.VACANT.value,
    )
    if zone_id is not None:
        q = q.filter(Spot.zone_id == zone_id)

    excluded = list(exclude)
    if excluded:
        q = q.filter(Spot.id.notin_(excluded))

    if gate_id is not None:
        q = (
            q.join(SpotGateDistance, SpotGateDistance.spot_id == Spot.id)
            .filter(SpotGateDistance.gate_id == gate_id)
            .order_by(SpotGateDistance.distance.asc(), Spot.id.asc())
        )
    else:
        q = q.order_by(Spot.id.asc())

    if limit is not None:
        q = q.limit(limit)
    return q.all()


def _transition(db: Session, spot_id: int, expected: tuple, **values) -> bool:
    result = db.execute(
        update(Spot)
        .where(Spot.id == spot_id, Spot.status.in_([s.value for s in expected]))
        .values(updated_at=datetime.utcnow(), **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        return False
    # Loaded copies of this row are now stale
    cached = db.identity_map.get(identity_key(Spot, spot_id))
    if cached is not None:
        db.expire(cached)
    return True


def try_reserve(db: Session, spot_id: int) -> bool:
    """Claim a VACANT spot. False when it is no longer VACANT (lost race)."""
    won = _transition(db, spot_id, (SpotStatus.VACANT,), status=SpotStatus.RESERVED.value)
    if not won:
        logger.debug(f"[REGISTRY] Spot {spot_id} no longer vacant — reservation lost")
    return won


def mark_occupied(db: Session, spot_id: int, ticket_id: int) -> bool:
    """Bind a reserved (or still vacant) spot to a ticket."""
    return _transition(
        db, spot_id, (SpotStatus.RESERVED, SpotStatus.VACANT),
        status=SpotStatus.OCCUPIED.value, ticket_id=ticket_id,
    )


def release(db: Session, spot_id: int) -> Optional[SpotStatus]:
    """
    Return a spot to VACANT.
    Returns the status it was released from, or None when it was already
    VACANT (a repeated release is a no-op, not an error).
    """
    for previous in (SpotStatus.OCCUPIED, SpotStatus.RESERVED):
        if _transition(db, spot_id, (previous,), status=SpotStatus.VACANT.value, ticket_id=None):
            return previous
    return None


def count_by_status(db: Session) -> dict[str, int]:
    rows = db.query(Spot.status, func.count(Spot.id)).group_by(Spot.status).all()
    counts = {s.value: 0 for s in SpotStatus}
    counts.update({status: n for status, n in rows})
    return counts


def availability_by_type(db: Session) -> dict[str, int]:
    """Vacant spot count per spot type (zero-filled)."""
    rows = (
        db.query(Spot.spot_type, func.count(Spot.id))
        .filter(Spot.status == SpotStatus.VACANT.value)
        .group_by(Spot.spot_type)
        .all()
    )
    availability = {t.value: 0 for t in SpotType}
    availability.update({spot_type: n for spot_type, n in rows})
    return availability
