# app/services/zone_state.py
"""
Zone State Machine — per-floor zone lifecycle for the zone-based strategy.

  AVAILABLE ──activate_next──▶ ACTIVE ──mark_full──▶ FULL

Floor.active_zone_id is the single source of truth for "which zone is
filling now"; it is never inferred by scanning zones. At most one zone per
floor is ACTIVE, and zones activate in ascending fill_priority.

A FULL zone stays FULL when one of its spots is freed. It re-opens only
through reset_floor(), the administrative reset.

Callers must hold the floor lock (lock_manager.floor_key) around every
mutation here, in the same window as the spot search that triggered it.
"""

from typing import Optional

from sqlalchemy.orm import Session

from app.models.enums import ZoneStatus
from app.models.floor import Floor
from app.models.zone import Zone
from app.services.errors import InvariantViolation
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _get_floor(db: Session, floor_id: int) -> Floor:
    floor = db.get(Floor, floor_id)
    if floor is None:
        raise InvariantViolation(f"Floor {floor_id} does not exist", floor_id=floor_id)
    return floor


def current_active_zone(db: Session, floor_id: int) -> Optional[Zone]:
    floor = _get_floor(db, floor_id)
    if floor.active_zone_id is None:
        return None
    return db.get(Zone, floor.active_zone_id)


def mark_full(db: Session, zone_id: int) -> Zone:
    zone = db.get(Zone, zone_id)
    if zone is None:
        raise InvariantViolation(f"Zone {zone_id} does not exist", zone_id=zone_id)
    if zone.status != ZoneStatus.ACTIVE.value:
        raise InvariantViolation(
            f"Zone {zone.name} marked FULL from {zone.status}, expected ACTIVE",
            zone_id=zone.id, floor_id=zone.floor_id,
        )

    zone.status = ZoneStatus.FULL.value
    floor = _get_floor(db, zone.floor_id)
    if floor.active_zone_id == zone.id:
        floor.active_zone_id = None
    db.flush()
    logger.info(f"[ZONE] Floor {floor.level}: zone {zone.name} is FULL")
    return zone


def activate_next(db: Session, floor_id: int) -> Optional[Zone]:
    """Promote the lowest-priority AVAILABLE zone. None when the floor is exhausted."""
    floor = _get_floor(db, floor_id)
    if floor.active_zone_id is not None:
        raise InvariantViolation(
            f"Floor {floor.level} already has active zone {floor.active_zone_id}",
            zone_id=floor.active_zone_id, floor_id=floor.id,
        )

    zone = (
        db.query(Zone)
        .filter(Zone.floor_id == floor_id, Zone.status == ZoneStatus.AVAILABLE.value)
        .order_by(Zone.fill_priority.asc())
        .first()
    )
    if zone is None:
        logger.info(f"[ZONE] Floor {floor.level}: no AVAILABLE zone left")
        return None

    zone.status = ZoneStatus.ACTIVE.value
    floor.active_zone_id = zone.id
    db.flush()
    logger.info(f"[ZONE] Floor {floor.level}: zone {zone.name} (priority {zone.fill_priority}) is ACTIVE")
    return zone


def zone_count(db: Session, floor_id: int) -> int:
    return db.query(Zone).filter(Zone.floor_id == floor_id).count()


def initialize_floor(db: Session, floor_id: int) -> Optional[Zone]:
    """Layout-time setup: first zone by fill_priority ACTIVE, the rest AVAILABLE."""
    return reset_floor(db, floor_id)


def reset_floor(db: Session, floor_id: int) -> Optional[Zone]:
    """Administrative reopen of every zone on the floor."""
    floor = _get_floor(db, floor_id)
    db.query(Zone).filter(Zone.floor_id == floor_id).update(
        {Zone.status: ZoneStatus.AVAILABLE.value}, synchronize_session="fetch"
    )
    floor.active_zone_id = None
    db.flush()
    logger.info(f"[ZONE] Floor {floor.level}: zones reset")
    return activate_next(db, floor_id)
