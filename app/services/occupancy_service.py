# app/services/occupancy_service.py
"""
Real-time occupancy snapshot.
occupied_spots comes from the incrementally maintained floor counters;
per-type availability and zone listings are read-side queries.
"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.floor import Floor
from app.models.zone import Zone
from app.schemas.occupancy import OccupancySnapshot
from app.services import spot_registry
from app.utils.logger import get_logger

logger = get_logger(__name__)


def current_occupancy_snapshot(db: Session) -> OccupancySnapshot:
    floors = db.query(Floor).order_by(Floor.level.asc()).all()
    total = db.query(func.coalesce(func.sum(Floor.capacity), 0)).scalar()
    occupied = db.query(func.coalesce(func.sum(Floor.occupied_count), 0)).scalar()
    active_zones = {f.id: f.active_zone_id for f in floors}

    # Single-floor lots expose the one pointer directly
    active_zone_id: Optional[int] = floors[0].active_zone_id if floors else None

    snapshot = OccupancySnapshot(
        total_spots=total,
        occupied_spots=occupied,
        per_type_availability=spot_registry.availability_by_type(db),
        active_zone_id=active_zone_id,
        active_zones=active_zones,
    )
    logger.debug(f"[OCCUPANCY] {occupied}/{total} occupied")
    return snapshot


def list_zones(db: Session, floor_id: Optional[int] = None) -> list[Zone]:
    q = db.query(Zone)
    if floor_id is not None:
        q = q.filter(Zone.floor_id == floor_id)
    return q.order_by(Zone.floor_id.asc(), Zone.fill_priority.asc()).all()
