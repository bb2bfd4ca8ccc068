# app/routers/occupancy.py
"""Occupancy snapshot, zone listing, and the administrative zone reset."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import Optional
from app.config import settings
from app.database import get_db
from app.models.floor import Floor
from app.schemas.occupancy import OccupancySnapshot, ZoneOut
from app.services import zone_state
from app.services.lock_manager import floor_key, lock_manager
from app.services.occupancy_service import current_occupancy_snapshot, list_zones

router = APIRouter()


@router.get("/occupancy", response_model=OccupancySnapshot)
def get_occupancy(db: Session = Depends(get_db)):
    """Totals, vacant spots per type, and each floor's active zone."""
    return current_occupancy_snapshot(db)


@router.get("/occupancy/zones", response_model=list[ZoneOut])
def get_zones(floor_id: Optional[int] = None, db: Session = Depends(get_db)):
    """Zone status and counters, in fill order."""
    zones = list_zones(db, floor_id)
    for z in zones:
        z.occupancy_percent = round((z.occupied_count / z.capacity) * 100, 1) if z.capacity else 0
    return zones


@router.put("/floors/{floor_id}/zones/reset", summary="Re-open every zone on a floor")
def reset_floor_zones(floor_id: int, db: Session = Depends(get_db)):
    """
    FULL zones stay FULL when vehicles leave. Call this to start a new fill
    cycle: all zones AVAILABLE, then the first by fill_priority ACTIVE.
    """
    if db.get(Floor, floor_id) is None:
        raise HTTPException(status_code=404, detail=f"Floor {floor_id} not found")
    with lock_manager.hold([floor_key(floor_id)], settings.LOCK_TIMEOUT_SECONDS):
        zone = zone_state.reset_floor(db, floor_id)
        db.commit()
    return {"floor_id": floor_id, "active_zone_id": zone.id if zone else None, "status": "reset"}
