# app/routers/health.py
"""
System health check endpoint.
Reports DB connectivity, the configured allocation strategy, spot counts
by status, and whether every floor still has a zone to fill.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.database import get_db
from app.config import settings
from app.models.floor import Floor
from app.services import spot_registry
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    """
    status is "degraded" when the database is unreachable.
    floors_without_active_zone lists floors that need a zone reset
    before zone-based allocation can place vehicles there again.
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "database": "unknown",
        "allocation_strategy": settings.ALLOCATION_STRATEGY,
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"
        return result

    result["spots"] = spot_registry.count_by_status(db)
    result["floors_without_active_zone"] = [
        f.id for f in db.query(Floor).filter(Floor.active_zone_id.is_(None)).order_by(Floor.id).all()
    ]
    return result
