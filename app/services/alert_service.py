# app/services/alert_service.py
"""
Shared alert creation service.
Used by the entry/exit workflow for high-occupancy notices and for
invariant violations detected by the occupancy ledger.
Extend here to add push notifications, SMS, email, etc.
"""

import threading
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.models.alert import Alert
from app.models.floor import Floor
from app.services.errors import InvariantViolation
from app.utils.logger import get_logger

logger = get_logger(__name__)

OCCUPANCY_HIGH = "occupancy_high"
INVARIANT_VIOLATION = "invariant_violation"

# Serializes the check-then-create below within this process
_occupancy_alert_lock = threading.Lock()


def create_alert(db: Session, alert_type: str, description: str,
                 floor_id: Optional[int] = None, zone_id: Optional[int] = None,
                 spot_id: Optional[int] = None) -> Alert:
    """Create and persist an alert record. Always commits immediately."""
    alert = Alert(alert_type=alert_type, floor_id=floor_id, zone_id=zone_id, spot_id=spot_id,
                  description=description, is_resolved=0, triggered_at=datetime.utcnow())
    db.add(alert)
    db.commit()
    logger.warning(f"[ALERT][{alert_type.upper()}] {description}")
    return alert


def record_invariant_violation(db: Session, exc: InvariantViolation) -> Alert:
    """
    Persist an invariant break. The caller's transaction is rolled back
    first so the alert is the only thing this commit writes.
    """
    db.rollback()
    logger.critical(f"[INVARIANT] {exc}")
    return create_alert(db, INVARIANT_VIOLATION, str(exc),
                        floor_id=exc.floor_id, zone_id=exc.zone_id, spot_id=exc.spot_id)


def check_floor_occupancy(db: Session, floor_id: int) -> Optional[Alert]:
    """
    Raise an occupancy_high alert when the floor is at or past the threshold
    and has no unresolved one. The open alert is the "already notified" flag,
    so concurrent entries that jump past the threshold still alert exactly once;
    resolving it re-arms the check.
    """
    with _occupancy_alert_lock:
        floor = db.get(Floor, floor_id)
        if floor is None or not floor.capacity:
            return None
        db.refresh(floor, ["occupied_count"])
        ratio = floor.occupied_count / floor.capacity
        if ratio < settings.OCCUPANCY_ALERT_THRESHOLD:
            return None

        open_alert = (
            db.query(Alert.id)
            .filter(Alert.alert_type == OCCUPANCY_HIGH, Alert.floor_id == floor.id, Alert.is_resolved == 0)
            .first()
        )
        if open_alert is not None:
            return None
        return create_alert(db, OCCUPANCY_HIGH,
                            f"Floor {floor.name} at {int(ratio * 100)}% capacity",
                            floor_id=floor.id)
