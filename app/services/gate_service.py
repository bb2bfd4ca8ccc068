# app/services/gate_service.py
"""
Gate validity lookups.
Requests naming a missing, closed, or wrong-direction gate are rejected
here, before the allocator is entered.
"""

from typing import Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.models.enums import GateStatus, GateType
from app.models.gate import Gate
from app.services.errors import InvalidGateError

ENTRY_TYPES = {GateType.ENTRY.value, GateType.ENTRY_EXIT.value}
EXIT_TYPES = {GateType.EXIT.value, GateType.ENTRY_EXIT.value}


def _validate(db: Session, gate_id: int, allowed_types: set, direction: str) -> Gate:
    gate = db.get(Gate, gate_id)
    if gate is None:
        raise InvalidGateError(f"Gate {gate_id} does not exist")
    if gate.status != GateStatus.OPERATIONAL.value:
        raise InvalidGateError(f"Gate {gate.code} is {gate.status}")
    if gate.gate_type not in allowed_types:
        raise InvalidGateError(f"Gate {gate.code} is not an {direction} gate ({gate.gate_type})")
    return gate


def validate_entry_gate(db: Session, gate_id: int) -> Gate:
    return _validate(db, gate_id, ENTRY_TYPES, "entry")


def validate_exit_gate(db: Session, gate_id: int) -> Gate:
    return _validate(db, gate_id, EXIT_TYPES, "exit")


def designated_exit_gate_id(db: Session) -> Optional[int]:
    """
    EXIT_GATE_ID from settings, else the lowest-id operational exit-capable gate.
    A configured gate that is missing, closed, or entry-only raises InvalidGateError.
    """
    if settings.EXIT_GATE_ID is not None:
        return validate_exit_gate(db, settings.EXIT_GATE_ID).id
    gate = (
        db.query(Gate)
        .filter(Gate.gate_type.in_(EXIT_TYPES), Gate.status == GateStatus.OPERATIONAL.value)
        .order_by(Gate.id.asc())
        .first()
    )
    return gate.id if gate else None
