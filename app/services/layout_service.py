# app/services/layout_service.py
"""
Facility layout loader — floors, zones, spots, gates, and the
spot ↔ gate proximity table, from a JSON document such as
scripts/setup/sample_layout.json:

    {"floors": [{
        "level": 1, "name": "Ground",
        "zones": [{"name": "A", "fill_priority": 1,
                   "spots": [{"code": "1A-01", "type": "COMPACT"}]}],
        "gates": [{"code": "G1-IN", "type": "ENTRY",
                   "distances": {"1A-01": 12.5}}]
    }]}

After loading, every floor's first zone (by fill_priority) is ACTIVE.
"""

from sqlalchemy.orm import Session

from app.models.enums import GateStatus, GateType, SpotStatus, SpotType
from app.models.floor import Floor
from app.models.gate import Gate
from app.models.spot import Spot
from app.models.spot_gate_distance import SpotGateDistance
from app.models.zone import Zone
from app.services import zone_state
from app.utils.json_parser import load_json_file, require_fields
from app.utils.logger import get_logger

logger = get_logger(__name__)


def load_layout(db: Session, layout: dict) -> dict:
    """Persist a layout document in one transaction. Returns counts of what was created."""
    try:
        summary = _create_layout(db, layout)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(f"[LAYOUT] Loaded {summary}")
    return summary


def _create_layout(db: Session, layout: dict) -> dict:
    summary = {"floors": 0, "zones": 0, "spots": 0, "gates": 0, "distances": 0}
    spots_by_code = {}

    for floor_doc in layout.get("floors", []):
        require_fields(floor_doc, "floor", "level")
        floor = Floor(level=floor_doc["level"], name=floor_doc.get("name") or f"Level {floor_doc['level']}",
                      capacity=0, occupied_count=0)
        db.add(floor)
        db.flush()
        summary["floors"] += 1

        for zone_doc in floor_doc.get("zones", []):
            require_fields(zone_doc, f"floor {floor.level} zone", "name", "fill_priority")
            zone = Zone(floor_id=floor.id, name=zone_doc["name"],
                        fill_priority=zone_doc["fill_priority"], capacity=0, occupied_count=0)
            db.add(zone)
            db.flush()
            summary["zones"] += 1

            for spot_doc in zone_doc.get("spots", []):
                require_fields(spot_doc, f"zone {zone.name} spot", "code", "type")
                spot = Spot(code=spot_doc["code"], floor_id=floor.id, zone_id=zone.id,
                            spot_type=SpotType(spot_doc["type"]).value,
                            status=SpotStatus.VACANT.value)
                db.add(spot)
                spots_by_code[spot.code] = spot
                zone.capacity += 1
                floor.capacity += 1
                summary["spots"] += 1
        db.flush()

        for gate_doc in floor_doc.get("gates", []):
            require_fields(gate_doc, f"floor {floor.level} gate", "code", "type")
            gate = Gate(code=gate_doc["code"], floor_id=floor.id,
                        gate_type=GateType(gate_doc["type"]).value,
                        status=GateStatus(gate_doc.get("status", GateStatus.OPERATIONAL.value)).value)
            db.add(gate)
            db.flush()
            summary["gates"] += 1

            for code, distance in (gate_doc.get("distances") or {}).items():
                spot = spots_by_code.get(code)
                if spot is None:
                    raise ValueError(f"Gate {gate.code} lists distance to unknown spot {code}")
                db.add(SpotGateDistance(spot_id=spot.id, gate_id=gate.id, distance=float(distance)))
                summary["distances"] += 1

        zone_state.initialize_floor(db, floor.id)

    return summary


def load_layout_file(db: Session, path: str) -> dict:
    layout = load_json_file(path)
    if layout is None:
        raise ValueError(f"Layout file {path} is missing or not valid JSON")
    return load_layout(db, layout)
