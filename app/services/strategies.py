# app/services/strategies.py
"""
Allocation strategies — pluggable algorithms that pick a candidate spot.

Strategies read the Spot Registry and never write spot state. Each one
returns a Spot, or None when nothing matches (the NotFound result the
allocator turns into CapacityExhausted). The zone-based strategy drives
the Zone State Machine while it searches; the allocator already holds the
floor lock named by its lock_scope().

Ties always resolve by ascending spot id.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from app.models.enums import SpotType
from app.models.spot import Spot
from app.services import spot_registry, zone_state
from app.services.errors import InvalidGateError
from app.services.lock_manager import floor_key, search_key
from app.utils.logger import get_logger

logger = get_logger(__name__)


class StrategyKind(str, Enum):
    NEAREST_TO_GATE = "nearest_to_gate"
    NEAREST_TO_EXIT = "nearest_to_exit"
    ZONE_BASED = "zone_based"


@dataclass(frozen=True)
class AllocationContext:
    entry_gate_id: int
    floor_id: int                       # floor of the entry gate
    exit_gate_id: Optional[int] = None  # designated lot exit


class AllocationStrategy(ABC):
    kind: StrategyKind

    @abstractmethod
    def find_spot(
        self, db: Session, spot_type: SpotType, context: AllocationContext, exclude: Iterable[int] = ()
    ) -> Optional[Spot]:
        """Best VACANT candidate for spot_type, or None."""

    @abstractmethod
    def lock_scope(self, context: AllocationContext, spot_type: SpotType) -> list[tuple]:
        """Lock keys guarding this strategy's search space."""

    def __repr__(self):
        return f"<{self.__class__.__name__}>"


class NearestToGateStrategy(AllocationStrategy):
    kind = StrategyKind.NEAREST_TO_GATE

    def _gate_id(self, context: AllocationContext) -> int:
        return context.entry_gate_id

    def find_spot(self, db, spot_type, context, exclude=()):
        candidates = spot_registry.find_candidates(
            db, spot_type, gate_id=self._gate_id(context), exclude=exclude, limit=1
        )
        return candidates[0] if candidates else None

    def lock_scope(self, context, spot_type):
        return [search_key(SpotType(spot_type).value, f"gate-{self._gate_id(context)}")]


class NearestToExitStrategy(NearestToGateStrategy):
    """Ranks by distance to the lot's designated exit, whatever gate the car came in by."""

    kind = StrategyKind.NEAREST_TO_EXIT

    def _gate_id(self, context: AllocationContext) -> int:
        if context.exit_gate_id is None:
            raise InvalidGateError("nearest_to_exit needs a designated exit gate; none is operational")
        return context.exit_gate_id


class ZoneBasedStrategy(AllocationStrategy):
    """
    Traffic control: fill the floor's ACTIVE zone, then the next by
    fill_priority. Each zone is visited at most once per call.
    """

    kind = StrategyKind.ZONE_BASED

    def find_spot(self, db, spot_type, context, exclude=()):
        floor_id = context.floor_id
        zone = zone_state.current_active_zone(db, floor_id)
        if zone is None:
            zone = zone_state.activate_next(db, floor_id)

        remaining = zone_state.zone_count(db, floor_id)
        while zone is not None and remaining > 0:
            remaining -= 1
            candidates = spot_registry.find_candidates(
                db, spot_type, zone_id=zone.id, exclude=exclude, limit=1
            )
            if candidates:
                return candidates[0]

            logger.info(f"[ZONE] No vacant {SpotType(spot_type).value} in zone {zone.name} — advancing")
            zone_state.mark_full(db, zone.id)
            zone = zone_state.activate_next(db, floor_id)
        return None

    def lock_scope(self, context, spot_type):
        return [floor_key(context.floor_id)]


_STRATEGIES = {
    StrategyKind.NEAREST_TO_GATE: NearestToGateStrategy,
    StrategyKind.NEAREST_TO_EXIT: NearestToExitStrategy,
    StrategyKind.ZONE_BASED: ZoneBasedStrategy,
}


def get_strategy(kind) -> AllocationStrategy:
    """Build the strategy for a StrategyKind or its config string."""
    try:
        return _STRATEGIES[StrategyKind(kind)]()
    except ValueError:
        raise ValueError(
            f"Unknown allocation strategy '{kind}'. "
            f"Choose one of: {', '.join(k.value for k in StrategyKind)}"
        ) from None
