# app/models/enums.py
"""
Enumerated values stored in string columns.
Columns hold the upper-case .value; compare with `.value` in queries.
"""

from enum import Enum


class VehicleType(str, Enum):
    MOTORCYCLE = "MOTORCYCLE"
    CAR = "CAR"
    TRUCK = "TRUCK"


class SpotType(str, Enum):
    MOTORCYCLE = "MOTORCYCLE"
    COMPACT = "COMPACT"
    LARGE = "LARGE"


class SpotStatus(str, Enum):
    VACANT = "VACANT"
    RESERVED = "RESERVED"   # claimed by an allocator, not yet bound to a ticket
    OCCUPIED = "OCCUPIED"


class ZoneStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    ACTIVE = "ACTIVE"
    FULL = "FULL"


class GateType(str, Enum):
    ENTRY = "ENTRY"
    EXIT = "EXIT"
    ENTRY_EXIT = "ENTRY_EXIT"


class GateStatus(str, Enum):
    OPERATIONAL = "OPERATIONAL"
    UNDER_MAINTENANCE = "UNDER_MAINTENANCE"


class TicketStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"


# Fixed vehicle class → physically compatible spot category
VEHICLE_SPOT_TYPE = {
    VehicleType.MOTORCYCLE: SpotType.MOTORCYCLE,
    VehicleType.CAR: SpotType.COMPACT,
    VehicleType.TRUCK: SpotType.LARGE,
}
