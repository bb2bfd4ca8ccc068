# app/services/errors.py
"""
Typed failures raised by the allocation core and the entry/exit workflow.
The HTTP layer maps each family to a status code in app/main.py.
"""


class ParkingError(Exception):
    """Base class for every failure this service raises on purpose."""


# ── Capacity / contention ────────────────────────────────────────────────────
class CapacityExhausted(ParkingError):
    """No vacant spot of the required type is reachable by the active strategy."""

    def __init__(self, spot_type, reason="no vacant spot"):
        self.spot_type = spot_type
        self.reason = reason
        super().__init__(f"No {getattr(spot_type, 'value', spot_type)} spot available: {reason}")


class ContentionTimeout(ParkingError):
    """An exclusive-access window could not be acquired in time. Safe to retry."""

    def __init__(self, key, timeout):
        self.key = key
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout}s waiting for lock {key}")


# ── Design-invariant breaks ──────────────────────────────────────────────────
class InvariantViolation(ParkingError):
    """State that a correct allocator can never produce. Always fatal to the operation."""

    def __init__(self, message, spot_id=None, zone_id=None, floor_id=None):
        self.spot_id = spot_id
        self.zone_id = zone_id
        self.floor_id = floor_id
        super().__init__(message)


# ── Validation (rejected before the allocator is entered) ────────────────────
class ParkingValidationError(ParkingError):
    pass


class InvalidGateError(ParkingValidationError):
    pass


class InvalidVehicleTypeError(ParkingValidationError):
    pass


class TicketStateError(ParkingValidationError):
    pass


# ── Lookups ──────────────────────────────────────────────────────────────────
class NotFoundError(ParkingError):
    pass


class TicketNotFoundError(NotFoundError):
    pass


class SpotNotFoundError(NotFoundError):
    pass
