# tests/test_occupancy_ledger.py
"""Unit tests for spot occupy/free transitions and the zone/floor counters."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from app.models.enums import SpotStatus
from app.models.floor import Floor
from app.models.spot import Spot
from app.services import occupancy_ledger, spot_registry
from app.services.errors import InvariantViolation, SpotNotFoundError
from conftest import spot_id, zone_named


def _counters(db, zone_name):
    db.expire_all()
    return zone_named(db, zone_name).occupied_count, db.query(Floor).one().occupied_count


class TestOccupy:
    def test_occupy_reserved_spot_bumps_counters(self, lot):
        sid = spot_id(lot, "A-01")
        assert spot_registry.try_reserve(lot, sid)

        spot = occupancy_ledger.occupy(lot, sid, ticket_id=1)
        lot.commit()

        assert spot.status == SpotStatus.OCCUPIED.value
        assert spot.ticket_id == 1
        assert _counters(lot, "A") == (1, 1)
        assert zone_named(lot, "B").occupied_count == 0

    def test_occupy_again_for_same_ticket_is_noop(self, lot):
        sid = spot_id(lot, "A-01")
        occupancy_ledger.occupy(lot, sid, ticket_id=7)
        occupancy_ledger.occupy(lot, sid, ticket_id=7)
        lot.commit()
        assert _counters(lot, "A") == (1, 1)

    def test_occupy_for_another_ticket_is_invariant_violation(self, lot):
        sid = spot_id(lot, "A-01")
        occupancy_ledger.occupy(lot, sid, ticket_id=7)
        lot.commit()

        with pytest.raises(InvariantViolation) as exc_info:
            occupancy_ledger.occupy(lot, sid, ticket_id=8)
        assert exc_info.value.spot_id == sid

    def test_unknown_spot(self, lot):
        with pytest.raises(SpotNotFoundError):
            occupancy_ledger.occupy(lot, 9999, ticket_id=1)


class TestFree:
    def test_round_trip_restores_counters(self, lot):
        sid = spot_id(lot, "B-02")
        occupancy_ledger.occupy(lot, sid, ticket_id=3)
        lot.commit()
        assert _counters(lot, "B") == (1, 1)

        assert occupancy_ledger.free(lot, sid, ticket_id=3) is True
        lot.commit()

        assert _counters(lot, "B") == (0, 0)
        spot = lot.get(Spot, sid)
        assert spot.status == SpotStatus.VACANT.value
        assert spot.ticket_id is None

    def test_double_free_decrements_once(self, lot):
        sid = spot_id(lot, "A-02")
        occupancy_ledger.occupy(lot, sid, ticket_id=3)
        lot.commit()

        assert occupancy_ledger.free(lot, sid) is True
        assert occupancy_ledger.free(lot, sid) is False
        lot.commit()
        assert _counters(lot, "A") == (0, 0)

    def test_freeing_a_reservation_leaves_counters_alone(self, lot):
        sid = spot_id(lot, "A-02")
        assert spot_registry.try_reserve(lot, sid)

        assert occupancy_ledger.free(lot, sid) is True
        lot.commit()
        assert _counters(lot, "A") == (0, 0)
        assert lot.get(Spot, sid).status == SpotStatus.VACANT.value

    def test_free_with_wrong_ticket_is_invariant_violation(self, lot):
        sid = spot_id(lot, "A-01")
        occupancy_ledger.occupy(lot, sid, ticket_id=4)
        lot.commit()

        with pytest.raises(InvariantViolation):
            occupancy_ledger.free(lot, sid, ticket_id=5)
        lot.rollback()
        assert lot.get(Spot, sid).status == SpotStatus.OCCUPIED.value

    def test_counter_underflow_detected(self, lot):
        sid = spot_id(lot, "A-01")
        occupancy_ledger.occupy(lot, sid, ticket_id=4)
        lot.commit()
        # Counters drifted behind the spot table
        lot.query(Floor).update({Floor.occupied_count: 0}, synchronize_session=False)
        lot.commit()

        with pytest.raises(InvariantViolation, match="Floor"):
            occupancy_ledger.free(lot, sid)
        lot.rollback()
