# tests/conftest.py
"""Shared fixtures: a fresh SQLite file database per test and layout builders."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from sqlalchemy.orm import sessionmaker
from app.database import create_tables, make_engine
from app.models.gate import Gate
from app.models.spot import Spot
from app.models.zone import Zone
from app.services.layout_service import load_layout
from app.services.lock_manager import KeyedLockManager


@pytest.fixture()
def engine(tmp_path):
    """File-backed so that worker threads each get their own connection."""
    eng = make_engine(f"sqlite:///{tmp_path / 'parking_test.db'}")
    create_tables(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    s = session_factory()
    yield s
    s.rollback()
    s.close()


@pytest.fixture()
def locks():
    return KeyedLockManager()


def spot_id(db, code):
    return db.query(Spot).filter(Spot.code == code).one().id


def gate_id(db, code):
    return db.query(Gate).filter(Gate.code == code).one().id


def zone_named(db, name):
    return db.query(Zone).filter(Zone.name == name).one()


@pytest.fixture()
def lot(db):
    """
    One floor, two zones, an entry gate and an exit gate.

      zone A (priority 1): A-01 COMPACT, A-02 COMPACT, A-03 MOTORCYCLE
      zone B (priority 2): B-01 COMPACT, B-02 LARGE, B-03 COMPACT (no proximity rows)

    IN:  A-02 and A-01 tie at 10, B-01 at 30
    OUT: B-01 nearest, A-01 farthest
    """
    load_layout(db, {
        "floors": [{
            "level": 1,
            "name": "Ground",
            "zones": [
                {"name": "A", "fill_priority": 1, "spots": [
                    {"code": "A-01", "type": "COMPACT"},
                    {"code": "A-02", "type": "COMPACT"},
                    {"code": "A-03", "type": "MOTORCYCLE"},
                ]},
                {"name": "B", "fill_priority": 2, "spots": [
                    {"code": "B-01", "type": "COMPACT"},
                    {"code": "B-02", "type": "LARGE"},
                    {"code": "B-03", "type": "COMPACT"},
                ]},
            ],
            "gates": [
                {"code": "IN", "type": "ENTRY", "distances": {
                    "A-01": 10, "A-02": 10, "A-03": 4, "B-01": 30, "B-02": 25,
                }},
                {"code": "OUT", "type": "EXIT", "distances": {
                    "A-01": 40, "A-02": 35, "A-03": 44, "B-01": 6, "B-02": 12,
                }},
                {"code": "SERVICE", "type": "ENTRY", "status": "UNDER_MAINTENANCE"},
            ],
        }]
    })
    return db


@pytest.fixture()
def compact_pool(db):
    """A single-gate lot with exactly three COMPACT spots and two LARGE ones."""
    load_layout(db, {
        "floors": [{
            "level": 1,
            "name": "Pool",
            "zones": [{"name": "P", "fill_priority": 1, "spots": [
                {"code": "P-01", "type": "COMPACT"},
                {"code": "P-02", "type": "COMPACT"},
                {"code": "P-03", "type": "COMPACT"},
                {"code": "P-04", "type": "LARGE"},
                {"code": "P-05", "type": "LARGE"},
            ]}],
            "gates": [{"code": "MAIN", "type": "ENTRY_EXIT", "distances": {
                "P-01": 3, "P-02": 2, "P-03": 1, "P-04": 5, "P-05": 6,
            }}],
        }]
    })
    return db
