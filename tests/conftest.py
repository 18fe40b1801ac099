"""
Shared fixtures: an in-memory record store driven by a controllable clock
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.database.memory import InMemoryRecordStore
from src.database.schemas import gig_tester_path, claim_code_path, day_path
from src.security.binding_registry import BindingRegistry
from src.security.claim_binder import ClaimBinder
from src.security.heartbeat import HeartbeatProcessor
from src.security.streak import StreakEvaluator
from src.utils.clock import FixedClock

NOW = datetime(2024, 1, 14, 12, 0, tzinfo=timezone.utc)
PACKAGE = "com.example.app"


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def store(clock):
    return InMemoryRecordStore(clock=clock)


@pytest.fixture
def registry(store):
    return BindingRegistry(store)


@pytest.fixture
def evaluator(store, clock):
    return StreakEvaluator(store, clock=clock)


@pytest.fixture
def claims(store, registry, clock):
    return ClaimBinder(store, registry, clock=clock)


@pytest.fixture
def heartbeat(store, registry, evaluator, clock):
    return HeartbeatProcessor(store, registry, evaluator, clock=clock)


def add_tester(store, gig_id, tester_id, **fields):
    """Provision a tester slot the way the gig assignment flow does"""
    data = {'locked': False}
    data.update(fields)
    store.merge_write(gig_tester_path(gig_id, tester_id), data)


def add_claim_code(store, code, gig_id, tester_id, package=PACKAGE, expires_at=None, **fields):
    data = {
        'gigId': gig_id,
        'testerId': tester_id,
        'packageName': package,
        'expiresAt': expires_at if expires_at is not None else NOW + timedelta(days=1),
        'used': False
    }
    data.update(fields)
    store.merge_write(claim_code_path(code), data)


def add_days(store, gig_id, tester_id, first_day, count, opens=3):
    """Write ``count`` consecutive day buckets starting at ``first_day``"""
    for offset in range(count):
        day = first_day + timedelta(days=offset)
        add_day(store, gig_id, tester_id, day, opens=opens)


def add_day(store, gig_id, tester_id, day, opens=3, last_updated=None):
    if last_updated is None:
        last_updated = datetime(day.year, day.month, day.day, 20, 0, tzinfo=timezone.utc)
    store.merge_write(day_path(gig_id, tester_id, day.isoformat()), {
        'opens': opens,
        'timestamps': [f"{day.isoformat()}T10:00:00Z"],
        'lastUpdated': last_updated
    })


def heartbeat_payload(**overrides):
    payload = {
        'gigId': 'gig1',
        'testerId': 'alice',
        'deviceId': 'device-a',
        'installId': 'install-a',
        'sessionId': 'session-1',
        'timestamps': ['2024-01-14T10:00:00Z', '2024-01-14T10:05:00Z'],
        'isEmulator': False
    }
    payload.update(overrides)
    return payload
