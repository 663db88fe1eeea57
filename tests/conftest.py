"""
Shared fixtures.
"""

import pytest

from auragold.services.audit_log import AuditLog
from auragold.services.session_guard import SessionGuard


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def audit():
    return AuditLog(max_entries=100)


@pytest.fixture
def guard(clock, audit):
    """Guard with the default 900s timeout and 120s warning window."""
    return SessionGuard(
        passcode="2026",
        timeout_seconds=900,
        warning_threshold_seconds=120,
        clock=clock,
        audit=audit
    )
