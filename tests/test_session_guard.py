"""
Tests for the staff session guard.
"""

import pytest

from auragold.models.schemas import AuditEventType, SessionPhase
from auragold.services.session_guard import SessionGuard, format_remaining


class TestLogin:
    """Passcode check."""

    def test_correct_passcode_starts_session(self, guard):
        assert guard.login("2026") is True
        assert guard.phase == SessionPhase.ACTIVE
        assert guard.is_authenticated
        assert guard.state.last_activity_at is not None

    @pytest.mark.parametrize("passcode", ["0000", "2025", "", "202", "20260", "abcd", "２０２６"])
    def test_wrong_passcode_rejected(self, guard, passcode):
        assert guard.login(passcode) is False
        assert guard.phase == SessionPhase.UNAUTHENTICATED
        assert not guard.is_authenticated

    def test_non_string_passcode_rejected(self, guard):
        assert guard.login(2026) is False
        assert guard.login(None) is False

    def test_login_events_audited(self, guard, audit):
        guard.login("1111")
        guard.login("2026")
        events = [e.event_type for e in audit.entries()]
        assert events == [AuditEventType.LOGIN_SUCCESS, AuditEventType.LOGIN_FAILURE]

    def test_passcode_never_audited(self, guard, audit):
        guard.login("9999")
        entry = audit.entries()[0]
        assert entry.details is None
        assert "9999" not in entry.action


class TestCountdown:
    """Remaining time and warning window."""

    def test_fresh_session(self, guard):
        guard.login("2026")
        status = guard.tick()
        assert status.remaining_seconds == 900
        assert status.show_warning is False
        assert status.remaining_display == "15:00"

    def test_just_before_warning(self, guard, clock):
        guard.login("2026")
        clock.advance(779)
        status = guard.tick()
        assert status.phase == SessionPhase.ACTIVE
        assert status.remaining_seconds == 121
        assert status.show_warning is False

    def test_warning_at_780(self, guard, clock):
        guard.login("2026")
        clock.advance(780)
        status = guard.tick()
        assert status.phase == SessionPhase.WARNING
        assert status.show_warning is True
        assert status.remaining_seconds == 120
        assert status.remaining_display == "2:00"

    def test_one_second_left(self, guard, clock):
        guard.login("2026")
        clock.advance(899)
        status = guard.tick()
        assert status.remaining_seconds == 1
        assert status.show_warning is True
        assert status.remaining_display == "0:01"

    def test_partial_seconds_floor_elapsed(self, guard, clock):
        guard.login("2026")
        clock.advance(899.9)
        status = guard.tick()
        assert status.is_authenticated
        assert status.remaining_seconds == 1

    def test_expires_at_900(self, guard, clock, audit):
        guard.login("2026")
        clock.advance(900)
        status = guard.tick()
        assert status.phase == SessionPhase.EXPIRED
        assert status.is_authenticated is False
        assert status.remaining_seconds == 0
        assert status.show_warning is False
        assert not guard.is_authenticated
        assert audit.entries()[0].event_type == AuditEventType.SESSION_TIMEOUT

    def test_missed_ticks_self_correct(self, guard, clock):
        """A long gap between ticks is measured from the stored timestamp."""
        guard.login("2026")
        guard.tick()
        clock.advance(5000)
        status = guard.tick()
        assert status.phase == SessionPhase.EXPIRED

    def test_countdown_one_second_steps(self, guard, clock):
        guard.login("2026")
        clock.advance(880)
        seen = []
        for _ in range(5):
            seen.append(guard.tick().remaining_seconds)
            clock.advance(1)
        assert seen == [20, 19, 18, 17, 16]

    def test_unauthenticated_status(self, guard):
        status = guard.status()
        assert status.phase == SessionPhase.UNAUTHENTICATED
        assert status.remaining_seconds is None
        assert status.remaining_display is None
        assert status.show_warning is False


class TestExtend:
    """Explicit activity reset."""

    def test_extend_in_warning_window(self, guard, clock):
        guard.login("2026")
        clock.advance(850)
        assert guard.tick().show_warning is True

        assert guard.extend() is True
        status = guard.tick()
        assert status.show_warning is False
        assert status.phase == SessionPhase.ACTIVE
        assert status.remaining_seconds == 900

    def test_extend_restarts_full_timeout(self, guard, clock):
        guard.login("2026")
        clock.advance(850)
        guard.extend()
        clock.advance(899)
        assert guard.tick().is_authenticated
        clock.advance(1)
        assert not guard.tick().is_authenticated

    def test_extend_unauthenticated_refused(self, guard):
        assert guard.extend() is False
        assert guard.phase == SessionPhase.UNAUTHENTICATED

    def test_no_auto_renew_after_expiry(self, guard, clock):
        """An extend arriving after the deadline does not revive the session."""
        guard.login("2026")
        clock.advance(901)
        assert guard.extend() is False
        assert guard.phase == SessionPhase.EXPIRED
        assert not guard.is_authenticated

    def test_relogin_after_expiry(self, guard, clock):
        guard.login("2026")
        clock.advance(900)
        guard.tick()
        assert guard.login("2026") is True
        assert guard.tick().remaining_seconds == 900


class TestLogout:
    """Explicit logout."""

    def test_logout_resets_state(self, guard, audit):
        guard.login("2026")
        guard.logout()
        assert guard.phase == SessionPhase.UNAUTHENTICATED
        assert guard.state.last_activity_at is None
        assert audit.entries()[0].event_type == AuditEventType.LOGOUT

    def test_logout_when_signed_out_is_noop(self, guard, audit):
        guard.logout()
        assert len(audit) == 0

    def test_end_listeners(self, guard, clock):
        reasons = []
        guard.add_end_listener(reasons.append)

        guard.login("2026")
        guard.logout()
        guard.login("2026")
        clock.advance(900)
        guard.tick()

        assert reasons == ["logout", "timeout"]


class TestClockFailSafe:
    """Clock anomalies expire the session."""

    def test_clock_raises(self, audit):
        readings = iter([1000.0])

        def flaky():
            value = next(readings, None)
            if value is None:
                raise OSError("clock unavailable")
            return value

        guard = SessionGuard(passcode="2026", clock=flaky, audit=audit)
        assert guard.login("2026")
        status = guard.tick()
        assert status.phase == SessionPhase.EXPIRED
        assert not status.is_authenticated

    def test_clock_goes_backwards(self, guard, clock):
        guard.login("2026")
        clock.advance(10)
        guard.tick()
        clock.advance(-5)
        status = guard.tick()
        assert status.phase == SessionPhase.EXPIRED

    @pytest.mark.parametrize("value", [None, "soon", float("nan"), float("inf")])
    def test_clock_invalid_value(self, value, audit):
        readings = iter([1000.0])
        guard = SessionGuard(
            passcode="2026",
            clock=lambda: next(readings, value),
            audit=audit
        )
        guard.login("2026")
        assert guard.tick().phase == SessionPhase.EXPIRED

    def test_clock_failure_at_login(self, audit):
        def broken():
            raise RuntimeError("no clock")

        guard = SessionGuard(passcode="2026", clock=broken, audit=audit)
        assert guard.login("2026") is False
        assert not guard.is_authenticated

    def test_timeout_reason_recorded(self, guard, clock, audit):
        guard.login("2026")
        clock.advance(-1)
        guard.tick()
        entry = audit.entries(event_type=AuditEventType.SESSION_TIMEOUT)[0]
        assert entry.details == {"reason": "clock_anomaly"}


class TestExplicitLimits:
    """Constructor arguments override configured limits."""

    def test_zero_warning_threshold_is_kept(self, clock, audit):
        guard = SessionGuard(
            passcode="2026",
            timeout_seconds=900,
            warning_threshold_seconds=0,
            clock=clock,
            audit=audit
        )
        assert guard.state.warning_threshold_seconds == 0

        guard.login("2026")
        clock.advance(899)
        status = guard.tick()
        assert status.phase == SessionPhase.ACTIVE
        assert status.show_warning is False
        assert status.remaining_seconds == 1

    def test_zero_timeout_is_kept(self, clock, audit):
        guard = SessionGuard(
            passcode="2026",
            timeout_seconds=0,
            warning_threshold_seconds=0,
            clock=clock,
            audit=audit
        )
        assert guard.state.timeout_seconds == 0
        guard.login("2026")
        assert guard.tick().phase == SessionPhase.EXPIRED

    def test_omitted_limits_use_settings(self, clock, audit):
        guard = SessionGuard(passcode="2026", clock=clock, audit=audit)
        assert guard.state.timeout_seconds == 900
        assert guard.state.warning_threshold_seconds == 120


class TestFormatRemaining:
    """m:ss rendering."""

    @pytest.mark.parametrize("seconds,expected", [
        (0, "0:00"),
        (5, "0:05"),
        (61, "1:01"),
        (120, "2:00"),
        (900, "15:00"),
        (-3, "0:00"),
    ])
    def test_format(self, seconds, expected):
        assert format_remaining(seconds) == expected
