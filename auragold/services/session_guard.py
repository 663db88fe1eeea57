"""
Staff session guard for AuraGold Clinic.

Tracks inactivity since the last staff login or extend action and
auto-expires the session after a fixed timeout. Elapsed time is always
recomputed from the stored activity timestamp, so late or missed ticks
correct themselves on the next check.
"""

import hmac
import math
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from auragold.config import settings
from auragold.models.schemas import AuditEventType, SessionPhase, SessionStatus
from auragold.services.audit_log import AuditLog, audit_log as default_audit_log
from auragold.utils.logger import get_logger

logger = get_logger("session_guard")

Clock = Callable[[], float]
EndListener = Callable[[str], None]


@dataclass
class SessionState:
    """Mutable session record owned by the guard."""

    is_authenticated: bool = False
    last_activity_at: Optional[float] = None
    timeout_seconds: int = 900
    warning_threshold_seconds: int = 120


def format_remaining(seconds: int) -> str:
    """Render seconds as m:ss."""
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes}:{secs:02d}"


class SessionGuard:
    """
    Bounded-duration staff session.

    Phases:
    - UNAUTHENTICATED: no session; only a correct passcode starts one
    - ACTIVE: elapsed < timeout - warning threshold
    - WARNING: within the last warning_threshold seconds
    - EXPIRED: timeout reached (or clock failure); staff must log in again

    The guard never renews a session on its own. If the clock raises,
    returns a non-numeric value or runs backwards, the session is expired.
    """

    PASSCODE_LENGTH = 4

    def __init__(
        self,
        passcode: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
        warning_threshold_seconds: Optional[int] = None,
        clock: Clock = time.monotonic,
        audit: Optional[AuditLog] = None
    ):
        self._passcode = passcode if passcode is not None else settings.staff_passcode
        self._clock = clock
        self._audit = audit if audit is not None else default_audit_log
        self._state = SessionState(
            timeout_seconds=(
                timeout_seconds if timeout_seconds is not None
                else settings.session_timeout_seconds
            ),
            warning_threshold_seconds=(
                warning_threshold_seconds if warning_threshold_seconds is not None
                else settings.session_warning_threshold_seconds
            ),
        )
        self._phase = SessionPhase.UNAUTHENTICATED
        self._last_reading: Optional[float] = None
        self._end_listeners: List[EndListener] = []

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    def add_end_listener(self, listener: EndListener) -> None:
        """Register a callback run with the reason whenever a session ends."""
        self._end_listeners.append(listener)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def login(self, passcode: str) -> bool:
        """
        Check a staff passcode and start a session on match.

        Returns:
            True when the session is now active, False otherwise
        """
        if not self._passcode_matches(passcode):
            self._audit.record_auth_event(AuditEventType.LOGIN_FAILURE)
            logger.info("Staff login rejected")
            return False

        self._last_reading = None
        now = self._read_clock()
        if now is None:
            self._end_session(SessionPhase.EXPIRED, "clock_anomaly")
            return False

        self._state.is_authenticated = True
        self._state.last_activity_at = now
        self._phase = SessionPhase.ACTIVE

        self._audit.record_auth_event(AuditEventType.LOGIN_SUCCESS)
        logger.info(
            "Staff session started",
            timeout_seconds=self._state.timeout_seconds
        )
        return True

    def extend(self) -> bool:
        """
        Reset the inactivity timer.

        Refused once the session has expired or was never started.
        """
        self.tick()
        if not self._state.is_authenticated:
            return False

        self._state.last_activity_at = self._last_reading
        self._phase = SessionPhase.ACTIVE
        logger.info("Staff session extended")
        return True

    def logout(self) -> None:
        """End the session explicitly."""
        if not self._state.is_authenticated:
            return
        self._audit.record_auth_event(AuditEventType.LOGOUT)
        self._end_session(SessionPhase.UNAUTHENTICATED, "logout")
        logger.info("Staff logged out")

    def tick(self) -> SessionStatus:
        """Recompute elapsed time, expiring the session when due."""
        if not self._state.is_authenticated:
            return self._snapshot()

        now = self._read_clock()
        if now is None:
            self._expire("clock_anomaly")
            return self._snapshot()

        elapsed = self._elapsed(now)
        if elapsed >= self._state.timeout_seconds:
            self._expire("timeout")
            return self._snapshot()

        warning_at = self._state.timeout_seconds - self._state.warning_threshold_seconds
        if elapsed >= warning_at:
            if self._phase != SessionPhase.WARNING:
                logger.info("Staff session entering warning window")
            self._phase = SessionPhase.WARNING
        else:
            self._phase = SessionPhase.ACTIVE

        return self._snapshot(elapsed)

    def status(self) -> SessionStatus:
        """Current session snapshot (performs a tick)."""
        return self.tick()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _passcode_matches(self, passcode: str) -> bool:
        if not isinstance(passcode, str):
            return False
        if len(passcode) != self.PASSCODE_LENGTH:
            return False
        if not (passcode.isascii() and passcode.isdigit()):
            return False
        return hmac.compare_digest(passcode, self._passcode)

    def _read_clock(self) -> Optional[float]:
        """Read the clock, returning None on any anomaly."""
        try:
            now = self._clock()
        except Exception as e:
            logger.error("Session clock unavailable", error=str(e))
            return None

        if isinstance(now, bool) or not isinstance(now, (int, float)) or not math.isfinite(now):
            logger.error("Session clock returned an invalid value", value=repr(now))
            return None

        floor = self._last_reading
        if floor is None:
            floor = self._state.last_activity_at
        if floor is not None and now < floor:
            logger.error(
                "Session clock went backwards",
                previous=floor,
                current=now
            )
            return None

        self._last_reading = now
        return now

    def _elapsed(self, now: float) -> int:
        return int(now - self._state.last_activity_at)

    def _expire(self, reason: str) -> None:
        self._audit.record_auth_event(
            AuditEventType.SESSION_TIMEOUT,
            details={"reason": reason}
        )
        logger.info("Staff session expired", reason=reason)
        self._end_session(SessionPhase.EXPIRED, reason)

    def _end_session(self, phase: SessionPhase, reason: str) -> None:
        self._state.is_authenticated = False
        self._state.last_activity_at = None
        self._last_reading = None
        self._phase = phase
        for listener in list(self._end_listeners):
            listener(reason)

    def _snapshot(self, elapsed: Optional[int] = None) -> SessionStatus:
        if self._phase == SessionPhase.UNAUTHENTICATED:
            return SessionStatus(phase=self._phase, is_authenticated=False)

        if self._phase == SessionPhase.EXPIRED:
            return SessionStatus(
                phase=self._phase,
                is_authenticated=False,
                remaining_seconds=0,
                show_warning=False,
                remaining_display=format_remaining(0)
            )

        remaining = max(0, self._state.timeout_seconds - (elapsed or 0))
        show_warning = 0 < remaining <= self._state.warning_threshold_seconds
        return SessionStatus(
            phase=self._phase,
            is_authenticated=True,
            remaining_seconds=remaining,
            show_warning=show_warning,
            remaining_display=format_remaining(remaining)
        )


# Singleton instance
session_guard = SessionGuard()
