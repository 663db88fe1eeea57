"""
Audit trail for staff authentication events.

Entries are kept in a bounded in-memory log and mirrored to the
structured logger. Detail values are sanitized before they are stored.
"""

import re
from collections import Counter, deque
from typing import Any, Deque, Dict, List, Optional

from auragold.config import settings
from auragold.models.schemas import (
    AuditEntry,
    AuditEventType,
    AuditOutcome,
    AuditSummary,
    UserRole
)
from auragold.utils.logger import get_logger

logger = get_logger("audit")


class AuditLog:
    """Bounded, newest-first audit trail."""

    # Detail keys containing any of these are redacted
    SENSITIVE_KEYS = [
        "passcode", "password", "token", "secret", "credential", "key",
        "phone", "email", "ssn", "dob", "address", "signature", "name",
    ]

    # Values matching these are masked inside strings
    SENSITIVE_PATTERNS = [
        re.compile(r"\b\d{3}[-.]?\d{3}[-.]?\d{4}\b"),
        re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"),
        re.compile(r"\b\d{3}-?\d{2}-?\d{4}\b"),
    ]

    MAX_STRING_LENGTH = 100
    REDACTED = "[REDACTED]"

    def __init__(self, max_entries: Optional[int] = None):
        self._entries: Deque[AuditEntry] = deque(
            maxlen=max_entries or settings.audit_log_max_entries
        )

    def __len__(self) -> int:
        return len(self._entries)

    def record(
        self,
        event_type: AuditEventType,
        action: str,
        user_role: UserRole = UserRole.SYSTEM,
        outcome: AuditOutcome = AuditOutcome.SUCCESS,
        details: Optional[Dict[str, Any]] = None
    ) -> AuditEntry:
        """Append an event to the trail."""
        entry = AuditEntry(
            event_type=event_type,
            user_role=user_role,
            action=action,
            outcome=outcome,
            details=self.sanitize(details) if details else None
        )
        self._entries.append(entry)

        logger.info(
            "audit_event",
            audit_id=entry.id,
            event_type=event_type.value,
            action=action,
            user_role=user_role.value,
            outcome=outcome.value
        )
        return entry

    def record_auth_event(
        self,
        event_type: AuditEventType,
        user_role: UserRole = UserRole.STAFF,
        details: Optional[Dict[str, Any]] = None
    ) -> AuditEntry:
        """Record a login, logout or timeout."""
        action = f"User {event_type.value.lower().replace('_', ' ')}"
        outcome = (
            AuditOutcome.FAILURE
            if event_type == AuditEventType.LOGIN_FAILURE
            else AuditOutcome.SUCCESS
        )
        return self.record(
            event_type,
            action,
            user_role=user_role,
            outcome=outcome,
            details=details
        )

    def entries(
        self,
        event_type: Optional[AuditEventType] = None,
        limit: Optional[int] = None
    ) -> List[AuditEntry]:
        """Entries newest first, optionally filtered by type."""
        result = [
            entry for entry in reversed(self._entries)
            if event_type is None or entry.event_type == event_type
        ]
        if limit is not None:
            result = result[:limit]
        return result

    def summary(self) -> AuditSummary:
        counts = Counter(entry.event_type.value for entry in self._entries)
        return AuditSummary(total=len(self._entries), by_event_type=dict(counts))

    def clear(self) -> None:
        self._entries.clear()
        logger.info("Audit log cleared")

    def sanitize(self, data: Any) -> Any:
        """Redact sensitive keys, mask identifiers and truncate long strings."""
        if isinstance(data, str):
            if len(data) > self.MAX_STRING_LENGTH:
                return f"[REDACTED: {len(data)} chars]"
            for pattern in self.SENSITIVE_PATTERNS:
                data = pattern.sub(self.REDACTED, data)
            return data

        if isinstance(data, (list, tuple)):
            return [self.sanitize(item) for item in data]

        if isinstance(data, dict):
            sanitized = {}
            for key, value in data.items():
                if any(part in str(key).lower() for part in self.SENSITIVE_KEYS):
                    sanitized[key] = self.REDACTED
                else:
                    sanitized[key] = self.sanitize(value)
            return sanitized

        return data


# Singleton instance
audit_log = AuditLog()
