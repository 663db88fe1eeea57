"""
Append-only builder for safety interlock lists.

The order interlocks are added in is the order they are shown to the
patient, so the builder never sorts or deduplicates.
"""

from typing import Iterable, List, Tuple

from auragold.models.schemas import InterlockType, SafetyInterlock


class InterlockBuilder:
    """Collects tagged interlocks in insertion order."""

    def __init__(self):
        self._interlocks: List[SafetyInterlock] = []

    def __len__(self) -> int:
        return len(self._interlocks)

    def _append(self, kind: InterlockType, label: str) -> "InterlockBuilder":
        self._interlocks.append(
            SafetyInterlock(type=kind, label=label, detected=True)
        )
        return self

    def cleared(self, label: str) -> "InterlockBuilder":
        return self._append(InterlockType.CLEARED, label)

    def warning(self, label: str) -> "InterlockBuilder":
        return self._append(InterlockType.WARNING, label)

    def blocked(self, label: str) -> "InterlockBuilder":
        return self._append(InterlockType.BLOCKED, label)

    def warnings(self, labels: Iterable[str]) -> "InterlockBuilder":
        for label in labels:
            self.warning(label)
        return self

    def blocks(self, labels: Iterable[str]) -> "InterlockBuilder":
        for label in labels:
            self.blocked(label)
        return self

    def build(self) -> Tuple[SafetyInterlock, ...]:
        return tuple(self._interlocks)
