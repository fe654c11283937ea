"""Lifecycle status tracking across poll cycles."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StatusTransition:
    """A detected change of lifecycle status for one container name."""

    name: str
    previous: str | None
    current: str | None


class StateTracker:
    """Remembers the last observed status per container name.

    Entries are created on first observation and never removed: a container
    that disappears from the listing simply stops being observed. Owned by a
    single poll cycle, so no locking is needed as long as cycles never overlap.

    Example:
        ```python
        tracker = StateTracker()
        tracker.observe("web-1", "running")   # None (first sighting)
        tracker.observe("web-1", "exited")    # StatusTransition(..., "running", "exited")
        ```
    """

    def __init__(self) -> None:
        self._last_status: dict[str, str | None] = {}

    def observe(self, name: str, status: str | None) -> StatusTransition | None:
        """Record the current status and report a transition if it changed.

        Read, compare and write happen in one call so each name is consulted
        and updated exactly once per cycle.

        Returns:
            StatusTransition if the name was seen before with a different status
        """
        seen = name in self._last_status
        previous = self._last_status.get(name)
        self._last_status[name] = status

        if seen and previous != status:
            return StatusTransition(name=name, previous=previous, current=status)
        return None

    def last_status(self, name: str) -> str | None:
        """Return the last observed status for a name, or None if never seen."""
        return self._last_status.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._last_status

    def __len__(self) -> int:
        return len(self._last_status)
