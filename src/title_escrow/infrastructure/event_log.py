"""Append-only audit log of committed state changes.

Only ``record`` writes to the log. Entries appended during an operation
that later fails are dropped by ``restore`` together with the rest of
that operation's effects, so the log only ever shows committed history.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from title_escrow.domain.models import EscrowEvent

if TYPE_CHECKING:
    from title_escrow.domain.enums import EventType


class EventLog:
    """In-memory event store shared by the ledger, registry and engine."""

    def __init__(self) -> None:
        self._events: list[EscrowEvent] = []

    def __len__(self) -> int:
        return len(self._events)

    def record(
        self,
        event_type: EventType,
        actor: str,
        title_id: int | None = None,
        data: dict[str, Any] | None = None,
    ) -> EscrowEvent:
        """Append a new event. This is the ONLY write operation allowed."""
        evt = EscrowEvent(
            sequence=len(self._events) + 1,
            event_type=event_type,
            actor=actor,
            title_id=title_id,
            data=dict(data or {}),
        )
        self._events.append(evt)
        return evt

    def all(self) -> list[EscrowEvent]:
        """Return every event in chronological order."""
        return list(self._events)

    def by_title(self, title_id: int) -> list[EscrowEvent]:
        """Return the events concerning one title in chronological order."""
        return [e for e in self._events if e.title_id == title_id]

    def last(self, event_type: EventType | None = None) -> EscrowEvent | None:
        """Return the most recent event, optionally of a given type."""
        for evt in reversed(self._events):
            if event_type is None or evt.event_type == event_type:
                return evt
        return None

    # -------- Snapshots --------

    def snapshot(self) -> int:
        return len(self._events)

    def restore(self, snap: int) -> None:
        if not isinstance(snap, int) or not 0 <= snap <= len(self._events):
            raise ValueError("invalid event log snapshot")
        del self._events[snap:]
