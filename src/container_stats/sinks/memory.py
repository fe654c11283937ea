"""In-memory sink."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from container_stats.sinks.base import Sink, TimestampedRecord


@dataclass
class EmittedBatch:
    """A batch as received by CollectingSink."""

    tag: str
    records: list[TimestampedRecord] = field(default_factory=list)


class CollectingSink(Sink):
    """Keeps every emitted batch in memory.

    Used by the ``snapshot`` command to render a single cycle.
    """

    def __init__(self) -> None:
        self.batches: list[EmittedBatch] = []

    def emit_batch(self, tag: str, records: list[TimestampedRecord]) -> None:
        self.batches.append(EmittedBatch(tag=tag, records=list(records)))

    @property
    def records(self) -> list[dict[str, Any]]:
        """All records from all batches, in emission order."""
        return [record for batch in self.batches for _, record in batch.records]

    def clear(self) -> None:
        self.batches.clear()
