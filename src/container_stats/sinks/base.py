"""Sink interface for emitted record batches."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

# (timestamp in epoch seconds, record)
TimestampedRecord = tuple[float, dict[str, Any]]


class Sink(ABC):
    """Downstream consumer of record batches.

    Implementations deliver a whole batch or raise ``SinkError``; the caller
    does not buffer or retry.
    """

    @abstractmethod
    def emit_batch(self, tag: str, records: list[TimestampedRecord]) -> None:
        """Deliver one batch of timestamped records.

        Args:
            tag: Routing tag
            records: (timestamp, record) pairs

        Raises:
            SinkError: If the batch could not be delivered
        """

    def close(self) -> None:
        """Release any resources held by the sink."""
