"""JSON-lines sink.

Writes one JSON object per record::

    {"tag": "docker", "time": 1718000000.123, "record": {...}}

Each batch is serialized completely before anything is written, so a record
that cannot be encoded fails the whole batch instead of leaving a partial one
in the output.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TextIO

from container_stats.core.exceptions import SinkError
from container_stats.sinks.base import Sink, TimestampedRecord

logger = logging.getLogger(__name__)


class JsonLinesSink(Sink):
    """Appends batches to a file, or writes them to a stream (stdout by default)."""

    def __init__(self, path: Path | str | None = None, stream: TextIO | None = None) -> None:
        """Initialize the sink.

        Args:
            path: Output file, opened in append mode for every batch
            stream: Output stream used when no path is given (default: sys.stdout)
        """
        self.path = Path(path) if path is not None else None
        self._stream = stream

        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def emit_batch(self, tag: str, records: list[TimestampedRecord]) -> None:
        try:
            payload = "".join(
                json.dumps({"tag": tag, "time": timestamp, "record": record}, allow_nan=False)
                + "\n"
                for timestamp, record in records
            )
        except (TypeError, ValueError) as e:
            raise SinkError(f"Could not serialize batch: {e}") from e

        try:
            if self.path is not None:
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(payload)
            else:
                stream = self._stream if self._stream is not None else sys.stdout
                stream.write(payload)
                stream.flush()
        except (OSError, ValueError) as e:
            raise SinkError(f"Could not write batch to {self.path or 'stream'}: {e}") from e

        logger.debug(f"Wrote {len(records)} records with tag {tag!r}")
