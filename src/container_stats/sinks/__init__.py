"""Sinks module - downstream delivery of record batches."""

from __future__ import annotations

from container_stats.sinks.base import Sink, TimestampedRecord
from container_stats.sinks.jsonl import JsonLinesSink
from container_stats.sinks.memory import CollectingSink, EmittedBatch

__all__ = [
    "CollectingSink",
    "EmittedBatch",
    "JsonLinesSink",
    "Sink",
    "TimestampedRecord",
]
