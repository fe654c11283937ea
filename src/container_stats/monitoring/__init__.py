"""Monitoring module - the stats-collection engine.

Components:
- StateTracker: last observed lifecycle status per container name
- StatsNormalizer: runtime responses -> stable-keyed records
- PollCycle: one list/diff/normalize/emit tick
- Scheduler: fixed-interval background driver for PollCycle
"""

from __future__ import annotations

from container_stats.monitoring.normalizer import (
    ALERT_RECORD_KEYS,
    STATS_RECORD_KEYS,
    StatsNormalizer,
    compute_cpu_fields,
    fill_missing,
)
from container_stats.monitoring.poll_cycle import PollCycle
from container_stats.monitoring.scheduler import Scheduler
from container_stats.monitoring.state_tracker import StateTracker, StatusTransition

__all__ = [
    "ALERT_RECORD_KEYS",
    "PollCycle",
    "STATS_RECORD_KEYS",
    "Scheduler",
    "StateTracker",
    "StatsNormalizer",
    "StatusTransition",
    "compute_cpu_fields",
    "fill_missing",
]
