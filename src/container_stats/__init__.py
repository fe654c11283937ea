"""Container stats agent - Core package."""

from __future__ import annotations

from container_stats.core.schemas import (
    AgentConfig,
    ContainerIdentity,
    LifecycleSnapshot,
    RawStatsSnapshot,
)
from container_stats.monitoring.normalizer import StatsNormalizer
from container_stats.monitoring.poll_cycle import PollCycle
from container_stats.monitoring.scheduler import Scheduler
from container_stats.monitoring.state_tracker import StateTracker

__version__ = "0.1.0"

__all__ = [
    "AgentConfig",
    "ContainerIdentity",
    "LifecycleSnapshot",
    "PollCycle",
    "RawStatsSnapshot",
    "Scheduler",
    "StateTracker",
    "StatsNormalizer",
    "__version__",
]
