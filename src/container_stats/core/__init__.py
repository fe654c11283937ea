"""Core module - configuration, schemas and errors."""

from __future__ import annotations

from container_stats.core.config import load_config
from container_stats.core.constants import DEFAULT_EMISSION_TAG, DEFAULT_STATS_INTERVAL
from container_stats.core.exceptions import (
    ConfigurationError,
    ContainerStatsError,
    SinkError,
    TransportError,
)
from container_stats.core.schemas import (
    AgentConfig,
    ContainerIdentity,
    ContainerRef,
    CpuStats,
    LifecycleSnapshot,
    MemoryStats,
    NetworkStats,
    RawStatsSnapshot,
    StorageStats,
    VolumeStats,
    parse_duration,
)

__all__ = [
    "DEFAULT_EMISSION_TAG",
    "DEFAULT_STATS_INTERVAL",
    "AgentConfig",
    "ConfigurationError",
    "ContainerIdentity",
    "ContainerRef",
    "ContainerStatsError",
    "CpuStats",
    "LifecycleSnapshot",
    "load_config",
    "MemoryStats",
    "NetworkStats",
    "parse_duration",
    "RawStatsSnapshot",
    "SinkError",
    "StorageStats",
    "TransportError",
    "VolumeStats",
]
