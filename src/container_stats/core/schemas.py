"""Pydantic schemas for the container stats agent.

This module defines the data contracts used throughout the agent: the agent
configuration and the typed views over the runtime's container detail and
stats responses. Every field the runtime may omit is modelled as optional so
that absence is handled explicitly by the normalizer instead of being
discovered at emission time.
"""

from __future__ import annotations

import math
import os
import re
import threading
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from container_stats.core.constants import (
    DEFAULT_DOCKER_TIMEOUT_SECONDS,
    DEFAULT_EMISSION_TAG,
    HOST_IP_ENV_VAR,
)

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h|d)?\s*$")

_DURATION_UNITS = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
    "d": 86400.0,
}


def parse_duration(value: Any) -> float:
    """Parse a duration into seconds.

    Accepts plain numbers (seconds) and strings with an optional unit suffix:
    ``"500ms"``, ``"60s"``, ``"1.5m"``, ``"1h"``, ``"1d"`` or ``"30"``.

    Raises:
        ValueError: If the value is not a recognizable duration
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        raise ValueError(f"Invalid duration: {value!r}")

    match = _DURATION_RE.match(value)
    if match is None:
        raise ValueError(f"Invalid duration: {value!r} (expected e.g. '60s', '5m', '500ms')")

    amount, unit = match.groups()
    return float(amount) * _DURATION_UNITS[unit or "s"]


def _opt_int(value: Any) -> int | None:
    """Return value as an int counter, or None when absent or malformed."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return None


def _opt_bool(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


def _opt_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _section(data: Any, key: str) -> dict[str, Any] | None:
    """Return data[key] if it is a mapping, otherwise None."""
    if not isinstance(data, dict):
        return None
    value = data.get(key)
    return value if isinstance(value, dict) else None


def _first_int(data: dict[str, Any], *keys: str) -> int | None:
    for key in keys:
        value = _opt_int(data.get(key))
        if value is not None:
            return value
    return None


# =============================================================================
# CONFIGURATION
# =============================================================================


class AgentConfig(BaseModel):
    """Top-level agent configuration.

    This is the configuration loaded from YAML/JSON files. The legacy keys
    ``tag`` and ``container_regex`` are accepted as aliases.
    """

    stats_interval: float = Field(
        default=60.0,
        gt=0,
        le=threading.TIMEOUT_MAX,
        allow_inf_nan=False,
        description="Polling interval in seconds (accepts '60s', '5m', ...)",
    )
    emission_tag: str = Field(
        default=DEFAULT_EMISSION_TAG,
        min_length=1,
        validation_alias=AliasChoices("emission_tag", "tag"),
        description="Tag used by the sink to route records",
    )
    container_name_filter: str | None = Field(
        default=None,
        validation_alias=AliasChoices("container_name_filter", "container_regex"),
        description="Regular expression; only matching container names get stats records",
    )
    host_ip: str | None = Field(
        default_factory=lambda: os.environ.get(HOST_IP_ENV_VAR),
        description="Host address stamped on every record",
    )
    docker_base_url: str | None = Field(
        default=None, description="Docker daemon URL (default: environment / local socket)"
    )
    docker_timeout_seconds: int = Field(default=DEFAULT_DOCKER_TIMEOUT_SECONDS, ge=1)
    output_path: Path | None = Field(
        default=None, description="JSON-lines output file (default: stdout)"
    )

    model_config = {"extra": "forbid"}

    @field_validator("stats_interval", mode="before")
    @classmethod
    def validate_stats_interval(cls, v: Any) -> float:
        """Convert duration strings to seconds."""
        return parse_duration(v)

    @field_validator("container_name_filter")
    @classmethod
    def validate_container_name_filter(cls, v: str | None) -> str | None:
        """Ensure the filter compiles as a regular expression."""
        if v is None or v == "":
            return None
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid container name filter {v!r}: {e}") from e
        return v

    @property
    def name_pattern(self) -> re.Pattern[str] | None:
        """Compiled container name filter, if configured."""
        if self.container_name_filter is None:
            return None
        return re.compile(self.container_name_filter)


# =============================================================================
# RUNTIME DATA SHAPES
# =============================================================================


class ContainerRef(BaseModel):
    """Reference to a container returned by a runtime listing.

    ``handle`` carries the runtime's own container object so follow-up
    calls do not need another lookup.
    """

    id: str
    handle: Any = Field(default=None, exclude=True, repr=False)

    @property
    def short_id(self) -> str:
        return self.id[:12]


class ContainerIdentity(BaseModel):
    """Identity of a container as reported by the runtime."""

    id: str
    name: str | None = Field(default=None, description="Raw runtime name, may start with '/'")
    created: str | None = Field(default=None, description="Creation timestamp")

    model_config = {"frozen": True}

    @property
    def display_name(self) -> str | None:
        """Name with the runtime's leading path separator removed.

        Returns None for unnamed containers.
        """
        if not self.name:
            return None
        name = self.name[1:] if self.name.startswith("/") else self.name
        return name or None


class LifecycleSnapshot(BaseModel):
    """Lifecycle state of a container.

    Absent fields stay None. Booleans are never assumed False.
    """

    status: str | None = None
    running: bool | None = None
    restarting: bool | None = None
    paused: bool | None = None
    oom_killed: bool | None = None
    started_at: str | None = None
    finished_at: str | None = None

    model_config = {"frozen": True}

    @classmethod
    def from_state(cls, state: Any) -> LifecycleSnapshot:
        """Build a snapshot from the Docker ``State`` object."""
        if not isinstance(state, dict):
            return cls()
        return cls(
            status=_opt_str(state.get("Status")),
            running=_opt_bool(state.get("Running")),
            restarting=_opt_bool(state.get("Restarting")),
            paused=_opt_bool(state.get("Paused")),
            oom_killed=_opt_bool(state.get("OOMKilled")),
            started_at=_opt_str(state.get("StartedAt")),
            finished_at=_opt_str(state.get("FinishedAt")),
        )


class MemoryStats(BaseModel):
    usage: int | None = None
    limit: int | None = None
    max_usage: int | None = None

    model_config = {"frozen": True}


class CpuStats(BaseModel):
    total_usage: int | None = None
    system_usage: int | None = None

    model_config = {"frozen": True}


class NetworkStats(BaseModel):
    rx_bytes: int | None = None
    tx_bytes: int | None = None

    model_config = {"frozen": True}


class StorageStats(BaseModel):
    """Aggregate read/write counters (Windows-style ``storage_stats``)."""

    read_count: int | None = None
    read_size: int | None = None
    write_count: int | None = None
    write_size: int | None = None

    model_config = {"frozen": True}


class VolumeStats(BaseModel):
    """Per-volume byte usage (legacy ``storage_stats.volumes``)."""

    used: int | None = None
    total: int | None = None

    model_config = {"frozen": True}


class RawStatsSnapshot(BaseModel):
    """Point-in-time stats counters for one container.

    Any section may be absent, e.g. stats are not collected for stopped
    containers and most backends never report storage.
    """

    memory: MemoryStats | None = None
    cpu: CpuStats | None = None
    networks: dict[str, NetworkStats] | None = None
    storage: StorageStats | None = None
    volumes: dict[str, VolumeStats] | None = None

    model_config = {"frozen": True}

    @classmethod
    def from_docker(cls, stats: Any) -> RawStatsSnapshot:
        """Parse a Docker stats JSON document (``container.stats(stream=False)``).

        Malformed or missing counters become None; this never raises.
        """
        if not isinstance(stats, dict):
            return cls()

        memory = None
        memory_stats = _section(stats, "memory_stats")
        if memory_stats is not None:
            memory = MemoryStats(
                usage=_opt_int(memory_stats.get("usage")),
                limit=_opt_int(memory_stats.get("limit")),
                max_usage=_opt_int(memory_stats.get("max_usage")),
            )

        cpu = None
        cpu_stats = _section(stats, "cpu_stats")
        if cpu_stats is not None:
            cpu_usage = _section(cpu_stats, "cpu_usage") or {}
            cpu = CpuStats(
                total_usage=_opt_int(cpu_usage.get("total_usage")),
                system_usage=_opt_int(cpu_stats.get("system_cpu_usage")),
            )

        networks = None
        network_stats = _section(stats, "networks")
        if network_stats is not None:
            networks = {}
            for interface, info in network_stats.items():
                info = info if isinstance(info, dict) else {}
                networks[str(interface)] = NetworkStats(
                    rx_bytes=_opt_int(info.get("rx_bytes")),
                    tx_bytes=_opt_int(info.get("tx_bytes")),
                )

        storage = None
        volumes = None
        storage_stats = _section(stats, "storage_stats")
        if storage_stats:
            aggregate = StorageStats(
                read_count=_first_int(storage_stats, "read_count", "read_count_normalized"),
                read_size=_first_int(storage_stats, "read_size", "read_size_bytes"),
                write_count=_first_int(storage_stats, "write_count", "write_count_normalized"),
                write_size=_first_int(storage_stats, "write_size", "write_size_bytes"),
            )
            if any(v is not None for v in aggregate.model_dump().values()):
                storage = aggregate

            volume_stats = _section(storage_stats, "volumes")
            if volume_stats:
                volumes = {}
                for volume, info in volume_stats.items():
                    info = info if isinstance(info, dict) else {}
                    volumes[str(volume)] = VolumeStats(
                        used=_opt_int(info.get("used")),
                        total=_opt_int(info.get("total")),
                    )

        return cls(memory=memory, cpu=cpu, networks=networks, storage=storage, volumes=volumes)
