"""Normalization of runtime responses into emitted records.

The runtime reports heterogeneous, partially-populated documents: stopped
containers carry no stats, cgroup v2 hosts omit ``max_usage``, most backends
never report storage. ``StatsNormalizer`` turns any combination of present
and absent fields into a record with a stable key set:

- Counters default to 0 and ``cpu_percent`` to 0.0.
- Remaining absent scalars (timestamps, flags, status) become "".
- ``storage`` is the only optional key and is omitted when unreported.

Note: ``cpu_percent`` is the ratio of the cumulative container CPU counter to
the cumulative system CPU counter of the same snapshot. It is not the
"percent of one core over the last interval" shown by ``docker stats``;
downstream dashboards are calibrated to this formula.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from container_stats.core.constants import ALERT_RECORD_TYPE, MISSING_VALUE
from container_stats.core.schemas import (
    ContainerIdentity,
    CpuStats,
    LifecycleSnapshot,
    RawStatsSnapshot,
)

logger = logging.getLogger(__name__)

STATS_RECORD_KEYS = (
    "container_id",
    "host_ip",
    "container_name",
    "created_time",
    "status",
    "is_running",
    "is_restarting",
    "is_paused",
    "is_oom_killed",
    "started_time",
    "finished_time",
    "mem_usage",
    "mem_limit",
    "mem_max_usage",
    "cpu_system_usage",
    "cpu_total_usage",
    "cpu_percent",
    "networks",
)

ALERT_RECORD_KEYS = (
    "type",
    "container_id",
    "container_name",
    "host_ip",
    "created_time",
    "status",
)


def fill_missing(value: Any) -> Any:
    """Recursively replace None with the empty-string default."""
    if value is None:
        return MISSING_VALUE
    if isinstance(value, dict):
        return {key: fill_missing(item) for key, item in value.items()}
    if isinstance(value, list):
        return [fill_missing(item) for item in value]
    return value


def compute_cpu_fields(cpu: CpuStats | None) -> tuple[int, int, float]:
    """Return (cpu_system_usage, cpu_total_usage, cpu_percent).

    A missing or non-positive system counter zeroes all three values; no
    division is attempted in that case.
    """
    if cpu is None or cpu.system_usage is None or cpu.system_usage <= 0:
        return 0, 0, 0.0

    total_usage = cpu.total_usage or 0
    try:
        cpu_percent = (total_usage / cpu.system_usage) * 100
    except OverflowError:
        cpu_percent = 0.0
    if not math.isfinite(cpu_percent):
        cpu_percent = 0.0
    return cpu.system_usage, total_usage, float(cpu_percent)


class StatsNormalizer:
    """Builds stats and alert records for one container.

    Both builders are pure functions of their inputs plus the configured
    host address: the same inputs always produce an identical record.
    """

    def __init__(self, host_ip: str | None = None) -> None:
        """Initialize the normalizer.

        Args:
            host_ip: Host address stamped on every record
        """
        self.host_ip = host_ip

    def normalize(
        self,
        identity: ContainerIdentity,
        lifecycle: LifecycleSnapshot,
        raw_stats: RawStatsSnapshot | None,
    ) -> dict[str, Any]:
        """Build the stats record.

        Args:
            identity: Container identity
            lifecycle: Lifecycle snapshot
            raw_stats: Stats snapshot, or None when the container is not running
                or its stats could not be fetched

        Returns:
            Flat record with every key of STATS_RECORD_KEYS, plus ``storage``
            when the runtime reported storage counters
        """
        record: dict[str, Any] = {
            "container_id": identity.id,
            "host_ip": self.host_ip,
            "container_name": identity.display_name,
            "created_time": identity.created,
            "status": lifecycle.status,
            "is_running": lifecycle.running,
            "is_restarting": lifecycle.restarting,
            "is_paused": lifecycle.paused,
            "is_oom_killed": lifecycle.oom_killed,
            "started_time": lifecycle.started_at,
            "finished_time": lifecycle.finished_at,
        }

        if raw_stats is None:
            logger.debug(f"No stats for container {identity.id[:12]}, using zeroed defaults")
            raw_stats = RawStatsSnapshot()

        memory = raw_stats.memory
        record["mem_usage"] = (memory.usage if memory else None) or 0
        record["mem_limit"] = (memory.limit if memory else None) or 0
        record["mem_max_usage"] = (memory.max_usage if memory else None) or 0

        cpu_system_usage, cpu_total_usage, cpu_percent = compute_cpu_fields(raw_stats.cpu)
        record["cpu_system_usage"] = cpu_system_usage
        record["cpu_total_usage"] = cpu_total_usage
        record["cpu_percent"] = cpu_percent

        record["networks"] = [
            {
                "network_name": interface,
                "rx": counters.rx_bytes or 0,
                "tx": counters.tx_bytes or 0,
            }
            for interface, counters in (raw_stats.networks or {}).items()
        ]

        storage = self._build_storage(raw_stats)
        if storage is not None:
            record["storage"] = storage

        return fill_missing(record)

    def alert(self, identity: ContainerIdentity, lifecycle: LifecycleSnapshot) -> dict[str, Any]:
        """Build the alert record emitted on a lifecycle status change."""
        record = {
            "type": ALERT_RECORD_TYPE,
            "container_id": identity.id,
            "container_name": identity.display_name,
            "host_ip": self.host_ip,
            "created_time": identity.created,
            "status": lifecycle.status,
        }
        return fill_missing(record)

    def _build_storage(self, raw_stats: RawStatsSnapshot) -> dict[str, Any] | None:
        """Build the storage section from whichever shape the snapshot carries."""
        storage: dict[str, Any] = {}

        if raw_stats.storage is not None:
            storage.update(raw_stats.storage.model_dump())

        if raw_stats.volumes:
            storage["volumes"] = [
                {
                    "volume_name": volume,
                    "volume_used": usage.used,
                    "volume_total": usage.total,
                }
                for volume, usage in raw_stats.volumes.items()
            ]

        return storage or None
