"""One poll-collect-emit cycle.

``PollCycle.run_once`` is a plain synchronous function: it lists containers,
diffs their lifecycle status against the previous cycle, builds stats and
alert records, and hands the whole batch to the sink in a single call. It
can be driven by the Scheduler or called directly.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from typing import Any

from container_stats.core.constants import ALERT_RECORD_TYPE, DEFAULT_EMISSION_TAG
from container_stats.core.exceptions import TransportError
from container_stats.core.schemas import ContainerRef, RawStatsSnapshot
from container_stats.monitoring.normalizer import StatsNormalizer
from container_stats.monitoring.state_tracker import StateTracker
from container_stats.runtime.client import RuntimeClient
from container_stats.sinks.base import Sink

logger = logging.getLogger(__name__)


class PollCycle:
    """Orchestrates a single collection tick.

    Failure isolation:
    - Listing failure aborts the cycle with no records and no sink call.
    - Detail failure, or any unexpected error, skips that container only.
    - Stats failure falls back to zeroed counters for that container.
    - Sink failure is logged; the batch is dropped, not retried.

    Example:
        ```python
        cycle = PollCycle(DockerRuntimeClient(), JsonLinesSink(), tag="docker")
        records = cycle.run_once()
        ```
    """

    def __init__(
        self,
        runtime: RuntimeClient,
        sink: Sink,
        tag: str = DEFAULT_EMISSION_TAG,
        name_filter: re.Pattern[str] | str | None = None,
        host_ip: str | None = None,
        state_tracker: StateTracker | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the poll cycle.

        Args:
            runtime: Container runtime client
            sink: Destination for each cycle's batch
            tag: Routing tag passed to the sink
            name_filter: Regex; containers whose name does not match get no stats record
            host_ip: Host address stamped on every record
            state_tracker: Status table (a fresh one by default)
            clock: Returns the batch timestamp in epoch seconds
        """
        self.runtime = runtime
        self.sink = sink
        self.tag = tag
        if isinstance(name_filter, str):
            name_filter = re.compile(name_filter)
        self.name_filter = name_filter
        self.normalizer = StatsNormalizer(host_ip=host_ip)
        self.state_tracker = state_tracker if state_tracker is not None else StateTracker()
        self._clock = clock

    def run_once(self) -> list[dict[str, Any]]:
        """Run one cycle and emit its batch.

        Returns:
            Stats and alert records produced in this cycle, in listing order
        """
        try:
            refs = self.runtime.list_containers(include_stopped=True)
        except TransportError as e:
            logger.error(f"Listing containers failed, skipping cycle: {e}")
            return []

        records: list[dict[str, Any]] = []
        for ref in refs:
            try:
                records.extend(self._process_container(ref))
            except Exception:
                logger.exception(
                    f"Unexpected error processing container {ref.short_id}, skipping it"
                )

        alerts = sum(1 for r in records if r.get("type") == ALERT_RECORD_TYPE)
        logger.debug(
            f"Cycle collected {len(records) - alerts} stats and {alerts} alert records "
            f"from {len(refs)} containers"
        )
        self._emit(records)
        return records

    def _process_container(self, ref: ContainerRef) -> list[dict[str, Any]]:
        """Build the alert (if any) and stats record for one container."""
        try:
            identity, lifecycle = self.runtime.get_container_detail(ref)
        except TransportError as e:
            logger.warning(f"Skipping container {ref.short_id}: {e}")
            return []

        name = identity.display_name
        if name is None:
            logger.debug(f"Skipping unnamed container {ref.short_id}")
            return []

        records: list[dict[str, Any]] = []
        transition = self.state_tracker.observe(name, lifecycle.status)
        if transition is not None:
            logger.info(
                f"Container {name} changed status: {transition.previous} -> {transition.current}"
            )
            records.append(self.normalizer.alert(identity, lifecycle))

        if self.name_filter is not None and not self.name_filter.search(name):
            return records

        raw_stats: RawStatsSnapshot | None = None
        if lifecycle.running is True:
            try:
                raw_stats = self.runtime.get_container_stats(ref)
            except TransportError as e:
                logger.warning(f"Stats unavailable for container {name}, emitting defaults: {e}")

        records.append(self.normalizer.normalize(identity, lifecycle, raw_stats))
        return records

    def _emit(self, records: list[dict[str, Any]]) -> None:
        if not records:
            return

        timestamp = self._clock()
        try:
            self.sink.emit_batch(self.tag, [(timestamp, record) for record in records])
        except Exception as e:
            logger.error(f"Sink rejected batch of {len(records)} records, dropping it: {e}")
