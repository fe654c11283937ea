"""Stats agent: wires configuration, runtime, sink and scheduler together.

The agent owns one PollCycle (and therefore one StateTracker) and drives it
from a Scheduler until it is stopped, either programmatically or by SIGINT /
SIGTERM when running in the foreground.
"""

from __future__ import annotations

import logging
import signal
import threading
from types import FrameType

from container_stats.core.exceptions import TransportError
from container_stats.core.schemas import AgentConfig
from container_stats.monitoring.poll_cycle import PollCycle
from container_stats.monitoring.scheduler import Scheduler
from container_stats.runtime.client import DockerRuntimeClient, RuntimeClient
from container_stats.sinks.base import Sink
from container_stats.sinks.jsonl import JsonLinesSink

logger = logging.getLogger(__name__)


def build_sink(config: AgentConfig) -> Sink:
    """Create the sink described by the configuration."""
    return JsonLinesSink(path=config.output_path)


def build_runtime(config: AgentConfig) -> RuntimeClient:
    """Create the Docker runtime client described by the configuration.

    Raises:
        TransportError: If the Docker client cannot be created
    """
    return DockerRuntimeClient(
        base_url=config.docker_base_url,
        timeout_seconds=config.docker_timeout_seconds,
    )


class StatsAgent:
    """Periodic container stats collector.

    Example:
        ```python
        agent = StatsAgent(load_config("agent.yaml"))
        agent.run_forever()  # blocks until SIGINT/SIGTERM
        ```
    """

    def __init__(
        self,
        config: AgentConfig,
        runtime: RuntimeClient | None = None,
        sink: Sink | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        """Initialize the agent.

        Args:
            config: Validated agent configuration
            runtime: Runtime client (default: Docker client from config)
            sink: Record sink (default: JSON lines to config.output_path or stdout)
            scheduler: Tick scheduler (default: a new Scheduler)
        """
        self.config = config
        self.runtime = runtime if runtime is not None else build_runtime(config)
        self.sink = sink if sink is not None else build_sink(config)
        self.scheduler = scheduler if scheduler is not None else Scheduler()
        self.cycle = PollCycle(
            runtime=self.runtime,
            sink=self.sink,
            tag=config.emission_tag,
            name_filter=config.name_pattern,
            host_ip=config.host_ip,
        )
        self._shutdown = threading.Event()

    def start(self) -> None:
        """Log runtime details and start the polling loop without blocking."""
        try:
            version = self.runtime.version()
            logger.info(
                f"Found Docker details: version={version.get('Version', 'unknown')} "
                f"api={version.get('ApiVersion', 'unknown')}"
            )
        except TransportError as e:
            logger.warning(f"Could not query runtime version: {e}")

        logger.info(f"Using interval: {self.config.stats_interval}s")
        logger.info(f"Container name filter: {self.config.container_name_filter or '(none)'}")
        logger.info(f"Using tag: {self.config.emission_tag}")

        self.scheduler.start(self.config.stats_interval, self.cycle.run_once)

    def stop(self, timeout: float | None = None) -> None:
        """Stop polling, waiting for an in-flight cycle, then release resources."""
        self._shutdown.set()
        self.scheduler.stop(timeout=timeout)
        self.sink.close()
        self.runtime.close()
        logger.info("Stats agent stopped")

    def run_forever(self) -> None:
        """Start the agent and block until SIGINT/SIGTERM or ``request_shutdown``.

        Must be called from the main thread (signal handlers are installed).
        """
        previous = {
            sig: signal.signal(sig, self._handle_signal) for sig in (signal.SIGINT, signal.SIGTERM)
        }
        try:
            self.start()
            self._shutdown.wait()
        finally:
            self.stop()
            for sig, handler in previous.items():
                signal.signal(sig, handler)

    def request_shutdown(self) -> None:
        self._shutdown.set()

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        logger.info(f"Received signal {signal.Signals(signum).name}, shutting down")
        self._shutdown.set()
