"""Tests for StatsAgent."""

import logging
from unittest.mock import MagicMock

import pytest

from container_stats.agent import StatsAgent, build_sink
from container_stats.core.exceptions import TransportError
from container_stats.core.schemas import AgentConfig
from container_stats.sinks.jsonl import JsonLinesSink
from container_stats.sinks.memory import CollectingSink


class TestStatsAgent:
    """Tests for StatsAgent class."""

    @pytest.fixture
    def config(self) -> AgentConfig:
        return AgentConfig(stats_interval="30s", emission_tag="containers", host_ip="10.0.0.5")

    @pytest.fixture
    def scheduler(self) -> MagicMock:
        return MagicMock()

    def test_start_schedules_poll_cycle(self, config, runtime, scheduler) -> None:
        """Test that start hands the interval and the cycle to the scheduler."""
        agent = StatsAgent(config, runtime=runtime, sink=CollectingSink(), scheduler=scheduler)

        agent.start()

        scheduler.start.assert_called_once_with(30.0, agent.cycle.run_once)

    def test_cycle_uses_config(self, config, runtime, scheduler) -> None:
        """Test that records carry the configured tag and host address."""
        sink = CollectingSink()
        runtime.add("id-1", "/web-1")
        agent = StatsAgent(config, runtime=runtime, sink=sink, scheduler=scheduler)

        agent.cycle.run_once()

        assert sink.batches[0].tag == "containers"
        assert sink.records[0]["host_ip"] == "10.0.0.5"

    def test_start_logs_runtime_version(self, config, runtime, scheduler, caplog) -> None:
        """Test that runtime details are logged at startup."""
        caplog.set_level(logging.INFO)
        agent = StatsAgent(config, runtime=runtime, sink=CollectingSink(), scheduler=scheduler)

        agent.start()

        assert "version=26.1.0" in caplog.text
        assert "api=1.45" in caplog.text

    def test_version_failure_is_tolerated(self, config, runtime, scheduler, caplog) -> None:
        """Test that a failed version query does not prevent startup."""
        caplog.set_level(logging.WARNING)
        runtime.version = MagicMock(side_effect=TransportError("timeout"))
        agent = StatsAgent(config, runtime=runtime, sink=CollectingSink(), scheduler=scheduler)

        agent.start()

        scheduler.start.assert_called_once()
        assert "Could not query runtime version" in caplog.text

    def test_stop_releases_resources(self, config, runtime, scheduler) -> None:
        """Test that stop halts the scheduler and closes sink and runtime."""
        sink = MagicMock()
        agent = StatsAgent(config, runtime=runtime, sink=sink, scheduler=scheduler)

        agent.stop(timeout=1.0)

        scheduler.stop.assert_called_once_with(timeout=1.0)
        sink.close.assert_called_once()
        assert runtime.closed

    def test_build_sink(self, tmp_path) -> None:
        """Test that the default sink writes JSON lines."""
        sink = build_sink(AgentConfig(output_path=tmp_path / "stats.jsonl"))
        assert isinstance(sink, JsonLinesSink)
