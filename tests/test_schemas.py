"""Tests for container stats schemas."""

import re

import pytest
from pydantic import ValidationError

from container_stats.core.schemas import (
    AgentConfig,
    ContainerIdentity,
    LifecycleSnapshot,
    RawStatsSnapshot,
    parse_duration,
)


class TestParseDuration:
    """Tests for duration parsing."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("60s", 60.0),
            ("500ms", 0.5),
            ("1.5m", 90.0),
            ("1h", 3600.0),
            ("1d", 86400.0),
            ("30", 30.0),
            (" 10 s ", 10.0),
            (15, 15.0),
            (2.5, 2.5),
        ],
    )
    def test_valid(self, value, expected) -> None:
        """Test accepted duration formats."""
        assert parse_duration(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", ["", "fast", "10x", "-5s", True, None, [60]])
    def test_invalid(self, value) -> None:
        """Test rejected duration formats."""
        with pytest.raises(ValueError):
            parse_duration(value)


class TestAgentConfig:
    """Tests for AgentConfig schema."""

    def test_defaults(self, monkeypatch) -> None:
        """Test default configuration values."""
        monkeypatch.delenv("HOST_IP", raising=False)
        config = AgentConfig()

        assert config.stats_interval == 60.0
        assert config.emission_tag == "docker"
        assert config.container_name_filter is None
        assert config.name_pattern is None
        assert config.host_ip is None
        assert config.output_path is None

    def test_host_ip_from_environment(self, monkeypatch) -> None:
        """Test that HOST_IP populates host_ip."""
        monkeypatch.setenv("HOST_IP", "192.168.1.20")
        assert AgentConfig().host_ip == "192.168.1.20"
        assert AgentConfig(host_ip="10.0.0.1").host_ip == "10.0.0.1"

    def test_interval_string(self) -> None:
        """Test that interval strings are converted to seconds."""
        assert AgentConfig(stats_interval="5m").stats_interval == 300.0

    @pytest.mark.parametrize(
        "interval", ["soon", "0s", 0, -1, float("inf"), float("nan"), "1000000d"]
    )
    def test_invalid_interval(self, interval) -> None:
        """Test that malformed, non-positive, non-finite or oversized intervals are rejected."""
        with pytest.raises(ValidationError):
            AgentConfig(stats_interval=interval)

    def test_legacy_aliases(self) -> None:
        """Test the 'tag' and 'container_regex' keys."""
        config = AgentConfig.model_validate({"tag": "containers", "container_regex": "^api"})
        assert config.emission_tag == "containers"
        assert config.container_name_filter == "^api"

    def test_name_pattern(self) -> None:
        """Test the compiled name filter."""
        config = AgentConfig(container_name_filter="^web-")
        assert isinstance(config.name_pattern, re.Pattern)
        assert config.name_pattern.search("web-1")
        assert not config.name_pattern.search("db-1")

    def test_empty_filter_means_none(self) -> None:
        """Test that an empty filter disables filtering."""
        assert AgentConfig(container_name_filter="").container_name_filter is None

    def test_invalid_regex(self) -> None:
        """Test that a malformed regex is rejected."""
        with pytest.raises(ValidationError, match="Invalid container name filter"):
            AgentConfig(container_name_filter="web-(")

    def test_unknown_key(self) -> None:
        """Test that unknown keys are rejected."""
        with pytest.raises(ValidationError):
            AgentConfig.model_validate({"stats_intervall": "60s"})

    def test_empty_tag(self) -> None:
        """Test that the emission tag must not be empty."""
        with pytest.raises(ValidationError):
            AgentConfig(emission_tag="")


class TestContainerIdentity:
    """Tests for ContainerIdentity schema."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("/web-1", "web-1"), ("web-1", "web-1"), ("//odd", "/odd"), ("/", None), ("", None), (None, None)],
    )
    def test_display_name(self, name, expected) -> None:
        """Test stripping of the leading path separator."""
        assert ContainerIdentity(id="x", name=name).display_name == expected


class TestLifecycleSnapshot:
    """Tests for LifecycleSnapshot parsing."""

    def test_from_state(self) -> None:
        """Test parsing a Docker State object."""
        snapshot = LifecycleSnapshot.from_state(
            {
                "Status": "exited",
                "Running": False,
                "Paused": False,
                "Restarting": False,
                "OOMKilled": True,
                "StartedAt": "2024-05-01T10:00:00Z",
                "FinishedAt": "2024-05-01T11:00:00Z",
            }
        )
        assert snapshot.status == "exited"
        assert snapshot.running is False
        assert snapshot.oom_killed is True
        assert snapshot.finished_at == "2024-05-01T11:00:00Z"

    def test_absent_fields_stay_none(self) -> None:
        """Test that missing flags are not assumed False."""
        snapshot = LifecycleSnapshot.from_state({"Status": "created"})
        assert snapshot.status == "created"
        assert snapshot.running is None
        assert snapshot.paused is None
        assert snapshot.started_at is None

    @pytest.mark.parametrize("state", [None, "running", []])
    def test_malformed_state(self, state) -> None:
        """Test that a non-mapping state yields an empty snapshot."""
        assert LifecycleSnapshot.from_state(state) == LifecycleSnapshot()

    def test_malformed_values(self) -> None:
        """Test that wrongly typed values are dropped."""
        snapshot = LifecycleSnapshot.from_state({"Running": "true", "Status": 3})
        assert snapshot.running is None
        assert snapshot.status is None


class TestRawStatsSnapshot:
    """Tests for Docker stats parsing."""

    def test_full_document(self, docker_stats) -> None:
        """Test parsing a typical Linux stats response."""
        stats = RawStatsSnapshot.from_docker(docker_stats(total_usage=500, system_usage=10000))

        assert stats.memory.usage == 100 * 1024 * 1024
        assert stats.memory.max_usage == 150 * 1024 * 1024
        assert stats.cpu.total_usage == 500
        assert stats.cpu.system_usage == 10000
        assert stats.networks["eth0"].rx_bytes == 1200
        assert stats.storage is None
        assert stats.volumes is None

    def test_stopped_container_document(self) -> None:
        """Test the mostly-empty document Docker returns for stopped containers."""
        stats = RawStatsSnapshot.from_docker(
            {"memory_stats": {}, "cpu_stats": {"cpu_usage": {"total_usage": 0}}, "storage_stats": {}}
        )
        assert stats.memory.usage is None
        assert stats.cpu.total_usage == 0
        assert stats.cpu.system_usage is None
        assert stats.networks is None

    @pytest.mark.parametrize("document", [None, [], "stats", {}])
    def test_empty_or_malformed(self, document) -> None:
        """Test that unusable documents parse to an empty snapshot."""
        assert RawStatsSnapshot.from_docker(document) == RawStatsSnapshot()

    def test_malformed_counters(self) -> None:
        """Test that non-numeric and boolean counters become None."""
        stats = RawStatsSnapshot.from_docker(
            {
                "memory_stats": {"usage": "lots", "limit": True, "max_usage": 12.0},
                "cpu_stats": {"cpu_usage": "n/a", "system_cpu_usage": float("nan")},
                "networks": {"eth0": "down"},
            }
        )
        assert stats.memory.usage is None
        assert stats.memory.limit is None
        assert stats.memory.max_usage == 12
        assert stats.cpu.total_usage is None
        assert stats.cpu.system_usage is None
        assert stats.networks["eth0"].rx_bytes is None

    def test_storage_shapes(self) -> None:
        """Test both storage shapes in one document."""
        stats = RawStatsSnapshot.from_docker(
            {
                "storage_stats": {
                    "read_count": 1,
                    "write_size_bytes": 2048,
                    "volumes": {"logs": {"used": 10, "total": 100}},
                }
            }
        )
        assert stats.storage.read_count == 1
        assert stats.storage.write_size == 2048
        assert stats.storage.read_size is None
        assert stats.volumes["logs"].total == 100
