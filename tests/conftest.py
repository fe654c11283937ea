"""Shared fixtures: a scripted in-memory runtime."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from container_stats.core.exceptions import TransportError
from container_stats.core.schemas import (
    ContainerIdentity,
    ContainerRef,
    LifecycleSnapshot,
    RawStatsSnapshot,
)
from container_stats.runtime.client import RuntimeClient


def make_docker_stats(
    total_usage: int | None = 500,
    system_usage: int | None = 10000,
    memory_usage: int = 100 * 1024 * 1024,
    memory_limit: int = 1024 * 1024 * 1024,
    max_usage: int | None = 150 * 1024 * 1024,
    networks: dict[str, dict[str, int]] | None = None,
) -> dict[str, Any]:
    """Create a Docker stats response (``container.stats(stream=False)``)."""
    memory_stats: dict[str, Any] = {"usage": memory_usage, "limit": memory_limit}
    if max_usage is not None:
        memory_stats["max_usage"] = max_usage

    cpu_stats: dict[str, Any] = {"cpu_usage": {}}
    if total_usage is not None:
        cpu_stats["cpu_usage"]["total_usage"] = total_usage
    if system_usage is not None:
        cpu_stats["system_cpu_usage"] = system_usage

    return {
        "memory_stats": memory_stats,
        "cpu_stats": cpu_stats,
        "networks": networks if networks is not None else {"eth0": {"rx_bytes": 1200, "tx_bytes": 800}},
        "storage_stats": {},
    }


@dataclass
class FakeContainer:
    id: str
    name: str | None
    status: str = "running"
    running: bool | None = None
    stats: dict[str, Any] = field(default_factory=make_docker_stats)
    detail_error: bool = False
    stats_error: bool = False

    def lifecycle(self) -> LifecycleSnapshot:
        running = self.running if self.running is not None else self.status == "running"
        return LifecycleSnapshot(
            status=self.status,
            running=running,
            restarting=False,
            paused=False,
            oom_killed=False,
            started_at="2024-05-01T10:00:00Z",
            finished_at="0001-01-01T00:00:00Z",
        )


class FakeRuntime(RuntimeClient):
    """RuntimeClient returning scripted containers, in insertion order."""

    def __init__(self) -> None:
        self.containers: list[FakeContainer] = []
        self.list_error = False
        self.stats_calls: list[str] = []
        self.closed = False

    def add(self, container_id: str, name: str | None, **kwargs: Any) -> FakeContainer:
        container = FakeContainer(id=container_id, name=name, **kwargs)
        self.containers.append(container)
        return container

    def get(self, container_id: str) -> FakeContainer:
        return next(c for c in self.containers if c.id == container_id)

    def list_containers(self, include_stopped: bool = True) -> list[ContainerRef]:
        if self.list_error:
            raise TransportError("daemon unreachable")
        return [ContainerRef(id=c.id) for c in self.containers]

    def get_container_detail(
        self, ref: ContainerRef
    ) -> tuple[ContainerIdentity, LifecycleSnapshot]:
        container = self.get(ref.id)
        if container.detail_error:
            raise TransportError(f"inspect {ref.id} timed out")
        identity = ContainerIdentity(
            id=container.id, name=container.name, created="2024-05-01T09:59:00Z"
        )
        return identity, container.lifecycle()

    def get_container_stats(self, ref: ContainerRef) -> RawStatsSnapshot:
        self.stats_calls.append(ref.id)
        container = self.get(ref.id)
        if container.stats_error:
            raise TransportError(f"stats {ref.id} timed out")
        return RawStatsSnapshot.from_docker(container.stats)

    def version(self) -> dict[str, Any]:
        return {"Version": "26.1.0", "ApiVersion": "1.45"}

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def runtime() -> FakeRuntime:
    return FakeRuntime()


@pytest.fixture
def docker_stats():
    """Factory for Docker stats responses."""
    return make_docker_stats
