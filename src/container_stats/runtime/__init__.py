"""Runtime module - container runtime clients."""

from __future__ import annotations

from container_stats.runtime.client import DockerRuntimeClient, RuntimeClient

__all__ = ["DockerRuntimeClient", "RuntimeClient"]
