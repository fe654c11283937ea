"""Container runtime client.

The poll cycle only depends on the small ``RuntimeClient`` interface defined
here. ``DockerRuntimeClient`` implements it on top of the Docker SDK and maps
every transport-level failure to ``TransportError`` so callers have a single
exception type to isolate per container or per cycle.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import docker
from docker.errors import DockerException
from requests.exceptions import RequestException

from container_stats.core.constants import DEFAULT_DOCKER_TIMEOUT_SECONDS
from container_stats.core.exceptions import TransportError
from container_stats.core.schemas import (
    ContainerIdentity,
    ContainerRef,
    LifecycleSnapshot,
    RawStatsSnapshot,
)

if TYPE_CHECKING:
    from docker.models.containers import Container

logger = logging.getLogger(__name__)

_TRANSPORT_ERRORS = (DockerException, RequestException)


class RuntimeClient(ABC):
    """Abstract interface to a container runtime."""

    @abstractmethod
    def list_containers(self, include_stopped: bool = True) -> list[ContainerRef]:
        """List containers in runtime order.

        Args:
            include_stopped: Include exited/created containers as well as running ones

        Raises:
            TransportError: If the runtime could not be queried
        """

    @abstractmethod
    def get_container_detail(
        self, ref: ContainerRef
    ) -> tuple[ContainerIdentity, LifecycleSnapshot]:
        """Fetch identity and lifecycle state for one container.

        Raises:
            TransportError: If the runtime could not be queried
        """

    @abstractmethod
    def get_container_stats(self, ref: ContainerRef) -> RawStatsSnapshot:
        """Fetch a one-shot stats snapshot for a running container.

        Raises:
            TransportError: If the runtime could not be queried
        """

    def version(self) -> dict[str, Any]:
        """Return runtime version details, if the runtime reports them."""
        return {}

    def close(self) -> None:
        """Release any resources held by the client."""


class DockerRuntimeClient(RuntimeClient):
    """RuntimeClient backed by the Docker Engine API.

    Example:
        ```python
        client = DockerRuntimeClient()
        for ref in client.list_containers(include_stopped=True):
            identity, lifecycle = client.get_container_detail(ref)
            if lifecycle.running:
                stats = client.get_container_stats(ref)
        ```
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout_seconds: int = DEFAULT_DOCKER_TIMEOUT_SECONDS,
        client: docker.DockerClient | None = None,
    ) -> None:
        """Initialize the Docker runtime client.

        Args:
            base_url: Docker daemon URL. None reads DOCKER_HOST etc. from the environment.
            timeout_seconds: API request timeout
            client: Pre-built DockerClient (mainly for testing)

        Raises:
            TransportError: If the Docker client cannot be created
        """
        if client is not None:
            self._client = client
            return

        try:
            if base_url:
                self._client = docker.DockerClient(base_url=base_url, timeout=timeout_seconds)
            else:
                self._client = docker.from_env(timeout=timeout_seconds)
        except _TRANSPORT_ERRORS as e:
            raise TransportError(f"Could not connect to Docker daemon: {e}") from e

    def list_containers(self, include_stopped: bool = True) -> list[ContainerRef]:
        try:
            containers = self._client.containers.list(all=include_stopped)
        except _TRANSPORT_ERRORS as e:
            raise TransportError(f"Failed to list containers: {e}") from e

        logger.debug(f"Found {len(containers)} containers")
        return [ContainerRef(id=c.id, handle=c) for c in containers]

    def get_container_detail(
        self, ref: ContainerRef
    ) -> tuple[ContainerIdentity, LifecycleSnapshot]:
        try:
            container = self._resolve(ref)
            # Listing returns summary attributes only; reload for the full inspect document
            container.reload()
            attrs = container.attrs or {}
        except _TRANSPORT_ERRORS as e:
            raise TransportError(f"Failed to inspect container {ref.short_id}: {e}") from e

        name = attrs.get("Name")
        created = attrs.get("Created")
        identity = ContainerIdentity(
            id=container.id or ref.id,
            name=name if isinstance(name, str) else None,
            created=created if isinstance(created, str) else None,
        )
        return identity, LifecycleSnapshot.from_state(attrs.get("State"))

    def get_container_stats(self, ref: ContainerRef) -> RawStatsSnapshot:
        try:
            stats = self._resolve(ref).stats(stream=False)
        except _TRANSPORT_ERRORS as e:
            raise TransportError(f"Failed to get stats for container {ref.short_id}: {e}") from e

        return RawStatsSnapshot.from_docker(stats)

    def version(self) -> dict[str, Any]:
        try:
            return self._client.version()
        except _TRANSPORT_ERRORS as e:
            raise TransportError(f"Failed to query Docker version: {e}") from e

    def close(self) -> None:
        try:
            self._client.close()
        except Exception as e:
            logger.debug(f"Error closing Docker client: {e}")

    def _resolve(self, ref: ContainerRef) -> Container:
        if ref.handle is not None:
            return ref.handle
        return self._client.containers.get(ref.id)
