"""Exception hierarchy for the stats agent.

Partial data from the runtime is never an exception: missing fields are
resolved by the normalizer's defaults. Only transport, configuration and
sink failures are raised.
"""

from __future__ import annotations


class ContainerStatsError(Exception):
    """Base class for all agent errors."""


class TransportError(ContainerStatsError):
    """The runtime API was unreachable, timed out, or rejected a request."""


class ConfigurationError(ContainerStatsError):
    """Configuration is missing or malformed. Fatal at startup."""


class SinkError(ContainerStatsError):
    """The downstream sink failed to accept a batch."""
