"""Shared constants for the stats agent.

Centralized defaults to keep configuration, CLI and record builders consistent.
"""

from __future__ import annotations

# Default polling interval, as written in configuration files
DEFAULT_STATS_INTERVAL = "60s"

# Tag the sink uses to route records downstream
DEFAULT_EMISSION_TAG = "docker"

# Environment variable carrying the host address stamped on every record
HOST_IP_ENV_VAR = "HOST_IP"

# Docker API request timeout (seconds)
DEFAULT_DOCKER_TIMEOUT_SECONDS = 60

# Value substituted for any absent scalar in an emitted record
MISSING_VALUE = ""

ALERT_RECORD_TYPE = "alert"
