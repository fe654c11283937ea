"""CLI for the container stats agent.

Provides a rich command-line interface using Typer for:
- Running the polling agent
- Taking a one-off snapshot of container stats
- Generating a sample configuration
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from container_stats.agent import StatsAgent, build_runtime
from container_stats.core.config import load_config
from container_stats.core.constants import ALERT_RECORD_TYPE
from container_stats.core.exceptions import ConfigurationError, TransportError
from container_stats.core.schemas import AgentConfig
from container_stats.monitoring.poll_cycle import PollCycle
from container_stats.sinks.memory import CollectingSink
from container_stats.utils.logging import setup_logging

app = typer.Typer(
    name="container-stats",
    help="Container stats collection agent",
    add_completion=False,
)

# Messages go to stderr; stdout is reserved for records
console = Console(stderr=True)
output_console = Console()


def _load_config_or_exit(config: Path | None, **overrides: Any) -> AgentConfig:
    try:
        return load_config(config, **overrides)
    except ConfigurationError as e:
        console.print(f"[bold red]Error loading config: {e}[/]")
        raise typer.Exit(1) from e


@app.command()
def run(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to agent configuration file (YAML/JSON)"
    ),
    interval: str | None = typer.Option(
        None, "--interval", "-i", help="Polling interval, e.g. '60s' (overrides config)"
    ),
    tag: str | None = typer.Option(None, "--tag", "-t", help="Emission tag (overrides config)"),
    name_filter: str | None = typer.Option(
        None, "--filter", "-f", help="Container name regex (overrides config)"
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="JSON-lines output file (default: stdout)"
    ),
    log_level: str = typer.Option("INFO", "--log-level", "-l", help="Logging level"),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file in addition to console"
    ),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Output logs in JSON format (for programmatic parsing)"
    ),
) -> None:
    """Poll the container runtime and emit records until interrupted."""
    setup_logging(
        level=log_level, log_file=log_file, json_format=json_logs, rich_console=not json_logs
    )

    agent_config = _load_config_or_exit(
        config,
        stats_interval=interval,
        emission_tag=tag,
        container_name_filter=name_filter,
        output_path=output,
    )

    try:
        agent = StatsAgent(agent_config)
    except TransportError as e:
        console.print(f"[bold red]Could not connect to the container runtime: {e}[/]")
        raise typer.Exit(1) from e

    agent.run_forever()


@app.command()
def snapshot(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to agent configuration file (YAML/JSON)"
    ),
    name_filter: str | None = typer.Option(
        None, "--filter", "-f", help="Container name regex (overrides config)"
    ),
    output_format: str = typer.Option("table", "--format", help="Output format: table, json"),
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level"),
) -> None:
    """Run a single poll cycle and print the resulting stats records."""
    setup_logging(level=log_level)

    agent_config = _load_config_or_exit(config, container_name_filter=name_filter)

    try:
        runtime = build_runtime(agent_config)
    except TransportError as e:
        console.print(f"[bold red]Could not connect to the container runtime: {e}[/]")
        raise typer.Exit(1) from e

    sink = CollectingSink()
    cycle = PollCycle(
        runtime=runtime,
        sink=sink,
        tag=agent_config.emission_tag,
        name_filter=agent_config.name_pattern,
        host_ip=agent_config.host_ip,
    )
    try:
        records = cycle.run_once()
    finally:
        runtime.close()

    if output_format == "json":
        typer.echo(json.dumps(records, indent=2))
    elif output_format == "table":
        _show_records_table(records)
    else:
        console.print(f"[bold red]Unknown format: {output_format}[/]")
        raise typer.Exit(1)


@app.command()
def init_config(
    output: Path = typer.Option(
        Path("container-stats.yaml"), "--output", "-o", help="Output configuration file"
    ),
) -> None:
    """Generate a sample configuration file."""
    sample_config = """\
# Container stats agent configuration

# How often to poll the runtime (ms, s, m, h, d; plain numbers are seconds)
stats_interval: 60s

# Tag attached to every emitted batch
emission_tag: docker

# Only containers whose name matches get stats records.
# Lifecycle alerts are emitted for every container regardless.
# container_name_filter: "^web-"

# Host address stamped on records (defaults to the HOST_IP environment variable)
# host_ip: 10.0.0.5

# Docker daemon (defaults to DOCKER_HOST / local socket)
# docker_base_url: unix:///var/run/docker.sock
docker_timeout_seconds: 60

# JSON-lines output file (defaults to stdout)
# output_path: ./container-stats.jsonl
"""
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(sample_config)
    console.print(f"[bold green]Sample configuration written to {output}[/]")


def _show_records_table(records: list[dict[str, Any]]) -> None:
    """Display the stats records from one cycle."""
    stats = [r for r in records if r.get("type") != ALERT_RECORD_TYPE]

    if not stats:
        output_console.print("[bold yellow]No containers reported[/]")
        return

    table = Table(title="Container Stats")
    table.add_column("Name", style="cyan")
    table.add_column("ID", style="dim")
    table.add_column("Status", style="green")
    table.add_column("CPU %", justify="right")
    table.add_column("Mem Usage", justify="right")
    table.add_column("Mem Limit", justify="right")
    table.add_column("Net RX/TX", justify="right")

    for r in stats:
        rx = sum(n["rx"] for n in r["networks"] if isinstance(n["rx"], int))
        tx = sum(n["tx"] for n in r["networks"] if isinstance(n["tx"], int))
        table.add_row(
            str(r["container_name"]),
            str(r["container_id"])[:12],
            str(r["status"]) or "N/A",
            f"{r['cpu_percent']:.2f}",
            _format_bytes(r["mem_usage"]),
            _format_bytes(r["mem_limit"]),
            f"{_format_bytes(rx)} / {_format_bytes(tx)}",
        )

    output_console.print(table)


def _format_bytes(value: int) -> str:
    if value <= 0:
        return "0 B"
    size = float(value)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TiB"


if __name__ == "__main__":
    app()
