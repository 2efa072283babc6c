"""CLI for the node launcher.

Provides a small command-line interface using Typer for:
- Running a single node container and waiting for it
- Printing the instructions to join another host to the cluster
"""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from node_launcher.core.config import load_config
from node_launcher.core.errors import RuntimeAPIError
from node_launcher.core.schemas import RunnerConfig, Volume
from node_launcher.runners.container_runner import ContainerRunner, create_start_command
from node_launcher.utils.logging import setup_logging

app = typer.Typer(
    name="node-launcher",
    help="Docker execution backend of the cluster node launcher",
    add_completion=False,
)

console = Console()


def _resolve_config(
    config: Path | None,
    image: str | None,
    user: str | None,
    volumes_from: str | None,
    gc_delay: float | None,
) -> RunnerConfig:
    """Merge a config file (if any) with command line overrides."""
    overrides = {
        key: value
        for key, value in {
            "image": image,
            "user": user,
            "volumes_from": volumes_from,
            "gc_delay_seconds": gc_delay,
        }.items()
        if value is not None
    }
    if config is not None:
        base = load_config(config)
        return RunnerConfig.model_validate({**base.model_dump(), **overrides})
    return RunnerConfig.model_validate(overrides)


@app.command()
def run(
    command: str = typer.Argument(..., help="Entrypoint to run inside the container"),
    args: list[str] | None = typer.Argument(None, help="Arguments (put them after '--')"),
    name: str = typer.Option(..., "--name", "-n", help="Container name (colons are stripped)"),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Runner configuration file (YAML/JSON)"
    ),
    image: str | None = typer.Option(None, "--image", "-i", help="Image (overrides config)"),
    user: str | None = typer.Option(None, "--user", "-u", help="Container user"),
    volumes_from: str | None = typer.Option(
        None, "--volumes-from", help="Take volumes from this container"
    ),
    gc_delay: float | None = typer.Option(
        None, "--gc-delay", help="Seconds before stopped containers are collected"
    ),
    port: list[int] | None = typer.Option(None, "--port", "-p", help="Port to publish"),
    volume: list[str] | None = typer.Option(
        None, "--volume", "-v", help="Bind mount host:container[:ro]"
    ),
    log_level: str = typer.Option("INFO", "--log-level", "-l", help="Logging level"),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file in addition to console"
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Output logs in JSON format"),
) -> None:
    """Start one container, wait for it to exit, then clean up."""
    setup_logging(
        level=log_level, log_file=log_file, json_format=json_logs, rich_console=not json_logs
    )

    try:
        runner_config = _resolve_config(config, image, user, volumes_from, gc_delay)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        console.print(f"[bold red]Invalid configuration: {e}[/]")
        raise typer.Exit(1) from e

    try:
        volumes = [Volume.parse(v) for v in volume or []]
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--volume") from e

    try:
        runner = ContainerRunner(runner_config)
    except RuntimeAPIError as e:
        console.print(f"[bold red]{e}[/]")
        raise typer.Exit(1) from e

    try:
        process = runner.start(command, args or [], volumes, port or [], name)
        console.print(
            f"[bold green]Started container {process.container_id[:12]}[/] from {runner_config.image}"
        )
        try:
            process.wait()
        except KeyboardInterrupt:
            console.print("[bold yellow]Interrupted, stopping container...[/]")
            process.terminate()
        console.print("[bold blue]Container exited[/]")
    except RuntimeAPIError as e:
        console.print(f"[bold red]{e}[/]")
        raise typer.Exit(1) from e
    finally:
        runner.cleanup()
        runner.close()


@app.command("join-command")
def join_command(
    index: int = typer.Option(2, "--index", min=1, help="1-based index of the joining starter"),
    master_ip: str = typer.Option(..., "--master-ip", help="Address of this starter"),
    master_port: str = typer.Option("", "--master-port", help="Port of this starter"),
) -> None:
    """Print the commands to start a starter on another host that joins this one."""
    console.print(
        create_start_command(index, master_ip, master_port),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


if __name__ == "__main__":
    app()
