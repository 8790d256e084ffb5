from __future__ import annotations

import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .compose import DockerCompose
from .config import DEFAULT_CONFIG_FILE, HarnessConfig
from .errors import ComposeHarnessError
from .shutdown_strategy import ShutdownStrategy

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _compose(ctx: click.Context) -> DockerCompose:
    return DockerCompose.from_config(ctx.obj["config"])


def _run(ctx: click.Context, operation: str) -> None:
    try:
        getattr(_compose(ctx), operation)()
    except ComposeHarnessError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("--config", "config_path", default=DEFAULT_CONFIG_FILE, help="Harness YAML config file")
@click.option("--verbose", is_flag=True, default=False, help="Log compose output as it is produced")
@click.pass_context
def cli(ctx: click.Context, config_path: str, verbose: bool) -> None:
    """Drive docker-compose environments for tests."""
    _setup_logging(verbose)
    try:
        config = HarnessConfig.load(config_path)
    except ComposeHarnessError as e:
        raise click.ClickException(str(e)) from e
    ctx.obj = {"config": config}


@cli.command("build")
@click.pass_context
def build_cmd(ctx: click.Context) -> None:
    """Build service images."""
    _run(ctx, "build")


@cli.command("up")
@click.pass_context
def up_cmd(ctx: click.Context) -> None:
    """Start the environment detached."""
    _run(ctx, "up")


@cli.command("down")
@click.pass_context
def down_cmd(ctx: click.Context) -> None:
    """Stop and remove the environment."""
    _run(ctx, "down")


@cli.command("kill")
@click.pass_context
def kill_cmd(ctx: click.Context) -> None:
    """Kill all running containers."""
    _run(ctx, "kill")


@cli.command("rm")
@click.pass_context
def rm_cmd(ctx: click.Context) -> None:
    """Remove stopped containers."""
    _run(ctx, "rm")


@cli.command("ps")
@click.pass_context
def ps_cmd(ctx: click.Context) -> None:
    """List the environment's containers."""
    try:
        names = _compose(ctx).ps()
    except ComposeHarnessError as e:
        raise click.ClickException(str(e)) from e
    table = Table(title="Containers")
    table.add_column("Name")
    for name in sorted(names):
        table.add_row(name)
    console.print(table)


@cli.command("ports")
@click.argument("service")
@click.pass_context
def ports_cmd(ctx: click.Context, service: str) -> None:
    """Show the ports SERVICE publishes."""
    try:
        ports = _compose(ctx).ports(service)
    except ComposeHarnessError as e:
        raise click.ClickException(str(e)) from e
    table = Table(title=f"Ports of {service}")
    table.add_column("Internal", justify="right")
    table.add_column("Host")
    table.add_column("External", justify="right")
    for port in ports:
        table.add_row(str(port.internal_port), port.ip, str(port.external_port))
    console.print(table)


@cli.command("logs")
@click.argument("container")
@click.pass_context
def logs_cmd(ctx: click.Context, container: str) -> None:
    """Print CONTAINER's logs to stdout."""
    try:
        finished = _compose(ctx).write_logs(container, sys.stdout)
    except ComposeHarnessError as e:
        raise click.ClickException(str(e)) from e
    if not finished:
        raise click.ClickException(f"Log collection for '{container}' did not finish")


def _strategy(ctx: click.Context, name: Optional[str]) -> ShutdownStrategy:
    if name:
        return ShutdownStrategy[name.upper()]
    return ctx.obj["config"].strategy()


_strategy_option = click.option(
    "--strategy",
    type=click.Choice([s.name for s in ShutdownStrategy], case_sensitive=False),
    default=None,
    help="Override the configured shutdown strategy",
)


@cli.command("stop")
@_strategy_option
@click.pass_context
def stop_cmd(ctx: click.Context, strategy: Optional[str]) -> None:
    """Run the stop half of the shutdown strategy."""
    try:
        _strategy(ctx, strategy).stop(_compose(ctx))
    except ComposeHarnessError as e:
        raise click.ClickException(str(e)) from e


@cli.command("shutdown")
@_strategy_option
@click.pass_context
def shutdown_cmd(ctx: click.Context, strategy: Optional[str]) -> None:
    """Run the shutdown half of the shutdown strategy."""
    try:
        _strategy(ctx, strategy).shutdown(_compose(ctx), None)
    except ComposeHarnessError as e:
        raise click.ClickException(str(e)) from e


def main() -> int:
    try:
        cli(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except SystemExit as e:
        return int(e.code)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
