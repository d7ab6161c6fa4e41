"""
netconverge — CLI entrypoint.

Usage:
    python -m netconverge.main --help
    python -m netconverge.main ensure
    python -m netconverge.main subnets --private
"""

from __future__ import annotations

import json
import os
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING

import click

from netconverge import __version__
from netconverge.core.errors import ConvergenceError
from netconverge.core.observability.logging_config import (
    ENV_LOG_FILE,
    ENV_LOG_FILE_LEVEL,
    resolve_level,
    setup_logging,
)

if TYPE_CHECKING:
    from netconverge.core.use_cases.converge import ConvergeSession


@click.group()
@click.version_option(version=__version__, prog_name="netconverge")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (includes AWS SDK).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to netconverge.yml (default: auto-detect).",
)
@click.option("--mock", is_flag=True, help="Use an in-memory provider instead of EC2.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    mock: bool,
) -> None:
    """netconverge — converge a cluster's VPC security group."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["mock"] = mock

    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_LOG_FILE),
        log_file_level=os.environ.get(ENV_LOG_FILE_LEVEL),
        quiet_sdk=not debug,
    )


def _session(ctx: click.Context) -> ConvergeSession:
    from netconverge.core.use_cases.converge import build_session

    return build_session(
        config_path=ctx.obj.get("config_path"),
        mock=ctx.obj.get("mock", False),
        provider=ctx.obj.get("provider"),
    )


def _fail(error: ConvergenceError, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(error.to_dict(), indent=2))
    else:
        click.secho(f"❌ {error.describe()}", fg="red")
    sys.exit(1)


def _deadline(seconds: float | None) -> float | None:
    return time.monotonic() + seconds if seconds is not None else None


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def ensure(ctx: click.Context, as_json: bool) -> None:
    """Run one security group convergence pass."""
    try:
        result = _session(ctx).converger.ensure()
    except ConvergenceError as e:
        _fail(e, as_json)
        return

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    messages = {
        "created": ("🆕 Created security group", "yellow"),
        "authorized": ("✅ Authorized ingress from VPC CIDR", "green"),
        "unchanged": ("✅ Already converged", "green"),
    }
    text, color = messages[result.outcome]
    click.secho(f"{text}: {result.group_name} ({result.group_id})", fg=color, bold=True)
    if not ctx.obj.get("quiet"):
        click.echo(f"   Cluster: {result.cluster_id}")
        click.echo(f"   VPC:     {result.domain_id} {result.cidr}")
        if result.outcome == "created":
            click.echo("   Run again to authorize ingress once the group is visible.")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def vpc(ctx: click.Context, as_json: bool) -> None:
    """Show the cluster's VPC."""
    try:
        domain = _session(ctx).locator.find_canonical_domain()
    except ConvergenceError as e:
        _fail(e, as_json)
        return

    if as_json:
        click.echo(json.dumps(domain.model_dump(), indent=2))
        return

    click.secho(f"🌐 {domain.id}", fg="cyan", bold=True)
    click.echo(f"   CIDR: {domain.cidr}")
    for tag in domain.tags:
        click.echo(f"   {tag.key:<20} {tag.value}")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def cidr(ctx: click.Context, as_json: bool) -> None:
    """Print the cluster VPC id and CIDR block."""
    try:
        domain_id, block = _session(ctx).locator.domain_cidr()
    except ConvergenceError as e:
        _fail(e, as_json)
        return

    if as_json:
        click.echo(json.dumps({"vpc_id": domain_id, "cidr": block}, indent=2))
        return
    click.echo(f"{domain_id} {block}")


@cli.command()
@click.option("--private", "private_only", is_flag=True, help="Only subnets tagged private.")
@click.option(
    "--deadline",
    "deadline_seconds",
    type=float,
    default=None,
    help="Overall seconds to wait for the subnet listing.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def subnets(
    ctx: click.Context,
    private_only: bool,
    deadline_seconds: float | None,
    as_json: bool,
) -> None:
    """List subnet ids in the cluster's VPC."""
    try:
        locator = _session(ctx).locator
        deadline = _deadline(deadline_seconds)
        if private_only:
            ids = locator.list_private_subnet_ids(deadline=deadline)
        else:
            ids = locator.list_subnet_ids(deadline=deadline)
    except ConvergenceError as e:
        _fail(e, as_json)
        return

    if as_json:
        click.echo(json.dumps({"private": private_only, "subnet_ids": ids}, indent=2))
        return
    for subnet_id in ids:
        click.echo(subnet_id)


@cli.group()
def config() -> None:
    """Configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate netconverge.yml."""
    from netconverge.core.config.loader import load_config

    try:
        cfg = load_config(ctx.obj.get("config_path"))
    except ConvergenceError as e:
        _fail(e, as_json)
        return

    if as_json:
        click.echo(json.dumps(cfg.model_dump(mode="json"), indent=2))
        return

    click.secho("✅ Configuration is valid", fg="green", bold=True)
    click.echo(f"   Cluster:   {cfg.cluster_id or '(from environment)'}")
    click.echo(f"   Region:    {cfg.region or '(default)'}")
    click.echo(f"   Tie-break: {cfg.tie_break.value}")
    click.echo(f"   Poll:      every {cfg.poll.interval:g}s for {cfg.poll.timeout:g}s")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
