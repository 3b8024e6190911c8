"""CLI main entry point."""

import json
import sys
from collections.abc import Sequence
from typing import Any

import click

from ... import __version__
from ...adapters import (
    CommandBuilderAdapter,
    FsArtifactCacheAdapter,
    FsCheckoutCacheAdapter,
    GitMirrorAdapter,
    LoggingMetricsAdapter,
    NoopMetricsAdapter,
    StdLoggerAdapter,
    SubprocessRunnerAdapter,
    SymlinkAliasAdapter,
    UtcClockAdapter,
)
from ...core import ToolstashConfig, ToolstashError, ToolstashService
from ...core.models import short_id

# Single-letter forms of the run commands.
SHORTCUTS = {"-s": "run", "-S": "run-lazy"}


def create_service(config: ToolstashConfig) -> ToolstashService:
    """Create service with wired adapters."""
    logger = StdLoggerAdapter(level=config.log_level)
    mirror = GitMirrorAdapter(config.mirror_dir, config.remotes, config.branch, logger)
    metrics = LoggingMetricsAdapter() if config.metrics_type == "logging" else NoopMetricsAdapter()

    return ToolstashService(
        mirror=mirror,
        builder=CommandBuilderAdapter(config.build_command, logger, build_dir=config.build_dir),
        checkouts=FsCheckoutCacheAdapter(config.src_dir, mirror, logger),
        artifacts=FsArtifactCacheAdapter(
            config.bin_dir, config.layout, logger, alias_name=config.alias_name
        ),
        alias=SymlinkAliasAdapter(config.bin_dir, logger, name=config.alias_name),
        runner=SubprocessRunnerAdapter(logger),
        clock=UtcClockAdapter(),
        logger=logger,
        metrics=metrics,
        branch=config.branch,
        root_env_var=config.root_env_var,
    )


def expand_shortcuts(args: Sequence[str]) -> list[str]:
    """Rewrite a leading ``-s``/``-S`` into the run command it stands for."""
    for i, arg in enumerate(args):
        if arg in SHORTCUTS:
            return [*args[:i], SHORTCUTS[arg], *args[i + 1 :]]
        if not arg.startswith("-"):
            break
    return list(args)


class ToolstashGroup(click.Group):
    """Command group that accepts the run shortcuts and exits 1 on usage errors."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        return super().parse_args(ctx, expand_shortcuts(args))

    def make_context(self, *args: Any, **kwargs: Any) -> click.Context:
        try:
            return super().make_context(*args, **kwargs)
        except click.UsageError as e:
            e.exit_code = 1
            raise

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = 1
            raise


PASSTHROUGH = {"ignore_unknown_options": True, "allow_interspersed_args": False}


@click.group(cls=ToolstashGroup, context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(__version__, prog_name="toolstash")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """toolstash - Build, cache and run any revision of a toolchain.

    \b
    Shortcuts:
      -s REF [ARGS]...  same as: run REF [ARGS]...
      -S REF [ARGS]...  same as: run-lazy REF [ARGS]...
    """
    if ctx.obj is None:
        config = ToolstashConfig.from_env()
        if debug:
            config.log_level = "DEBUG"
        ctx.obj = create_service(config)


@cli.command()
@click.pass_obj
def fetch(service: ToolstashService) -> None:
    """Fetch the tracked branch into the mirror."""
    try:
        summary = service.fetch()
        head = short_id(summary.head) if summary.head else "unknown"
        click.echo(f"Fetched {summary.branch} from {summary.remote.name} (head {head})")

    except (ToolstashError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("ref")
@click.pass_obj
def build(service: ToolstashService, ref: str) -> None:
    """Build REF unless it is already cached.

    REF may be a commit hash, branch, tag, or "tip" for the newest
    commit of the tracked branch.
    """
    try:
        summary = service.build(ref)

        if summary.cached:
            click.echo(f"Already built: {summary.commit}")
        else:
            click.echo(f"Built {summary.commit} in {summary.duration:.1f}s")
        if summary.tip_updated:
            click.echo(f"tip -> {summary.commit}")

    except (ToolstashError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command(context_settings=PASSTHROUGH)
@click.argument("ref")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_obj
def run(service: ToolstashService, ref: str, args: tuple[str, ...]) -> None:
    """Run the cached binary for REF with ARGS. Never builds."""
    try:
        exit_code = service.run(ref, args)
    except (ToolstashError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    sys.exit(exit_code)


@cli.command("run-lazy", context_settings=PASSTHROUGH)
@click.argument("ref")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_obj
def run_lazy(service: ToolstashService, ref: str, args: tuple[str, ...]) -> None:
    """Run the binary for REF with ARGS, building it first if needed."""
    try:
        exit_code = service.run_lazy(ref, args)
    except (ToolstashError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    sys.exit(exit_code)


@cli.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
@click.pass_obj
def list_builds(service: ToolstashService, as_json: bool) -> None:
    """List cached builds, newest commit first."""
    try:
        listings = service.list_builds()
    except (ToolstashError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        output = [
            {
                "commit": listing.commit,
                "committed_at": listing.committed_at.isoformat() if listing.committed_at else None,
                "subject": listing.subject,
                "tip": listing.is_tip,
            }
            for listing in listings
        ]
        click.echo(json.dumps(output, indent=2))
        return

    for listing in listings:
        when = listing.committed_at.strftime("%Y-%m-%d %H:%M") if listing.committed_at else "?"
        marker = " (tip)" if listing.is_tip else ""
        click.echo(f"{short_id(listing.commit)}  {when}  {listing.subject}{marker}")


@cli.command("rm")
@click.argument("ref")
@click.pass_obj
def remove(service: ToolstashService, ref: str) -> None:
    """Remove the cached build and checkout of REF."""
    try:
        result = service.remove(ref)

        click.echo(f"Removed {result.commit}")
        if result.alias_cleared:
            click.echo("tip alias cleared")

    except (ToolstashError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command("clear-source-cache")
@click.pass_obj
def clear_source_cache(service: ToolstashService) -> None:
    """Delete all source checkouts. Builds are kept."""
    try:
        result = service.clear_source_cache()
    except (ToolstashError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not result.root_present:
        click.echo("No source cache to clear")
    else:
        click.echo(f"Removed {len(result.removed)} checkout(s)")


def main() -> None:
    """Main entry point."""
    cli(prog_name="toolstash")
