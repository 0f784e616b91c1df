"""
imgsync CLI Main Entry Point.

Provides commands to run single passes, preview them, and keep the
artifact tree mirrored on a schedule.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
import humanize
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from imgsync import __version__
from imgsync.core.config import DEFAULT_HOME, ImgSyncConfig, load_config
from imgsync.core.errors import RootUnavailableError
from imgsync.core.logging import setup_logging
from imgsync.scheduler.driver import SchedulerDriver
from imgsync.sync.models import ItemAction, PassReport
from imgsync.sync.reconciler import Reconciler
from imgsync.transform.images import ImageTransformer

console = Console()


def get_config(ctx: click.Context) -> ImgSyncConfig:
    return ctx.obj["config"]


def build_reconciler(config: ImgSyncConfig) -> Reconciler:
    """Wire the reconciler to the image transformer from configuration."""
    return Reconciler(config.sync, ImageTransformer(config.encoding))


def apply_roots(config: ImgSyncConfig, source: Path | None, artifacts: Path | None) -> None:
    if source is not None:
        config.sync.source_root = source.expanduser().resolve()
    if artifacts is not None:
        config.sync.artifact_root = artifacts.expanduser().resolve()


def print_report(report: PassReport, title: str) -> None:
    """Render a pass report as a summary panel plus a table of changes."""
    summary = report.summary
    duration = report.duration_seconds or 0.0
    console.print(
        Panel(
            f"""[cyan]Source:[/cyan] {report.source_root}
[cyan]Artifacts:[/cyan] {report.artifact_root}
[cyan]Created:[/cyan] {summary.created}
[cyan]Updated:[/cyan] {summary.updated}
[cyan]Current:[/cyan] {summary.current}
[cyan]Deleted:[/cyan] {summary.deleted}
[cyan]Failed:[/cyan] {summary.failed}
[cyan]Written:[/cyan] {humanize.naturalsize(report.bytes_written, binary=True)}
[cyan]Duration:[/cyan] {duration:.2f}s""",
            title=title,
        )
    )

    changes = [o for o in report.outcomes if o.action is not ItemAction.CURRENT or not o.success]
    if not changes:
        return

    table = Table(title="Changes")
    table.add_column("Path", style="cyan")
    table.add_column("Action", style="yellow")
    table.add_column("Result", style="green")
    table.add_column("Detail", style="white")

    for outcome in sorted(changes, key=lambda o: o.key):
        table.add_row(
            escape(outcome.key),
            outcome.action.value,
            "ok" if outcome.success else "[red]failed[/red]",
            escape(outcome.reason) if outcome.reason else (
                humanize.naturalsize(outcome.bytes_written, binary=True)
                if outcome.bytes_written
                else ""
            ),
        )

    console.print(table)


def run_single_pass(ctx: click.Context, dry_run: bool, title: str) -> None:
    config = get_config(ctx)
    json_output = ctx.obj.get("json_output", False)
    reconciler = build_reconciler(config)

    try:
        if not dry_run:
            reconciler.ensure_artifact_root()
        report = reconciler.run_pass(dry_run=dry_run)
    except RootUnavailableError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(report.to_dict(), indent=2, default=str))
    elif not ctx.obj.get("quiet", False) or not report.success:
        print_report(report, title)

    if not report.success:
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="imgsync")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    json_output: bool,
    quiet: bool,
) -> None:
    """
    imgsync - Keep a compressed image tree in step with its source.

    New or modified images are re-encoded into the artifact tree and
    artifacts whose source image was removed are pruned.
    """
    ctx.ensure_object(dict)

    loaded = load_config(config)
    ctx.obj["config"] = loaded
    ctx.obj["json_output"] = json_output
    ctx.obj["quiet"] = quiet

    setup_logging(loaded.logging)


@cli.command("sync")
@click.option("--source", type=click.Path(path_type=Path), help="Source image directory")
@click.option("--artifacts", type=click.Path(path_type=Path), help="Compressed image directory")
@click.option("--dry-run", is_flag=True, help="Show what would be done")
@click.pass_context
def sync(ctx: click.Context, source: Path | None, artifacts: Path | None, dry_run: bool) -> None:
    """Run one sync pass."""
    apply_roots(get_config(ctx), source, artifacts)
    run_single_pass(ctx, dry_run, "Sync Plan" if dry_run else "Sync Pass")


@cli.command("plan")
@click.option("--source", type=click.Path(path_type=Path), help="Source image directory")
@click.option("--artifacts", type=click.Path(path_type=Path), help="Compressed image directory")
@click.pass_context
def plan(ctx: click.Context, source: Path | None, artifacts: Path | None) -> None:
    """Show what the next pass would create, update and delete."""
    apply_roots(get_config(ctx), source, artifacts)
    run_single_pass(ctx, True, "Sync Plan")


@cli.command("watch")
@click.option("--source", type=click.Path(path_type=Path), help="Source image directory")
@click.option("--artifacts", type=click.Path(path_type=Path), help="Compressed image directory")
@click.option("--interval", type=float, help="Seconds between passes")
@click.option("--no-immediate", is_flag=True, help="Wait one interval before the first pass")
@click.option(
    "--overlap",
    type=click.Choice(["skip", "queue"]),
    help="What to do when a pass is still running at the next trigger",
)
@click.pass_context
def watch(
    ctx: click.Context,
    source: Path | None,
    artifacts: Path | None,
    interval: float | None,
    no_immediate: bool,
    overlap: str | None,
) -> None:
    """Keep the artifact tree in sync until interrupted."""
    config = get_config(ctx)
    apply_roots(config, source, artifacts)

    schedule = config.schedule.model_copy()
    if interval is not None:
        if interval <= 0:
            raise click.BadParameter("must be positive", param_hint="--interval")
        schedule.interval_seconds = interval
    if no_immediate:
        schedule.run_immediately = False
    if overlap is not None:
        schedule.overlap_policy = overlap

    reconciler = build_reconciler(config)
    reconciler.ensure_artifact_root()
    driver = SchedulerDriver(reconciler.run_pass, schedule)

    if not ctx.obj.get("quiet", False):
        console.print(
            f"[green]Watching[/green] {config.sync.source_root} -> {config.sync.artifact_root} "
            f"every {humanize.naturaldelta(schedule.interval_seconds)}"
        )

    try:
        driver.run_forever()
    except KeyboardInterrupt:
        driver.stop()
        driver.wait()
        console.print("\n[yellow]Stopped[/yellow]")


@cli.command("status")
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the report of the last completed pass."""
    config = get_config(ctx)
    json_output = ctx.obj.get("json_output", False)

    if config.sync.status_file is None:
        console.print("[yellow]No status file configured (sync.status_file).[/yellow]")
        sys.exit(1)

    data = build_reconciler(config).load_status()
    if data is None:
        console.print("[yellow]No pass has been recorded yet.[/yellow]")
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(data, indent=2, default=str))
        return

    summary = data.get("summary", {})
    table = Table(title="Last Pass")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Source", str(data.get("source_root")))
    table.add_row("Artifacts", str(data.get("artifact_root")))
    table.add_row("Started", str(data.get("started_at")))
    table.add_row("Ended", str(data.get("ended_at")))
    for name in ("created", "updated", "current", "deleted", "failed"):
        table.add_row(name.capitalize(), str(summary.get(name, 0)))
    console.print(table)


@cli.command("init-config")
@click.argument("path", required=False, type=click.Path(path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init_config(path: Path | None, force: bool) -> None:
    """Write a default configuration file."""
    target = path or DEFAULT_HOME / "config.json"
    if target.exists() and not force:
        console.print(f"[red]Refusing to overwrite {target} (use --force)[/red]")
        sys.exit(1)

    ImgSyncConfig().save(target)
    console.print(f"[green]Configuration written to[/green] {target}")


def main() -> None:
    """Main entry point."""
    try:
        cli(obj={})
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
