"""Click CLI entry point for allreview-seeder."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from allreview_seeder.config import Config, get_app_dir
from allreview_seeder.errors import ConfigurationError
from allreview_seeder.pipeline import RunStats
from allreview_seeder.utils.logger import setup_logger

console = Console()


def _init(config_path: str | None = None) -> Config:
    """Load config and configure logging."""
    config = Config.load(config_path)
    setup_logger(
        level=config.get("logging.level", default="INFO"),
        log_file=str(config.log_file) if config.log_file else None,
        max_size_mb=config.get("logging.max_size_mb", default=10),
        backup_count=config.get("logging.backup_count", default=5),
    )
    return config


@click.group()
@click.option("--config", "config_path", default=None, help="Path to config YAML file")
@click.pass_context
def cli(ctx, config_path: str | None):
    """Allreview Seeder: seed the catalog with trending topics and images."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# =============================================================================
# run
# =============================================================================

def _print_run_table(stats: RunStats) -> None:
    table = Table(title="Seed Run" + (" (dry run)" if stats.dry_run else ""))
    table.add_column("Region", style="cyan")
    table.add_column("Trends", justify="right")
    table.add_column("Topics", style="green", justify="right")
    table.add_column("Skipped", style="dim", justify="right")
    table.add_column("Images", style="green", justify="right")
    table.add_column("Status")

    for outcome in stats.regions:
        if outcome.error:
            status = f"[red]failed: {outcome.error[:60]}[/red]"
        elif outcome.topic_errors:
            status = f"[yellow]{len(outcome.topic_errors)} topic error(s)[/yellow]"
        else:
            status = "[green]ok[/green]"
        table.add_row(
            outcome.region,
            str(outcome.trends_found),
            str(outcome.topics_inserted),
            str(outcome.topics_skipped),
            str(outcome.images_inserted),
            status,
        )
    console.print(table)


@cli.command("run")
@click.option("--dry-run", is_flag=True, help="Simulate the run without writing to the catalog")
@click.option("--region", "regions", multiple=True, help="Only seed these region codes (repeatable)")
@click.pass_context
def run_cmd(ctx, dry_run: bool, regions: tuple[str, ...]):
    """Discover trends for every region and seed topics and images."""
    from allreview_seeder.catalog.gateway import create_catalog
    from allreview_seeder.images.chain import build_provider_chain
    from allreview_seeder.notifications.slack_notifier import SlackNotifier
    from allreview_seeder.pipeline import SeedPipeline
    from allreview_seeder.trends.discovery import TrendDiscovery
    from allreview_seeder.utils.http import create_http_client

    config = _init(ctx.obj.get("config_path"))

    selected = [r.upper() for r in regions] if regions else config.regions
    unknown = [r for r in selected if r not in config.regions]
    if unknown:
        raise click.BadParameter(f"not configured: {', '.join(unknown)}", param_hint="--region")

    try:
        with create_http_client(config) as client:
            catalog = create_catalog(config, dry_run=dry_run, client=client)
            pipeline = SeedPipeline(
                config,
                discovery=TrendDiscovery(config, client=client),
                chain=build_provider_chain(config, client=client),
                catalog=catalog,
                dry_run=dry_run,
            )
            if dry_run:
                console.print(Panel("[yellow]DRY RUN: nothing will be written to the catalog[/yellow]"))
            stats = pipeline.run(selected)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise click.Abort()
    except Exception as e:
        console.print(f"[red]Fatal error: {e}[/red]")
        raise click.Abort()

    _print_run_table(stats)
    console.print(f"\n[green]Seed complete: {stats.topics_inserted} topics, {stats.images_inserted} images[/green]")

    if not dry_run:
        SlackNotifier(config).notify_run_complete(stats)


# =============================================================================
# trends
# =============================================================================

@cli.command("trends")
@click.argument("region")
@click.pass_context
def trends_cmd(ctx, region: str):
    """Show the trending topics discovered for one region (no writes)."""
    from allreview_seeder.trends.discovery import TrendDiscovery
    from allreview_seeder.utils.http import create_http_client

    config = _init(ctx.obj.get("config_path"))
    region = region.upper()
    with create_http_client(config) as client:
        topics = TrendDiscovery(config, client=client).discover(region)

    if not topics:
        console.print(f"[dim]No trends found for {region}[/dim]")
        return

    table = Table(title=f"Trends ({region})")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Topic", style="white")
    for i, name in enumerate(topics, 1):
        table.add_row(str(i), name)
    console.print(table)


# =============================================================================
# images
# =============================================================================

@cli.command("images")
@click.argument("topic")
@click.pass_context
def images_cmd(ctx, topic: str):
    """Resolve candidate images for one topic through the provider chain (no writes)."""
    from allreview_seeder.images.chain import build_provider_chain
    from allreview_seeder.utils.http import create_http_client

    config = _init(ctx.obj.get("config_path"))
    with create_http_client(config) as client:
        urls = build_provider_chain(config, client=client).resolve(topic)

    console.print(Panel("\n".join(urls), title=f"{len(urls)} image(s) for \"{topic}\"", border_style="cyan"))


# =============================================================================
# config
# =============================================================================

@cli.command("config")
@click.option("--show", is_flag=True, help="Show effective settings and warnings")
@click.pass_context
def config_cmd(ctx, show: bool):
    """Show configuration paths and settings."""
    config_path = ctx.obj.get("config_path")

    app_dir = get_app_dir()
    cwd_config = Path.cwd() / "config" / "config.yaml"
    app_config = app_dir / "config.yaml"

    console.print(Panel("[bold]Configuration Paths[/bold]", border_style="cyan"))
    console.print(f"  App directory:     [cyan]{app_dir}[/cyan]")
    console.print(f"  CWD config:        {'[green]exists' if cwd_config.exists() else '[dim]not found'}[/] {cwd_config}")
    console.print(f"  App dir config:    {'[green]exists' if app_config.exists() else '[dim]not found'}[/] {app_config}")

    if config_path:
        console.print(f"  [bold]Active config:[/bold] [green]{config_path}[/green] (--config flag)")
    elif cwd_config.exists():
        console.print(f"  [bold]Active config:[/bold] [green]{cwd_config}[/green] (CWD)")
    elif app_config.exists():
        console.print(f"  [bold]Active config:[/bold] [green]{app_config}[/green] (app dir)")
    else:
        console.print("  [bold]Active config:[/bold] [yellow]none, using defaults[/yellow]")

    if show:
        config = _init(config_path)
        console.print(f"\n  [bold]Regions:[/bold] {', '.join(config.regions)}")
        console.print(f"  [bold]Catalog backend:[/bold] {config.get('catalog.backend')}")
        console.print(f"  [bold]Images per topic:[/bold] {config.images_per_topic}")
        for warning in config.validate():
            console.print(f"  [yellow]! {warning}[/yellow]")
