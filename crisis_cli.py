#!/usr/bin/env python3
"""
CrisisLens CLI - Command line interface for crisis aggregation and insights.

Commands:
    aggregate   Fetch, deduplicate and rank current events
    briefing    Run the full pipeline and print insights
    sources     Show connector health
    watch       Re-run the briefing on an interval
    serve       Start the HTTP API
    version     Show version information
"""
import asyncio
import json
import time
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from crisislens import __version__
from crisislens.core.config import Settings, get_settings
from crisislens.core.exceptions import ConfigurationError
from crisislens.core.logging import init_logging, shutdown_logging
from crisislens.services.pipeline import CrisisPipeline, PipelineResult, build_pipeline

app = typer.Typer(
    name="crisislens",
    help="CrisisLens - Crisis report aggregation and situational insights CLI",
    add_completion=False,
)
console = Console()

RISK_COLORS = {
    "Critical": "red",
    "High": "yellow",
    "Medium": "cyan",
    "Low": "green",
}


def load_settings(**overrides) -> Settings:
    """Load environment settings with CLI overrides, exiting on invalid values."""
    try:
        base = get_settings()
    except ConfigurationError as e:
        console.print(f"[red]{e.message}[/red]")
        for error in e.details.get("errors", []):
            console.print(f"  [dim]{error.get('loc')}: {error.get('msg')}[/dim]")
        raise typer.Exit(2)
    overrides["offline"] = overrides.get("offline") or base.offline
    return base.model_copy(update=overrides)


def make_pipeline(offline: bool, limit: Optional[int] = None, verbose: bool = False) -> CrisisPipeline:
    """Build a pipeline from environment settings with CLI overrides."""
    init_logging(verbose=verbose)
    overrides = {"offline": offline}
    if limit is not None:
        overrides["result_limit"] = limit
    return build_pipeline(load_settings(**overrides))


def urgency_style(urgency: Optional[int]) -> str:
    if urgency is None:
        return "dim"
    if urgency >= 8:
        return "bold red"
    if urgency >= 6:
        return "yellow"
    return "green"


def render_events(events, title: str = "Events"):
    table = Table(title=title, show_header=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Urgency", justify="right")
    table.add_column("Type", style="cyan")
    table.add_column("Location")
    table.add_column("Source", style="dim")
    table.add_column("Report", max_width=60)

    for index, event in enumerate(events, 1):
        urgency = event.urgency
        style = urgency_style(urgency)
        verified = " [green]✓[/green]" if event.verified else ""
        table.add_row(
            str(index),
            f"[{style}]{urgency if urgency is not None else '-'}[/{style}]",
            event.type.replace("_", " "),
            event.location,
            f"{event.source}{verified}",
            event.text[:120],
        )

    console.print(table)


def render_sources_summary(metadata):
    for source in metadata.sources:
        if source.success:
            console.print(f"  [green]✓[/green] {source.name}: {source.count} events ({source.elapsed_ms:.0f}ms)")
        else:
            console.print(f"  [red]✗[/red] {source.name}: {source.error}")
    if metadata.fallback_used:
        console.print(f"  [yellow]Fallback data used:[/yellow] {metadata.error}")


def render_briefing(result: PipelineResult):
    insights = result.insights

    console.print(Panel(
        insights.executive_summary,
        title=f"Situation Summary [dim]({insights.summary_source})[/dim]",
        border_style="cyan",
    ))

    render_events(result.events, title="\nPriority Events")

    metrics = insights.metrics
    console.print(f"\n[bold]Metrics:[/bold] {metrics.total_events} events, "
                  f"average urgency {metrics.average_urgency}/10")
    console.print(f"  Overall trend: {insights.trends.overall.value}")
    for crisis_type, count in sorted(metrics.type_counts.items(), key=lambda item: -item[1]):
        console.print(f"  [dim]{crisis_type.replace('_', ' ')}: {count}[/dim]")

    if insights.recommendations:
        console.print("\n[bold]Recommendations:[/bold]")
        for index, recommendation in enumerate(insights.recommendations, 1):
            console.print(f"  {index}. {recommendation}")

    console.print("\n[bold]Sources:[/bold]")
    render_sources_summary(result.aggregation.metadata)

    stats = result.stats
    console.print(
        f"\n[dim]Aggregate {stats.aggregate_ms:.0f}ms | Enrich {stats.enrich_ms:.0f}ms | "
        f"Insights {stats.insights_ms:.0f}ms | {stats.degraded} degraded analyses[/dim]"
    )


# ============================================================================
# AGGREGATE Command - Fetch and rank events
# ============================================================================

@app.command()
def aggregate(
    offline: bool = typer.Option(False, "--offline", help="Use bundled demo sources only"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Maximum events returned"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show progress logging"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Fetch, deduplicate and rank events from all sources.

    Examples:
        crisislens aggregate              # Live sources
        crisislens aggregate --offline    # Demo data only
        crisislens aggregate -n 5 --json  # Top five as JSON
    """
    async def _aggregate():
        pipeline = make_pipeline(offline, limit, verbose)
        result = await pipeline.aggregator.aggregate()

        if json_output:
            console.print_json(json.dumps(result.to_dict()))
            return

        render_events(result.data, title="Aggregated Events")
        console.print("\n[bold]Sources:[/bold]")
        render_sources_summary(result.metadata)
        console.print(f"\n[dim]Processing time: {result.metadata.processing_time_ms:.0f}ms[/dim]")

    asyncio.run(_aggregate())


# ============================================================================
# BRIEFING Command - Full pipeline
# ============================================================================

@app.command()
def briefing(
    offline: bool = typer.Option(False, "--offline", help="Use bundled demo sources and local analysis"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Maximum events analyzed"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show progress logging"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Aggregate, enrich and synthesize a situational briefing.

    Examples:
        crisislens briefing --offline
        crisislens briefing --json > briefing.json
    """
    async def _briefing():
        pipeline = make_pipeline(offline, limit, verbose)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            disable=json_output,
        ) as progress:
            task = progress.add_task("Building briefing...", total=None)
            result = await pipeline.run()
            progress.update(task, description="Briefing complete!")

        if json_output:
            console.print_json(json.dumps(result.to_dict()))
        else:
            render_briefing(result)

    asyncio.run(_briefing())


# ============================================================================
# SOURCES Command - Connector health
# ============================================================================

@app.command()
def sources(
    offline: bool = typer.Option(False, "--offline", help="Use bundled demo sources only"),
    check: bool = typer.Option(False, "--check", "-c", help="Run one aggregation before reporting"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show connector configuration and health.

    Health is only meaningful after a run; use --check to fetch once first.
    """
    async def _sources():
        pipeline = make_pipeline(offline)
        if check:
            await pipeline.aggregator.aggregate()

        status = pipeline.aggregator.get_status()
        if json_output:
            console.print_json(json.dumps(status))
            return

        table = Table(title="Connectors", show_header=True)
        table.add_column("Name", style="cyan")
        table.add_column("Type", style="dim")
        table.add_column("Timeout", justify="right")
        table.add_column("Status")
        table.add_column("Last Items", justify="right")
        table.add_column("Errors", justify="right")

        for connector in status["connectors"]:
            health = connector.get("health", "unknown")
            color = {"healthy": "green", "degraded": "yellow", "unhealthy": "red"}.get(health, "white")
            table.add_row(
                connector["name"],
                connector["source_type"],
                f"{connector['timeout_seconds']}s",
                f"[{color}]●[/{color}] {health}",
                str(connector.get("last_run_items", 0)),
                str(connector.get("error_count", 0)),
            )

        console.print(table)
        console.print(f"\n[dim]Result limit: {status['result_limit']} | "
                      f"Seed events: {status['seed_events']}[/dim]")

    asyncio.run(_sources())


# ============================================================================
# WATCH Command - Periodic briefing
# ============================================================================

@app.command()
def watch(
    interval: int = typer.Option(300, "--interval", "-i", help="Seconds between runs"),
    offline: bool = typer.Option(False, "--offline", help="Use bundled demo sources and local analysis"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Maximum events analyzed"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show progress logging"),
):
    """
    Re-run the briefing every INTERVAL seconds until interrupted.

    One pipeline is reused across runs so connector health accumulates.
    """
    async def _watch():
        pipeline = make_pipeline(offline, limit, verbose)
        run = 0
        while True:
            run += 1
            started = time.time()
            console.rule(f"Run {run}")
            result = await pipeline.run()
            render_briefing(result)

            wait = max(0.0, interval - (time.time() - started))
            console.print(f"\n[dim]Next run in {wait:.0f}s (Ctrl+C to stop)[/dim]")
            await asyncio.sleep(wait)

    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped[/yellow]")
    finally:
        shutdown_logging()


# ============================================================================
# SERVE Command - HTTP API
# ============================================================================

@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port"),
    offline: bool = typer.Option(False, "--offline", help="Use bundled demo sources and local analysis"),
):
    """Start the HTTP API."""
    import uvicorn

    from crisislens.api.app import create_app

    init_logging(verbose=True)
    application = create_app(settings=load_settings(offline=offline))
    uvicorn.run(application, host=host, port=port)


# ============================================================================
# VERSION Command
# ============================================================================

@app.command()
def version():
    """Show version information."""
    console.print(Panel(
        "[bold cyan]CRISISLENS[/bold cyan]\n"
        "Crisis Aggregation and Situational Insights\n\n"
        f"[dim]Version: {__version__}[/dim]",
        title="CrisisLens",
        border_style="cyan",
    ))


# ============================================================================
# Main entry point
# ============================================================================

if __name__ == "__main__":
    app()
