"""jetwatch CLI entry point."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from jetwatch.config.models import WatchConfig
from jetwatch.registry.models import ServiceState, ServiceStatus

app = typer.Typer(
    name="jetwatch",
    help="jetwatch — service health checks and tab audits",
    no_args_is_help=True,
)
console = Console()

STATE_STYLES = {
    ServiceState.CONNECTED: "green",
    ServiceState.LIMITED: "yellow",
    ServiceState.DISCONNECTED: "red",
    ServiceState.UNKNOWN: "dim",
}

ConfigOption = typer.Option(None, "--config", "-c", help="Path to .jetwatch.yaml")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log probe and audit progress"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


def _load(path: Path | None) -> WatchConfig:
    from jetwatch.config.loader import ConfigError, resolve_config

    try:
        return resolve_config(path)
    except (FileNotFoundError, ConfigError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)


def _status_table(title: str, statuses: list[ServiceStatus]) -> Table:
    table = Table(title=title)
    table.add_column("Service", style="bold")
    table.add_column("Status")
    table.add_column("Message")

    # Worst first; Unknown carries no severity and goes last.
    ordered = sorted(statuses, key=lambda s: -1 if s.state.rank is None else s.state.rank, reverse=True)
    for s in ordered:
        style = STATE_STYLES[s.state]
        table.add_row(s.name, f"[{style}]{s.state.value}[/{style}]", s.message or "—")
    return table


@app.command()
def status(config: Path | None = ConfigOption) -> None:
    """Show every registered dependency and its status."""
    from jetwatch.verification import build_aggregator

    cfg = _load(config)
    aggregator = build_aggregator(cfg)
    statuses = asyncio.run(aggregator.check_all(cfg.services.keys()))
    console.print(_status_table("Dependency Status", list(statuses.values())))

    counts = {state: 0 for state in ServiceState}
    for s in statuses.values():
        counts[s.state] += 1
    console.print(
        ", ".join(f"[{STATE_STYLES[state]}]{n} {state.value.lower()}[/{STATE_STYLES[state]}]" for state, n in counts.items())
    )


@app.command()
def check(
    names: list[str] = typer.Argument(help="Dependency names, e.g. \"Gemini AI\""),
    config: Path | None = ConfigOption,
) -> None:
    """Check the named dependencies."""
    from jetwatch.verification import build_aggregator

    cfg = _load(config)
    statuses = asyncio.run(build_aggregator(cfg).check_all(names))
    console.print(_status_table("Dependency Check", list(statuses.values())))
    if any(s.state is ServiceState.DISCONNECTED for s in statuses.values()):
        raise typer.Exit(1)


@app.command()
def audit(
    tab: str = typer.Argument(help="Name of the tab to audit"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON report"),
    config: Path | None = ConfigOption,
) -> None:
    """Audit one tab; exits 1 when the tab is Broken."""
    from jetwatch.audit.models import AuditSeverity
    from jetwatch.audit.report import SEVERITY_STYLES, format_audit_results
    from jetwatch.verification import build_auditor

    cfg = _load(config)
    result = asyncio.run(build_auditor(cfg).audit(tab))

    if as_json:
        console.print_json(format_audit_results(result))
    else:
        style = SEVERITY_STYLES[result.status]
        console.print(f"\n[bold]Tab:[/bold] {result.tab}  [{style}]{result.status.value}[/{style}]")
        if result.services_used:
            console.print(f"  [green]✓[/green] Connected: {', '.join(result.services_used)}")
        if result.services_missing:
            console.print(f"  [red]✗[/red] Missing: {', '.join(result.services_missing)}")
        for issue in result.issues:
            console.print(f"  [yellow]![/yellow] {issue}")
        if not result.issues:
            console.print("  No issues found.")

    if result.status is AuditSeverity.BROKEN:
        raise typer.Exit(1)


@app.command("audit-all")
def audit_all(config: Path | None = ConfigOption) -> None:
    """Audit every registered tab; exits 1 if any tab is Broken."""
    from jetwatch.audit.models import AuditSeverity
    from jetwatch.audit.report import format_audit_table
    from jetwatch.verification import build_auditor

    cfg = _load(config)
    results = asyncio.run(build_auditor(cfg).audit_all())
    console.print(format_audit_table(results))
    if any(r.status is AuditSeverity.BROKEN for r in results):
        raise typer.Exit(1)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind host"),
    port: int = typer.Option(8000, help="Bind port"),
    config: Path | None = ConfigOption,
) -> None:
    """Start the jetwatch HTTP API."""
    import uvicorn

    from jetwatch.api.app import create_app

    cfg = _load(config)
    console.print(f"[bold]jetwatch[/bold] starting on http://{host}:{port}")
    uvicorn.run(create_app(cfg), host=host, port=port, reload=False)


config_app = typer.Typer(name="config", help="Configuration commands")
app.add_typer(config_app)


@config_app.command("validate")
def config_validate(
    path: Path | None = typer.Option(None, "--path", "-p", help="Path to .jetwatch.yaml"),
) -> None:
    """Validate configuration file."""
    from urllib.parse import urlparse

    from jetwatch.config.loader import ConfigError, resolve_config

    errors: list[str] = []
    warnings: list[str] = []
    try:
        cfg = resolve_config(path)
        console.print("[green]✓[/green] Registries parse and validate")
    except (FileNotFoundError, ConfigError) as exc:
        console.print(f"[red]✗ {exc}[/red]")
        raise typer.Exit(1)

    parsed = urlparse(cfg.probe.base_url)
    if not parsed.scheme or not parsed.netloc:
        errors.append(f"Probe base_url is invalid: '{cfg.probe.base_url}'")
    if cfg.probe.timeout <= 0:
        errors.append(f"Probe timeout must be positive, got {cfg.probe.timeout}")

    for key, entry in cfg.services.items():
        if not entry.endpoint.startswith("/"):
            errors.append(f"Service '{key}': endpoint must start with '/', got '{entry.endpoint}'")

    for key in cfg.fallbacks:
        if key not in cfg.services:
            warnings.append(f"Fallback rule for '{key}' is never used: no such service")

    # Unregistered dependencies are legal; they always report Unknown.
    for tab, entry in cfg.tabs.items():
        for dep in entry.dependencies:
            if dep not in cfg.services:
                warnings.append(f"Tab '{tab}' depends on '{dep}', which has no status endpoint")

    for tab in cfg.chat.audited_tabs:
        if tab not in cfg.tabs:
            warnings.append(f"Chat-audited tab '{tab}' is not registered and will audit as Broken")

    if not errors:
        console.print(f"[green]✓[/green] {len(cfg.services)} service(s), {len(cfg.tabs)} tab(s)")
        for w in warnings:
            console.print(f"[yellow]! {w}[/yellow]")
        console.print("\n[green bold]Configuration is valid.[/green bold]")
    else:
        for err in errors:
            console.print(f"[red]✗ {err}[/red]")
        console.print(f"\n[red bold]{len(errors)} validation error(s) found.[/red bold]")
        raise typer.Exit(1)


@config_app.command("show")
def config_show(
    path: Path | None = typer.Option(None, "--path", "-p", help="Path to .jetwatch.yaml"),
) -> None:
    """Print resolved configuration."""
    cfg = _load(path)

    console.print(f"[bold]{cfg.app.name}[/bold] v{cfg.app.version}\n")

    console.print("[bold]Probe:[/bold]")
    console.print(f"  Base URL: {cfg.probe.base_url}")
    console.print(f"  Timeout: {cfg.probe.timeout}s")
    console.print(f"  Signals file: {cfg.signals_file or 'none'}\n")

    console.print("[bold]Services:[/bold]")
    for key, entry in cfg.services.items():
        fallback = cfg.fallbacks.get(key)
        suffix = f" (fallback: {fallback.signal})" if fallback else ""
        console.print(f"  {key}: {entry.endpoint}{suffix}")

    console.print("\n[bold]Tabs:[/bold]")
    for key, tab in cfg.tabs.items():
        chat = " +chat" if key in cfg.chat.audited_tabs else ""
        console.print(f"  {key}{chat}: {', '.join(tab.components) or 'no components'}")
        if tab.dependencies:
            console.print(f"    Needs: {', '.join(tab.dependencies)}")


def main() -> None:
    app()
