"""
cloudmon CLI - Command line interface for the multi-provider account monitor.
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from cloudmon.config import AppSettings, setup_logging
from cloudmon.see import AccountAggregator, BatchResult

app = typer.Typer(
    name="cloudmon",
    help="Multi-provider cloud account monitor - accounts, projects and usage in one view",
    add_completion=False,
)
console = Console()


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Logging level"),
):
    load_dotenv()
    settings = AppSettings()
    setup_logging(log_level or settings.log_level)


def load_accounts(file: Optional[Path], settings: AppSettings) -> list[dict]:
    """Accounts from a JSON file (a list of {name, token, provider}) or the environment."""
    if file is None:
        accounts = settings.env_accounts()
    else:
        try:
            accounts = json.loads(file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise typer.BadParameter(f"Cannot read accounts file: {exc}") from exc
        if not isinstance(accounts, list):
            raise typer.BadParameter("Accounts file must contain a JSON list")

    if not accounts:
        console.print("[yellow]No accounts configured.[/] Use --file or set CLOUDMON_ACCOUNTS.")
        raise typer.Exit(code=1)
    return accounts


def run_batch(accounts: list[dict], settings: AppSettings) -> list[BatchResult]:
    aggregator = AccountAggregator(settings=settings)
    with console.status("Fetching accounts..."):
        return asyncio.run(aggregator.run_batch(accounts))


@app.command()
def accounts(
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="JSON file with accounts"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Show account owners, credit and usage."""
    settings = AppSettings()
    results = run_batch(load_accounts(file, settings), settings)

    if json_output:
        console.print(json.dumps([r.account_view() for r in results], indent=2))
        return

    table = Table(title="Accounts")
    table.add_column("Account", style="cyan")
    table.add_column("Provider", style="magenta")
    table.add_column("Status")
    table.add_column("User")
    table.add_column("Projects", justify="right")
    table.add_column("Usage", justify="right")
    table.add_column("Credit", justify="right")

    for result in results:
        if not result.success:
            table.add_row(result.name, result.provider, "[red]failed[/]", result.error or "", "-", "-", "-")
            continue

        snapshot = result.snapshot
        usage = snapshot.usage
        table.add_row(
            result.name,
            result.provider,
            "[green]ok[/]",
            snapshot.user.username or snapshot.user.email or "-",
            str(len(snapshot.projects)),
            f"${usage.total_usage:,.2f}" if usage else "-",
            f"${result.credit / 100:,.2f}" if usage else "-",
        )

    console.print(table)

    failed = sum(1 for r in results if not r.success)
    console.print(Panel(
        f"[bold]Accounts:[/] {len(results)}  |  [bold]Failed:[/] [red]{failed}[/]",
        title="Summary",
    ))


@app.command()
def projects(
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="JSON file with accounts"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """List projects across every account."""
    settings = AppSettings()
    results = run_batch(load_accounts(file, settings), settings)

    if json_output:
        console.print(json.dumps([r.project_view() for r in results], indent=2))
        return

    table = Table(title="Projects")
    table.add_column("Account", style="cyan")
    table.add_column("Provider", style="magenta")
    table.add_column("Project")
    table.add_column("Region")
    table.add_column("Domains")
    table.add_column("Cost", justify="right")

    for result in results:
        if not result.success:
            console.print(f"[red]{result.name} ({result.provider}):[/] {result.error}")
            continue
        for project in result.snapshot.projects:
            table.add_row(
                result.name,
                result.provider,
                project.name or project.id,
                project.region,
                ", ".join(d.domain for d in project.domains[:3]),
                f"${project.cost:,.2f}" if project.has_cost_data else "-",
            )

    console.print(table)


@app.command()
def validate(
    name: str = typer.Argument(..., help="Account name"),
    token: str = typer.Argument(..., help="API token"),
    provider: str = typer.Option("zeabur", "--provider", "-p", help="Provider identifier"),
):
    """Check that a token works and show its owner."""
    settings = AppSettings()
    [result] = run_batch([{"name": name, "token": token, "provider": provider}], settings)

    if not result.success:
        console.print(f"[red]Validation failed:[/] {result.error}")
        raise typer.Exit(code=1)

    user = result.snapshot.user
    console.print(Panel(
        f"[bold]Provider:[/] {result.provider}\n"
        f"[bold]User:[/] {user.username or '-'}\n"
        f"[bold]Email:[/] {user.email or '-'}\n"
        f"[bold]Projects:[/] {len(result.snapshot.projects)}",
        title=f"[green]{name}[/]",
    ))


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),
    port: int = typer.Option(3000, "--port", help="Bind port"),
):
    """Run the REST API."""
    import uvicorn

    from cloudmon.api.main import create_app

    uvicorn.run(create_app(AppSettings()), host=host, port=port)


@app.command()
def version():
    """Show version information."""
    from cloudmon import __version__
    console.print(f"cloudmon v{__version__}")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
