import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from finance_dashboard.analytics.listing import group_net_total
from finance_dashboard.config.settings import Settings, load_settings
from finance_dashboard.database.connection import DatabaseConfig, DatabaseManager
from finance_dashboard.domain.models import Transaction
from finance_dashboard.logging_setup import configure_logging
from finance_dashboard.parsers.factory import ParserFactory
from finance_dashboard.repositories.sqlite_repository import SQLiteStore
from finance_dashboard.services.dashboard_service import DashboardService

app = typer.Typer(
    name="finance-dashboard",
    help="Categorize bank statements and analyze your cash flow",
    add_completion=False,
)
rules_app = typer.Typer(help="Manage categorization rules")
categories_app = typer.Typer(help="Manage the category list")
app.add_typer(rules_app, name="rules")
app.add_typer(categories_app, name="categories")

console = Console()


class State:
    verbose: bool = False
    settings: Optional[Settings] = None
    service: Optional[DashboardService] = None


state = State()


def _fail(e: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
    if state.verbose:
        console.print_exception()
    raise typer.Exit(code=1)


def _money(amount) -> str:
    return f"{amount:,.2f}"


def _signed(txn: Transaction) -> str:
    if txn.is_income:
        return f"[green]+{_money(txn.amount)}[/green]"
    return f"[red]-{_money(txn.amount)}[/red]"


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose output",
    ),
    db_path: Optional[Path] = typer.Option(
        None,
        "--db",
        help="Path to the SQLite database (defaults to settings.json)",
    ),
):
    """
    Finance Dashboard - Import, categorize, and analyze your transactions.
    """
    state.verbose = verbose
    configure_logging(logging.DEBUG if verbose else None)

    if state.service is None:
        state.settings = load_settings()
        ParserFactory.load_parsers_from_config()
        db_manager = DatabaseManager(DatabaseConfig(db_path or state.settings.db_path))
        store = SQLiteStore(db_manager, default_categories=state.settings.default_categories)
        state.service = DashboardService(store, settings=state.settings)


@app.command(name="import")
def import_transactions(
    filepath: Path = typer.Argument(
        ...,
        help="Path to a CSV export or saved analyzer JSON",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    fmt: Optional[str] = typer.Option(
        None,
        "--format", "-f",
        help="Parser format (csv, json); defaults to the file extension",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Preview without saving to database",
    ),
):
    """
    Import transactions from a statement file. Rules are applied to the new batch.

    Examples:
        finance-dashboard import statement.csv
        finance-dashboard import analysis.json --dry-run
    """
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"Importing {filepath.name}...", total=None)
            result = state.service.import_statement(filepath, fmt=fmt, dry_run=dry_run)
    except Exception as e:
        _fail(e)

    if not result.success:
        console.print(f"[bold red]Error:[/bold red] {escape(result.error)}")
        raise typer.Exit(code=1)

    console.print(f"\n[bold]Found {result.total_parsed} transactions[/bold]")

    if result.imported:
        preview_table = Table(title="Preview (first 5)")
        preview_table.add_column("Date", style="cyan")
        preview_table.add_column("Merchant", style="white")
        preview_table.add_column("Category", style="magenta")
        preview_table.add_column("Amount", justify="right")

        for txn in result.imported[:5]:
            preview_table.add_row(txn.date, escape(txn.merchant[:40]), txn.category, _signed(txn))

        console.print(preview_table)

    for message in result.rejected:
        console.print(f"[yellow]Rejected {escape(message)}[/yellow]")
    if result.partial_success:
        console.print(f"[yellow]{len(result.rejected)} rows could not be imported[/yellow]")

    if result.detected_currency:
        console.print(f"[dim]Detected currency: {result.detected_currency} (amounts are not converted)[/dim]")

    if dry_run:
        console.print("[yellow]DRY RUN - No changes made[/yellow]")
        console.print(f"[green]✓[/green] Would import: {result.new_transactions}")
    else:
        console.print(f"[bold green]✓ Imported {result.new_transactions} new transactions[/bold green]")


@app.command(name="dashboard")
def dashboard(
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print every view as JSON instead of tables",
    ),
):
    """
    Show totals, top categories, balance trend and top expenses.
    """
    try:
        views = state.service.get_dashboard()
    except Exception as e:
        _fail(e)

    if as_json:
        console.print_json(json.dumps(views.to_dict()))
        return

    if views.is_empty:
        console.print(Panel(
            "[yellow]No transactions yet. Import a statement to get started.[/yellow]",
            title="Empty Dashboard",
            border_style="yellow",
        ))
        return

    s = views.summaries
    net_style = "bold green" if s.net_flow >= 0 else "bold red"
    console.print(Panel(
        f"[green]Income:[/green]   {_money(s.total_income):>14}\n"
        f"[red]Expenses:[/red] {_money(s.total_expense):>14}\n"
        f"{'─' * 24}\n"
        f"[{net_style}]Net:[/{net_style}]      {_money(s.net_flow):>14}",
        title="[bold]Net Cash Flow[/bold]",
        border_style="cyan",
        padding=(1, 2),
    ))

    if views.category_ranking:
        ranking_table = Table(title="Spending by Category", box=None, padding=(0, 2))
        ranking_table.add_column("Category", style="cyan", no_wrap=True)
        ranking_table.add_column("Amount", justify="right", style="red")
        ranking_table.add_column("% of Total", justify="right", style="dim")
        for share in views.category_ranking:
            ranking_table.add_row(share.name, _money(share.value), f"{share.percent:.1f}%")
        console.print(ranking_table)

    trend_style = "green" if views.trend_is_positive else "red"
    trend_table = Table(title="Balance Trend", box=None, padding=(0, 2))
    trend_table.add_column("Date", style="cyan")
    trend_table.add_column("Balance", justify="right", style=trend_style)
    for point in views.balance_trend:
        trend_table.add_row(point.date, _money(point.balance))
    console.print(trend_table)

    if views.top_expenses:
        top_table = Table(title="Top Expenses", padding=(0, 1))
        top_table.add_column("Date", style="cyan", width=12)
        top_table.add_column("Merchant", style="white", max_width=40)
        top_table.add_column("Category", style="dim")
        top_table.add_column("Amount", justify="right", style="red")
        for txn in views.top_expenses:
            top_table.add_row(txn.date, escape(txn.merchant), txn.category, _money(txn.amount))
        console.print(top_table)


@app.command(name="transactions")
def list_transactions(
    search: str = typer.Option(
        "",
        "--search", "-s",
        help="Filter by merchant, category or sub-category",
    ),
):
    """
    List transactions grouped by category, newest first.
    """
    try:
        groups = state.service.get_grouped_transactions(search)
    except Exception as e:
        _fail(e)

    if not groups:
        console.print("[yellow]No transactions found[/yellow]")
        return

    for category, transactions in groups.items():
        table = Table(
            title=f"{category} ({_money(group_net_total(transactions))})",
            title_justify="left",
            padding=(0, 1),
        )
        table.add_column("Date", style="cyan", width=12)
        table.add_column("Merchant", style="white", max_width=40)
        table.add_column("Sub-category", style="dim")
        table.add_column("Amount", justify="right")
        for txn in transactions:
            table.add_row(txn.date, escape(txn.merchant), txn.sub_category or "", _signed(txn))
        console.print(table)


@rules_app.command(name="list")
def list_rules():
    """Show rules in priority order."""
    rules = state.service.get_rules()
    if not rules:
        console.print("[dim]No rules yet.[/dim]")
        return

    table = Table(padding=(0, 1))
    table.add_column("#", justify="right", style="dim")
    table.add_column("Keyword", style="bold")
    table.add_column("Category", style="yellow")
    table.add_column("Sub-category", style="dim")
    table.add_column("ID", style="dim")
    for priority, rule in enumerate(rules, start=1):
        table.add_row(str(priority), f'"{rule.keyword}"', rule.category, rule.sub_category or "", rule.id)
    console.print(table)


@rules_app.command(name="add")
def add_rule(
    keyword: str = typer.Argument(..., help="Case-insensitive text to look for in the merchant"),
    category: Optional[str] = typer.Argument(None, help="Category to assign"),
    sub_category: Optional[str] = typer.Option(None, "--sub", help="Optional sub-category"),
):
    """Add a rule at the lowest priority."""
    try:
        target = category or state.service.get_categories().default_choice
        rule = state.service.add_rule(keyword, target, sub_category)
    except Exception as e:
        _fail(e)
    console.print(f'[green]✓[/green] "{rule.keyword}" → {rule.category}')


@rules_app.command(name="delete")
def delete_rule(rule_id: str = typer.Argument(..., help="Rule ID")):
    """Delete a rule by ID."""
    if not state.service.delete_rule(rule_id):
        console.print(f"[yellow]No rule with ID {rule_id}[/yellow]")
        raise typer.Exit(code=1)
    console.print("[green]✓[/green] Rule deleted")


@rules_app.command(name="apply")
def apply_rules():
    """Re-apply the rules to every stored transaction."""
    try:
        changed = state.service.apply_rules_retroactively()
    except Exception as e:
        _fail(e)
    console.print(f"[bold green]✓ Re-categorized {changed} transactions[/bold green]")


@categories_app.command(name="list")
def list_categories():
    """Show the category list."""
    for name in state.service.get_categories():
        console.print(f"  • {name}")


@categories_app.command(name="add")
def add_category(name: str = typer.Argument(...)):
    """Add a category at the end of the list."""
    if not state.service.add_category(name):
        console.print(f"[yellow]'{name}' is blank or already exists[/yellow]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] Added {name.strip()}")


@categories_app.command(name="rename")
def rename_category(old: str = typer.Argument(...), new: str = typer.Argument(...)):
    """Rename a category. Existing transactions keep their current label."""
    if not state.service.rename_category(old, new):
        console.print(f"[yellow]Could not rename '{old}' to '{new}'[/yellow]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] {old} → {new.strip()}")


@categories_app.command(name="remove")
def remove_category(name: str = typer.Argument(...)):
    """Remove a category. Transactions using it are left as they are."""
    if not state.service.remove_category(name):
        console.print(f"[yellow]No category named '{name}'[/yellow]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] Removed {name}")


@app.command(name="clear")
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """Delete all transactions and rules, and restore the default categories."""
    if not yes and not typer.confirm("Clear all data?"):
        raise typer.Exit()
    state.service.clear_data()
    console.print("[green]✓[/green] All data cleared")


def cli_main():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    cli_main()
