import math

import typer
from rich.console import Console
from rich.table import Table
import pandas as pd
from typing import Optional

from expense_tracker import config
from expense_tracker.processor import current_month_name, summarize_month

app = typer.Typer(help="Record and inspect expenses in the Google Sheets expense tracker.")
console = Console()


def resolve_spreadsheet_id(spreadsheet_id: Optional[str]) -> str:
    spreadsheet_id = spreadsheet_id or config.SPREADSHEET_ID
    if not spreadsheet_id:
        console.print("[bold red]Error: Spreadsheet ID not configured. Set GOOGLE_SHEETS_ID or pass --spreadsheet-id.[/bold red]")
        raise typer.Exit(code=1)
    return spreadsheet_id


@app.command()
def add(
    amount: float = typer.Argument(..., help="Expense amount, e.g. 250.5"),
    category: str = typer.Argument(..., help="Expense category, e.g. Groceries"),
    spreadsheet_id: Optional[str] = typer.Option(None, "--spreadsheet-id", "-s", help="Overrides GOOGLE_SHEETS_ID"),
):
    """
    Add an expense to the current month's sheet.
    """
    from expense_tracker.sheets_client import add_expense

    category = category.strip()
    if not math.isfinite(amount) or amount <= 0 or not category:
        console.print("[bold red]Error: amount must be a positive number and category must not be empty.[/bold red]")
        raise typer.Exit(code=1)

    spreadsheet_id = resolve_spreadsheet_id(spreadsheet_id)
    console.print(f"[bold blue]Adding {category}: {amount:.2f} to '{current_month_name()}'...[/bold blue]")

    if not add_expense(spreadsheet_id, category, amount):
        console.print("[bold red]Error adding expense.[/bold red]")
        raise typer.Exit(code=1)

    console.print("[bold green]Expense added successfully![/bold green]")


@app.command()
def categories(
    spreadsheet_id: Optional[str] = typer.Option(None, "--spreadsheet-id", "-s", help="Overrides GOOGLE_SHEETS_ID"),
):
    """
    List the categories used in the current month.
    """
    from expense_tracker.sheets_client import get_categories

    spreadsheet_id = resolve_spreadsheet_id(spreadsheet_id)
    try:
        found = get_categories(spreadsheet_id)
    except Exception as e:
        console.print(f"[bold red]Error fetching categories: {e}[/bold red]")
        raise typer.Exit(code=1)

    if not found:
        console.print(f"[yellow]No categories yet for {current_month_name()}.[/yellow]")
        return
    for name in found:
        console.print(name)


@app.command()
def summary(
    month: Optional[str] = typer.Option(None, "--month", "-m", help="Sheet to summarize, e.g. 'January'. Defaults to the current month."),
    spreadsheet_id: Optional[str] = typer.Option(None, "--spreadsheet-id", "-s", help="Overrides GOOGLE_SHEETS_ID"),
):
    """
    Print per-category totals for a month.
    """
    from expense_tracker.sheets_client import fetch_month_rows

    spreadsheet_id = resolve_spreadsheet_id(spreadsheet_id)
    month = month or current_month_name()
    try:
        rows = fetch_month_rows(spreadsheet_id, month)
    except Exception as e:
        console.print(f"[bold red]Error fetching {month}: {e}[/bold red]")
        raise typer.Exit(code=1)

    print_summary_table(summarize_month(rows), month)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to listen on"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """
    Run the web app.
    """
    import uvicorn
    uvicorn.run("api.server:app", host=host, port=port, reload=reload)


def print_summary_table(df: pd.DataFrame, month: str):
    """Prints a rich table of the per-category totals."""
    if df.empty:
        console.print(f"[yellow]No expenses recorded for {month}.[/yellow]")
        return

    table = Table(title=f"Expenses by Category ({month})")
    table.add_column("Category", style="cyan", no_wrap=True)
    table.add_column("Total Amount", justify="right")

    for _, row in df.iterrows():
        table.add_row(row["Category"], f"{row['Amount']:.2f}")

    table.add_row("Totals", f"{df['Amount'].sum():.2f}", style="bold magenta")
    console.print(table)


if __name__ == "__main__":
    app()
