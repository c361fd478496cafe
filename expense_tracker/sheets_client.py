from datetime import datetime
from pathlib import Path

import gspread
from google.oauth2.service_account import Credentials
from rich.console import Console

from expense_tracker import config, sheet_layout
from expense_tracker.processor import HEADER_ROW, build_expense_row, current_month_name, unique_categories

console = Console()

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


def get_credentials() -> Credentials:
    """
    Service account credentials for the Sheets API.

    Supports two methods:
    1. GOOGLE_SERVICE_ACCOUNT_EMAIL + GOOGLE_PRIVATE_KEY env vars
    2. A service account JSON key file (GOOGLE_CREDENTIALS_PATH)
    """
    if config.SERVICE_ACCOUNT_EMAIL and config.PRIVATE_KEY:
        info = {
            "type": "service_account",
            "client_email": config.SERVICE_ACCOUNT_EMAIL,
            "private_key": config.PRIVATE_KEY,
            "token_uri": TOKEN_URI,
        }
        return Credentials.from_service_account_info(info, scopes=SCOPES)

    if config.CREDENTIALS_PATH and Path(config.CREDENTIALS_PATH).exists():
        return Credentials.from_service_account_file(config.CREDENTIALS_PATH, scopes=SCOPES)

    raise FileNotFoundError(
        "Google service account credentials not found. Set GOOGLE_SERVICE_ACCOUNT_EMAIL and "
        f"GOOGLE_PRIVATE_KEY or provide {config.CREDENTIALS_PATH}."
    )


def get_client():
    """Authenticates with Google Sheets (or returns the in-memory client in mock mode)."""
    if config.USE_MOCK:
        from expense_tracker.mock_sheets_client import get_client as get_mock_client
        return get_mock_client()
    return gspread.authorize(get_credentials())


def find_worksheet(spreadsheet, title: str):
    """Returns the tab with the given title, or None when it does not exist."""
    try:
        return spreadsheet.worksheet(title)
    except gspread.exceptions.WorksheetNotFound:
        return None


def create_month_sheet(spreadsheet, title: str):
    """Adds a monthly tab with the header row and its initial formatting."""
    worksheet = spreadsheet.add_worksheet(
        title=title,
        rows=sheet_layout.NEW_SHEET_ROWS,
        cols=sheet_layout.NEW_SHEET_COLS,
    )
    worksheet.update(values=[HEADER_ROW], range_name="A1:C1", value_input_option="USER_ENTERED")
    spreadsheet.batch_update({
        "requests": sheet_layout.new_sheet_requests(worksheet.id, config.CURRENCY_PATTERN)
    })
    console.print(f"[green]Created sheet '{title}' (id {worksheet.id})[/green]")
    return worksheet


def find_expense_chart(spreadsheet, sheet_id: int) -> dict | None:
    """Looks up the category chart on the given tab by title and anchor cell."""
    metadata = spreadsheet.fetch_sheet_metadata()
    for sheet in metadata.get("sheets", []):
        if sheet.get("properties", {}).get("sheetId") != sheet_id:
            continue
        for chart in sheet.get("charts", []):
            if sheet_layout.is_expense_chart(chart):
                return chart
    return None


def get_categories(spreadsheet_id: str, client=None, now: datetime | None = None) -> list:
    """
    Categories used so far in the current month's sheet.

    Returns an empty list when the month has no sheet yet. Other
    errors are left to the caller.
    """
    client = client or get_client()
    spreadsheet = client.open_by_key(spreadsheet_id)
    worksheet = find_worksheet(spreadsheet, current_month_name(now))
    if worksheet is None:
        return []
    return unique_categories(worksheet.col_values(2))


def fetch_month_rows(spreadsheet_id: str, month: str | None = None, client=None) -> list:
    """Data rows (header excluded) of a monthly sheet, [] if the sheet is missing."""
    client = client or get_client()
    spreadsheet = client.open_by_key(spreadsheet_id)
    worksheet = find_worksheet(spreadsheet, month or current_month_name())
    if worksheet is None:
        return []

    values = worksheet.get_values("A:C")
    if values and values[0][:3] == HEADER_ROW:
        values = values[1:]
    return [row for row in values if any(str(cell).strip() for cell in row)]


def add_expense(spreadsheet_id: str, category: str, amount: float, client=None,
                now: datetime | None = None) -> bool:
    """
    Records an expense in the current month's sheet.

    Creates the sheet on the first expense of the month, appends the row,
    then refreshes column widths, formatting, both pivot tables and the
    chart. Returns False on any failure; nothing is retried or rolled back.
    """
    month = current_month_name(now)
    try:
        client = client or get_client()
        spreadsheet = client.open_by_key(spreadsheet_id)

        worksheet = find_worksheet(spreadsheet, month)
        if worksheet is None:
            worksheet = create_month_sheet(spreadsheet, month)

        worksheet.append_row(
            build_expense_row(category, amount, now),
            value_input_option="USER_ENTERED",
            table_range="A:C",
        )

        row_count = len(worksheet.get_values("A:C"))
        chart = find_expense_chart(spreadsheet, worksheet.id)
        requests = sheet_layout.refresh_requests(
            worksheet.id,
            row_count,
            config.CURRENCY_PATTERN,
            existing_chart_id=chart["chartId"] if chart else None,
        )
        spreadsheet.batch_update({"requests": requests})

        console.print(f"[green]Added {category}: {amount:.2f} to '{month}' (row {row_count})[/green]")
        return True
    except Exception as e:
        console.print(f"[bold red]Error adding expense: {e}[/bold red]")
        return False
