from datetime import datetime
from zoneinfo import ZoneInfo

import pandas as pd
from rich.console import Console

from expense_tracker import config

console = Console()

HEADER_ROW = ["Timestamp", "Category", "Amount"]
CATEGORY_HEADER = HEADER_ROW[1]
TIMESTAMP_FORMAT = "%d/%m/%Y %H:%M:%S"


def current_month_name(now: datetime | None = None) -> str:
    """Name of the month's sheet, taken from the server's local calendar."""
    now = now or datetime.now()
    if now.tzinfo is not None:
        now = now.astimezone()
    return now.strftime("%B")


def format_timestamp(now: datetime | None = None, timezone: str | None = None) -> str:
    """
    Formats the expense timestamp in the fixed regional timezone.

    Naive datetimes are treated as server local time before conversion.
    """
    now = now or datetime.now()
    if now.tzinfo is None:
        now = now.astimezone()
    return now.astimezone(ZoneInfo(timezone or config.TIMEZONE)).strftime(TIMESTAMP_FORMAT)


def build_expense_row(category: str, amount: float, now: datetime | None = None) -> list:
    return [format_timestamp(now), category, amount]


def unique_categories(values) -> list:
    """
    Deduplicates the raw category column, keeping sheet order.

    Drops the header label and blank cells.
    """
    cleaned = [str(v).strip() for v in values if v is not None]
    return list(dict.fromkeys(v for v in cleaned if v and v != CATEGORY_HEADER))


def clean_amounts(series: pd.Series) -> pd.Series:
    # Strip currency symbols and thousands separators, e.g. "₹1,250.50"
    if not pd.api.types.is_numeric_dtype(series):
        series = series.astype(str).str.replace(r'[^\d.-]', '', regex=True)
    return pd.to_numeric(series, errors='coerce')


def summarize_month(rows: list) -> pd.DataFrame:
    """
    Aggregates a month's expense rows by category.

    Args:
        rows: Data rows of a monthly sheet (header excluded), each
            [timestamp, category, amount].

    Returns:
        pd.DataFrame: Category and Amount columns, sorted ascending by category.
    """
    if not rows:
        return pd.DataFrame(columns=["Category", "Amount"])

    padded = [(list(r) + ["", "", ""])[:3] for r in rows]
    df = pd.DataFrame(padded, columns=HEADER_ROW)
    df["Category"] = df["Category"].astype(str).str.strip()
    df["Amount"] = clean_amounts(df["Amount"])

    dropped = df["Amount"].isna() | (df["Category"] == "")
    if dropped.any():
        console.print(f"[yellow]Skipping {int(dropped.sum())} rows without a category or a numeric amount[/yellow]")
    df = df[~dropped]

    if df.empty:
        return pd.DataFrame(columns=["Category", "Amount"])

    summary = df.groupby("Category", as_index=False)["Amount"].sum()
    return summary.sort_values("Category").reset_index(drop=True)
