"""
Batch update request bodies for a monthly expense sheet.

Columns: A=Timestamp, B=Category, C=Amount. The pivot table with a grand
total sits at E1, the chart source pivot (no totals) at V1 and the chart
is anchored at H1.
"""

CHART_TITLE = "Expenses by Category"
CHART_ANCHOR_COLUMN = 7
CHART_WIDTH = 800
CHART_HEIGHT = 600

TOTALS_PIVOT_COLUMN = 4
CHART_PIVOT_COLUMN = 21

TIMESTAMP_PATTERN = "dd/mm/yyyy hh:mm:ss"
HEADER_BACKGROUND = {"red": 0.8, "green": 0.8, "blue": 0.8}

# Timestamp, Category, Amount
COLUMN_WIDTHS = [180, 120, 100]

NEW_SHEET_ROWS = 1000
NEW_SHEET_COLS = 26


def _grid_range(sheet_id: int, start_row: int | None = None, end_row: int | None = None,
                start_col: int | None = None, end_col: int | None = None) -> dict:
    grid = {"sheetId": sheet_id}
    if start_row is not None:
        grid["startRowIndex"] = start_row
    if end_row is not None:
        grid["endRowIndex"] = end_row
    if start_col is not None:
        grid["startColumnIndex"] = start_col
    if end_col is not None:
        grid["endColumnIndex"] = end_col
    return grid


def header_format_request(sheet_id: int) -> dict:
    return {
        "repeatCell": {
            "range": _grid_range(sheet_id, 0, 1, 0, 3),
            "cell": {
                "userEnteredFormat": {
                    "backgroundColor": HEADER_BACKGROUND,
                    "textFormat": {"bold": True},
                    "horizontalAlignment": "CENTER",
                }
            },
            "fields": "userEnteredFormat(backgroundColor,textFormat,horizontalAlignment)",
        }
    }


def amount_format_request(sheet_id: int, currency_pattern: str) -> dict:
    return {
        "repeatCell": {
            "range": _grid_range(sheet_id, start_row=1, start_col=2, end_col=3),
            "cell": {
                "userEnteredFormat": {
                    "numberFormat": {"type": "CURRENCY", "pattern": currency_pattern}
                }
            },
            "fields": "userEnteredFormat.numberFormat",
        }
    }


def timestamp_format_request(sheet_id: int) -> dict:
    return {
        "repeatCell": {
            "range": _grid_range(sheet_id, start_row=1, start_col=0, end_col=1),
            "cell": {
                "userEnteredFormat": {
                    "numberFormat": {"type": "DATE_TIME", "pattern": TIMESTAMP_PATTERN}
                }
            },
            "fields": "userEnteredFormat.numberFormat",
        }
    }


def auto_resize_request(sheet_id: int, end_index: int) -> dict:
    return {
        "autoResizeDimensions": {
            "dimensions": {
                "sheetId": sheet_id,
                "dimension": "COLUMNS",
                "startIndex": 0,
                "endIndex": end_index,
            }
        }
    }


def column_width_requests(sheet_id: int) -> list:
    requests = []
    for index, width in enumerate(COLUMN_WIDTHS):
        requests.append({
            "updateDimensionProperties": {
                "range": {
                    "sheetId": sheet_id,
                    "dimension": "COLUMNS",
                    "startIndex": index,
                    "endIndex": index + 1,
                },
                "properties": {"pixelSize": width},
                "fields": "pixelSize",
            }
        })
    return requests


def new_sheet_requests(sheet_id: int, currency_pattern: str) -> list:
    """Formatting applied once, right after a monthly sheet is created."""
    return [
        header_format_request(sheet_id),
        amount_format_request(sheet_id, currency_pattern),
        timestamp_format_request(sheet_id),
        auto_resize_request(sheet_id, 3),
    ]


def pivot_table_request(sheet_id: int, row_count: int, column_index: int, show_totals: bool) -> dict:
    """Category -> SUM(Amount) pivot over A1:C{row_count}, anchored on row 1."""
    return {
        "updateCells": {
            "rows": [{
                "values": [{
                    "pivotTable": {
                        "source": _grid_range(sheet_id, 0, row_count, 0, 3),
                        "rows": [{
                            "sourceColumnOffset": 1,
                            "showTotals": show_totals,
                            "sortOrder": "ASCENDING",
                        }],
                        "values": [{
                            "summarizeFunction": "SUM",
                            "sourceColumnOffset": 2,
                            "name": "Total Amount",
                        }],
                        "valueLayout": "HORIZONTAL",
                    }
                }]
            }],
            "start": {"sheetId": sheet_id, "rowIndex": 0, "columnIndex": column_index},
            "fields": "pivotTable",
        }
    }


def chart_spec(sheet_id: int, row_count: int) -> dict:
    """Column chart fed by the no-totals pivot (labels in V, sums in W)."""
    def source(column):
        return {"sourceRange": {"sources": [_grid_range(sheet_id, 1, row_count, column, column + 1)]}}

    return {
        "title": CHART_TITLE,
        "basicChart": {
            "chartType": "COLUMN",
            "legendPosition": "BOTTOM_LEGEND",
            "domains": [{"domain": source(CHART_PIVOT_COLUMN)}],
            "series": [{
                "series": source(CHART_PIVOT_COLUMN + 1),
                "targetAxis": "LEFT_AXIS",
            }],
            "headerCount": 0,
        },
    }


def add_chart_request(sheet_id: int, row_count: int) -> dict:
    return {
        "addChart": {
            "chart": {
                "spec": chart_spec(sheet_id, row_count),
                "position": {
                    "overlayPosition": {
                        "anchorCell": {
                            "sheetId": sheet_id,
                            "rowIndex": 0,
                            "columnIndex": CHART_ANCHOR_COLUMN,
                        },
                        "offsetXPixels": 0,
                        "offsetYPixels": 0,
                        "widthPixels": CHART_WIDTH,
                        "heightPixels": CHART_HEIGHT,
                    }
                },
            }
        }
    }


def update_chart_request(chart_id: int, sheet_id: int, row_count: int) -> dict:
    return {"updateChartSpec": {"chartId": chart_id, "spec": chart_spec(sheet_id, row_count)}}


def is_expense_chart(chart: dict) -> bool:
    anchor = chart.get("position", {}).get("overlayPosition", {}).get("anchorCell", {})
    return (
        chart.get("spec", {}).get("title") == CHART_TITLE
        and anchor.get("columnIndex") == CHART_ANCHOR_COLUMN
    )


def refresh_requests(sheet_id: int, row_count: int, currency_pattern: str,
                     existing_chart_id: int | None = None) -> list:
    """
    Everything re-applied after each new expense row.

    Column widths, formatting, both pivot tables and the chart (updated in
    place when it already exists).
    """
    requests = [auto_resize_request(sheet_id, 4)]
    requests.extend(column_width_requests(sheet_id))
    requests.append(header_format_request(sheet_id))
    requests.append(amount_format_request(sheet_id, currency_pattern))
    requests.append(timestamp_format_request(sheet_id))
    requests.append(pivot_table_request(sheet_id, row_count, TOTALS_PIVOT_COLUMN, show_totals=True))
    requests.append(pivot_table_request(sheet_id, row_count, CHART_PIVOT_COLUMN, show_totals=False))

    if existing_chart_id is not None:
        requests.append(update_chart_request(existing_chart_id, sheet_id, row_count))
    else:
        requests.append(add_chart_request(sheet_id, row_count))
    return requests
