import gspread
from rich.console import Console

console = Console()

# spreadsheet id -> MockSpreadsheet, shared by every client in the process
_store = {}


class MockWorksheet:
    def __init__(self, sheet_id, title, rows=1000, cols=26):
        self.id = sheet_id
        self.title = title
        self.row_count = rows
        self.col_count = cols
        self.data = []  # List of lists (rows)

    def update(self, values=None, range_name=None, **kwargs):
        start = (range_name or "A1").split(":")[0]
        row, col = gspread.utils.a1_to_rowcol(start)
        for r_offset, row_values in enumerate(values or []):
            target = row - 1 + r_offset
            while len(self.data) <= target:
                self.data.append([])
            current = self.data[target]
            for c_offset, value in enumerate(row_values):
                idx = col - 1 + c_offset
                while len(current) <= idx:
                    current.append("")
                current[idx] = value
        return {"updatedRange": f"{self.title}!{range_name}"}

    def append_row(self, values, **kwargs):
        self.data.append(list(values))
        return {"updates": {"updatedRows": 1}}

    def col_values(self, index):
        # 1-based index
        col_idx = index - 1
        return [row[col_idx] if col_idx < len(row) else "" for row in self.data]

    def get_values(self, range_name=None, **kwargs):
        # Only A:C is ever written, so every range maps to the full data
        return [list(row) for row in self.data]


class MockSpreadsheet:
    def __init__(self, spreadsheet_id):
        self.id = spreadsheet_id
        self.sheets = []
        self.charts = {}  # sheet id -> list of chart dicts
        self.batch_updates = []  # every batch_update body, in order
        self._next_sheet_id = 1
        self._next_chart_id = 1

    def worksheets(self):
        return list(self.sheets)

    def worksheet(self, title):
        for sheet in self.sheets:
            if sheet.title == title:
                return sheet
        raise gspread.exceptions.WorksheetNotFound(title)

    def add_worksheet(self, title, rows, cols, **kwargs):
        if any(sheet.title == title for sheet in self.sheets):
            raise gspread.exceptions.GSpreadException(f'A sheet with the name "{title}" already exists.')
        sheet = MockWorksheet(self._next_sheet_id, title, rows, cols)
        self._next_sheet_id += 1
        self.sheets.append(sheet)
        console.print(f"[bold cyan][Mock][/bold cyan] Added sheet '{title}'.")
        return sheet

    def batch_update(self, body):
        self.batch_updates.append(body)
        replies = []
        for request in body.get("requests", []):
            if "addChart" in request:
                chart = dict(request["addChart"]["chart"], chartId=self._next_chart_id)
                self._next_chart_id += 1
                anchor = chart["position"]["overlayPosition"]["anchorCell"]
                self.charts.setdefault(anchor["sheetId"], []).append(chart)
                replies.append({"addChart": {"chart": chart}})
            elif "updateChartSpec" in request:
                update = request["updateChartSpec"]
                for charts in self.charts.values():
                    for chart in charts:
                        if chart["chartId"] == update["chartId"]:
                            chart["spec"] = update["spec"]
                replies.append({})
            else:
                replies.append({})
        console.print(f"[bold cyan][Mock][/bold cyan] Batch Update executed with {len(replies)} requests.")
        return {"spreadsheetId": self.id, "replies": replies}

    def fetch_sheet_metadata(self, params=None):
        return {
            "spreadsheetId": self.id,
            "sheets": [
                {
                    "properties": {"sheetId": sheet.id, "title": sheet.title, "index": index},
                    "charts": [dict(chart) for chart in self.charts.get(sheet.id, [])],
                }
                for index, sheet in enumerate(self.sheets)
            ],
        }


class MockClient:
    def open_by_key(self, key):
        if key not in _store:
            _store[key] = MockSpreadsheet(key)
        return _store[key]


def get_client(credentials_path=None):
    return MockClient()


def reset_mock_store():
    _store.clear()
