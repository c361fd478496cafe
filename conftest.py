import pytest

from expense_tracker import config
from expense_tracker.mock_sheets_client import MockClient, reset_mock_store

TEST_SPREADSHEET_ID = "test_spreadsheet_id"


@pytest.fixture
def mock_spreadsheet(monkeypatch):
    """Routes every Sheets call to a fresh in-memory spreadsheet."""
    monkeypatch.setattr(config, "USE_MOCK", True)
    monkeypatch.setattr(config, "SPREADSHEET_ID", TEST_SPREADSHEET_ID)
    reset_mock_store()
    yield MockClient().open_by_key(TEST_SPREADSHEET_ID)
    reset_mock_store()
