from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from cli.main import app
from expense_tracker import config
from expense_tracker.processor import current_month_name

runner = CliRunner()


def test_add_and_list_categories(mock_spreadsheet):
    result = runner.invoke(app, ["add", "250.5", "Groceries"])
    assert result.exit_code == 0
    assert "Expense added successfully!" in result.stdout

    result = runner.invoke(app, ["categories"])
    assert result.exit_code == 0
    assert "Groceries" in result.stdout


def test_categories_empty_month(mock_spreadsheet):
    result = runner.invoke(app, ["categories"])
    assert result.exit_code == 0
    assert f"No categories yet for {current_month_name()}" in result.stdout


def test_summary_table(mock_spreadsheet):
    for amount, category in [("100", "Rent"), ("40.5", "Groceries"), ("9.5", "Groceries")]:
        assert runner.invoke(app, ["add", amount, category]).exit_code == 0

    result = runner.invoke(app, ["summary"])

    assert result.exit_code == 0
    # rich wraps the title to the table width
    assert "Expenses by Category" in result.stdout
    assert f"({current_month_name()})" in result.stdout
    assert "50.00" in result.stdout
    assert "100.00" in result.stdout
    assert "150.00" in result.stdout


def test_summary_missing_month(mock_spreadsheet):
    result = runner.invoke(app, ["summary", "--month", "February"])
    assert result.exit_code == 0
    assert "No expenses recorded for February" in result.stdout


def test_add_rejects_blank_category(mock_spreadsheet):
    result = runner.invoke(app, ["add", "10", "  "])
    assert result.exit_code == 1
    assert mock_spreadsheet.worksheets() == []


@pytest.mark.parametrize("amount", ["nan", "inf", "0"])
def test_add_rejects_non_positive_or_non_finite_amount(mock_spreadsheet, amount):
    result = runner.invoke(app, ["add", amount, "Food"])
    assert result.exit_code == 1
    assert mock_spreadsheet.worksheets() == []


def test_missing_spreadsheet_id(monkeypatch):
    monkeypatch.setattr(config, "SPREADSHEET_ID", "")
    result = runner.invoke(app, ["categories"])
    assert result.exit_code == 1
    assert "Spreadsheet ID not configured" in result.stdout


@patch('expense_tracker.sheets_client.add_expense', return_value=False)
def test_add_failure_exit_code(mock_add_expense, monkeypatch):
    monkeypatch.setattr(config, "SPREADSHEET_ID", "sheet-id")
    result = runner.invoke(app, ["add", "12", "Food", "--spreadsheet-id", "other-sheet"])

    assert result.exit_code == 1
    assert "Error adding expense" in result.stdout
    mock_add_expense.assert_called_once_with("other-sheet", "Food", 12.0)


@patch('uvicorn.run')
def test_serve(mock_run):
    result = runner.invoke(app, ["serve", "--port", "9000"])
    assert result.exit_code == 0
    mock_run.assert_called_once_with("api.server:app", host="127.0.0.1", port=9000, reload=False)
