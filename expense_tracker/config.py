# Configuration for the expense tracker

import json
import os
import secrets
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console

console = Console()

load_dotenv()

ROOT_DIR = Path(__file__).parent.parent


def load_file_config():
    """Loads fallback settings from config/settings.json or falls back to example."""
    config_path = ROOT_DIR / "config/settings.json"
    example_path = ROOT_DIR / "config/settings.example.json"

    config = {}
    if config_path.exists():
        with open(config_path, 'r') as f:
            config = json.load(f)
    elif example_path.exists():
        console.print("[yellow]Warning: config/settings.json not found. Using example config.[/yellow]")
        with open(example_path, 'r') as f:
            config = json.load(f)

    return config


PLACEHOLDER_SECRETS = ("", "change-me")


def resolve_session_secret(value) -> str:
    """Returns the cookie-signing secret, or a random one when none is configured."""
    value = (value or "").strip()
    if value in PLACEHOLDER_SECRETS:
        console.print("[yellow]Warning: SESSION_SECRET not set. Using a random secret; sessions end on restart.[/yellow]")
        return secrets.token_urlsafe(32)
    return value


def _env_flag(value) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "on")


_file_config = load_file_config()

# Spreadsheet holding one tab per month
SPREADSHEET_ID = os.getenv("GOOGLE_SHEETS_ID", _file_config.get("spreadsheet_id", ""))

# Service account, either as email + key or as a JSON key file
SERVICE_ACCOUNT_EMAIL = os.getenv("GOOGLE_SERVICE_ACCOUNT_EMAIL", "")
# Keys pasted into .env files carry literal "\n" sequences
PRIVATE_KEY = os.getenv("GOOGLE_PRIVATE_KEY", "").replace("\\n", "\n")
CREDENTIALS_PATH = os.getenv(
    "GOOGLE_CREDENTIALS_PATH",
    _file_config.get("credentials_path", str(ROOT_DIR / "resources" / "credentials.json")),
)

# Google sign-in
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID", "")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET", "")
ALLOWED_EMAILS = os.getenv("ALLOWED_EMAILS", ",".join(_file_config.get("allowed_emails", [])))
SESSION_SECRET = resolve_session_secret(os.getenv("SESSION_SECRET"))
BASE_URL = os.getenv("BASE_URL", "http://localhost:8000").rstrip("/")

# Sheet formatting
TIMEZONE = os.getenv("EXPENSE_TIMEZONE", _file_config.get("timezone", "Asia/Kolkata"))
CURRENCY_PATTERN = os.getenv("CURRENCY_PATTERN", _file_config.get("currency_pattern", "₹#,##0.00"))

USE_MOCK = _env_flag(os.getenv("EXPENSE_TRACKER_USE_MOCK", "false"))

# oauthlib refuses plain http redirect URIs unless told otherwise
if BASE_URL.startswith("http://localhost") or BASE_URL.startswith("http://127.0.0.1"):
    os.environ.setdefault("OAUTHLIB_INSECURE_TRANSPORT", "1")
