"""
Google sign-in restricted to an allow-list of email addresses.

The OAuth authorization code flow itself is handled by
google_auth_oauthlib; this module only wires it to the configured
client and decides who is let in.
"""

import google.auth.transport.requests
import google_auth_oauthlib.flow
from google.oauth2 import id_token
from rich.console import Console

from expense_tracker import config

console = Console()

SCOPES = [
    "openid",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
]

AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URI = "https://oauth2.googleapis.com/token"


def parse_allowed_emails(raw: str | None) -> set:
    """Splits the comma-separated ALLOWED_EMAILS value."""
    if not raw:
        return set()
    return {email.strip() for email in raw.split(",") if email.strip()}


def is_allowed(email: str | None, allowed: set | None = None) -> bool:
    if not email:
        return False
    if allowed is None:
        allowed = parse_allowed_emails(config.ALLOWED_EMAILS)
    return email in allowed


def sign_in(identity: dict, allowed: set | None = None) -> dict | None:
    """
    Admits a verified identity if its email is on the allow-list.

    Returns the session user, carrying the token subject as a stable id,
    or None when sign-in is denied.
    """
    email = identity.get("email")
    if not is_allowed(email, allowed):
        console.print(f"[yellow]Sign-in denied for {email or 'unknown email'}[/yellow]")
        return None

    return {
        "id": identity["sub"],
        "email": email,
        "name": identity.get("name", ""),
        "picture": identity.get("picture", ""),
    }


def client_config() -> dict:
    return {
        "web": {
            "client_id": config.GOOGLE_CLIENT_ID,
            "client_secret": config.GOOGLE_CLIENT_SECRET,
            "auth_uri": AUTH_URI,
            "token_uri": TOKEN_URI,
        }
    }


def build_flow(redirect_uri: str, state: str | None = None) -> google_auth_oauthlib.flow.Flow:
    return google_auth_oauthlib.flow.Flow.from_client_config(
        client_config(),
        scopes=SCOPES,
        state=state,
        redirect_uri=redirect_uri,
    )


def authorization_url(redirect_uri: str) -> tuple:
    """Returns (url, state, code_verifier) for the provider redirect."""
    flow = build_flow(redirect_uri)
    url, state = flow.authorization_url(
        prompt="consent",
        access_type="offline",
        include_granted_scopes="true",
    )
    return url, state, flow.code_verifier


def exchange_code(code: str, redirect_uri: str, state: str | None = None,
                  code_verifier: str | None = None) -> dict:
    """Exchanges the authorization code and returns the verified ID token claims."""
    flow = build_flow(redirect_uri, state=state)
    if code_verifier:
        flow.code_verifier = code_verifier
    flow.fetch_token(code=code)

    request = google.auth.transport.requests.Request()
    return id_token.verify_oauth2_token(flow.credentials.id_token, request, config.GOOGLE_CLIENT_ID)
