from unittest.mock import MagicMock, patch

import pytest

from expense_tracker import auth, config

IDENTITY = {
    "sub": "109876543210",
    "email": "me@example.com",
    "name": "Me",
    "picture": "https://example.com/me.png",
}


def test_parse_allowed_emails():
    assert auth.parse_allowed_emails("me@example.com, you@example.com,,") == {"me@example.com", "you@example.com"}
    assert auth.parse_allowed_emails("") == set()
    assert auth.parse_allowed_emails(None) == set()


def test_is_allowed_uses_configured_list(monkeypatch):
    monkeypatch.setattr(config, "ALLOWED_EMAILS", "me@example.com,you@example.com")
    assert auth.is_allowed("you@example.com")
    assert not auth.is_allowed("stranger@example.com")
    assert not auth.is_allowed("")
    assert not auth.is_allowed(None)


def test_sign_in_admits_allow_listed_email():
    user = auth.sign_in(IDENTITY, allowed={"me@example.com"})
    assert user == {
        "id": "109876543210",
        "email": "me@example.com",
        "name": "Me",
        "picture": "https://example.com/me.png",
    }


def test_sign_in_denies_other_email():
    assert auth.sign_in(IDENTITY, allowed={"you@example.com"}) is None
    assert auth.sign_in(IDENTITY, allowed=set()) is None


def test_sign_in_id_is_stable():
    first = auth.sign_in(IDENTITY, allowed={"me@example.com"})
    second = auth.sign_in(dict(IDENTITY, name="Renamed"), allowed={"me@example.com"})
    assert first["id"] == second["id"] == IDENTITY["sub"]


def test_build_flow_uses_configured_client(monkeypatch):
    monkeypatch.setattr(config, "GOOGLE_CLIENT_ID", "client-id.apps.googleusercontent.com")
    monkeypatch.setattr(config, "GOOGLE_CLIENT_SECRET", "secret")

    flow = auth.build_flow("http://localhost:8000/api/auth/callback/google")

    assert flow.client_config["client_id"] == "client-id.apps.googleusercontent.com"
    assert flow.redirect_uri == "http://localhost:8000/api/auth/callback/google"
    assert "openid" in flow.oauth2session.scope


def test_authorization_url_requests_consent(monkeypatch):
    monkeypatch.setattr(config, "GOOGLE_CLIENT_ID", "client-id")
    monkeypatch.setattr(config, "GOOGLE_CLIENT_SECRET", "secret")

    url, state, _ = auth.authorization_url("http://localhost:8000/api/auth/callback/google")

    assert url.startswith(auth.AUTH_URI)
    assert "prompt=consent" in url
    assert "access_type=offline" in url
    assert f"state={state}" in url


@patch('expense_tracker.auth.id_token.verify_oauth2_token')
@patch('expense_tracker.auth.build_flow')
def test_exchange_code_verifies_id_token(mock_build_flow, mock_verify, monkeypatch):
    monkeypatch.setattr(config, "GOOGLE_CLIENT_ID", "client-id")
    flow = MagicMock()
    flow.credentials.id_token = "header.payload.signature"
    mock_build_flow.return_value = flow
    mock_verify.return_value = IDENTITY

    claims = auth.exchange_code("auth-code", "http://cb", state="xyz", code_verifier="verifier")

    assert claims == IDENTITY
    mock_build_flow.assert_called_once_with("http://cb", state="xyz")
    flow.fetch_token.assert_called_once_with(code="auth-code")
    assert flow.code_verifier == "verifier"
    assert mock_verify.call_args[0][0] == "header.payload.signature"
    assert mock_verify.call_args[0][2] == "client-id"


@patch('expense_tracker.auth.build_flow')
def test_exchange_code_propagates_provider_errors(mock_build_flow):
    mock_build_flow.return_value.fetch_token.side_effect = ValueError("invalid_grant")
    with pytest.raises(ValueError):
        auth.exchange_code("bad-code", "http://cb")
