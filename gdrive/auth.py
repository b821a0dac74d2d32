"""OAuth2 installed-app flow and token storage for Drive, Docs and Sheets."""

import json
import logging
import os
import sys
from urllib.parse import parse_qs, urlparse

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from gdrive.util import AuthError, CONFIG_DIR, CREDS_PATH, TOKEN_PATH

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/drive",
    "https://www.googleapis.com/auth/documents",
    "https://www.googleapis.com/auth/spreadsheets",
]

# Nothing listens here; the user copies the failed redirect URL from the browser.
HEADLESS_REDIRECT_URI = "http://localhost:1"


def get_credentials() -> Credentials:
    """Return usable credentials from token.json, refreshing if expired."""
    creds = _load_token()
    if creds is None:
        raise AuthError("Not authenticated. Run `gdrive auth` to authenticate.")
    if creds.valid:
        return creds

    if creds.expired and creds.refresh_token:
        logger.debug("access token expired, refreshing")
        try:
            creds.refresh(Request())
        except RefreshError as e:
            logger.debug("token refresh failed: %s", e)
        else:
            _save_token(creds)
            return creds

    raise AuthError("Not authenticated. Run `gdrive auth` to authenticate.")


def _load_client_config() -> dict:
    """Read credentials.json, which must hold an "installed" or "web" client."""
    if not CREDS_PATH.exists():
        raise AuthError(
            f"credentials.json not found at {CREDS_PATH}. "
            "Create a Desktop OAuth client in Google Cloud Console, "
            "download its JSON and place it there."
        )
    try:
        config = json.loads(CREDS_PATH.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise AuthError(f"cannot read {CREDS_PATH}: {e}")

    if not isinstance(config, dict) or not ("installed" in config or "web" in config):
        raise AuthError(
            f"invalid {CREDS_PATH.name}: expected an \"installed\" or \"web\" client"
        )
    return config


def _code_from_redirect(pasted: str) -> str:
    """Pull the auth code out of a pasted redirect URL (or take a bare code)."""
    pasted = pasted.strip()
    code = parse_qs(urlparse(pasted).query).get("code", [None])[0]
    return code or pasted


def _headless_flow(flow: InstalledAppFlow) -> Credentials:
    flow.redirect_uri = HEADLESS_REDIRECT_URI
    auth_url, _ = flow.authorization_url(prompt="consent", access_type="offline")
    print(
        "Visit this URL to authorize gdrive:\n\n"
        f"{auth_url}\n\n"
        "After authorizing, paste the full redirect URL here:",
        file=sys.stderr,
    )
    flow.fetch_token(code=_code_from_redirect(input()))
    return flow.credentials


def authenticate(no_browser: bool = False) -> Credentials:
    """Run the consent flow and store the resulting token. Used by `gdrive auth`."""
    flow = InstalledAppFlow.from_client_config(_load_client_config(), SCOPES)

    if no_browser:
        creds = _headless_flow(flow)
    else:
        creds = flow.run_local_server(port=0)

    _save_token(creds)
    print(f"OK authenticated. Token stored in {TOKEN_PATH}", file=sys.stderr)
    return creds


def _load_token() -> Credentials | None:
    if not TOKEN_PATH.exists():
        return None

    try:
        return Credentials.from_authorized_user_file(str(TOKEN_PATH), SCOPES)
    except (json.JSONDecodeError, ValueError, KeyError):
        print(
            "ERR: stored credentials are corrupt. "
            "Run `gdrive auth` to re-authenticate.",
            file=sys.stderr,
        )
        TOKEN_PATH.unlink(missing_ok=True)
        return None


def _save_token(creds: Credentials) -> None:
    """Write token.json readable only by the current user."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    TOKEN_PATH.write_text(creds.to_json())
    os.chmod(TOKEN_PATH, 0o600)
