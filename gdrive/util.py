"""ID extraction, error classes, and config paths."""

import os
import re
import sys
from pathlib import Path


class GdriveError(Exception):
    """Base error for gdrive CLI operations."""

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


class AuthError(GdriveError):
    """Authentication error (exit code 2)."""

    def __init__(self, message: str):
        super().__init__(message, exit_code=2)


def _config_dir() -> Path:
    override = os.environ.get("GDRIVE_CONFIG_DIR", "")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "gdrive"


CONFIG_DIR = _config_dir()
TOKEN_PATH = CONFIG_DIR / "token.json"
CREDS_PATH = CONFIG_DIR / "credentials.json"

FOLDER_MIME = "application/vnd.google-apps.folder"
DOC_MIME = "application/vnd.google-apps.document"
SHEET_MIME = "application/vnd.google-apps.spreadsheet"

_PATTERNS = [
    re.compile(r"/d/([a-zA-Z0-9_-]+)"),
    re.compile(r"[?&]id=([a-zA-Z0-9_-]+)"),
    re.compile(r"/folders/([a-zA-Z0-9_-]+)"),
]

_BARE_ID = re.compile(r"^[a-zA-Z0-9_-]+$")


def doc_url(doc_id: str) -> str:
    """Return the edit URL for a Google Doc."""
    return f"https://docs.google.com/document/d/{doc_id}/edit"


def confirm_destructive(message: str, force: bool = False) -> None:
    """Prompt for confirmation on destructive ops. Raises GdriveError on decline."""
    if force:
        return

    if not sys.stdin.isatty():
        raise GdriveError(
            f"Refusing to {message} without --force (non-interactive)",
            exit_code=3,
        )
    print(f"{message} [y/N]: ", end="", file=sys.stderr, flush=True)
    answer = input().strip().lower()
    if answer not in ("y", "yes"):
        raise GdriveError("Cancelled", exit_code=3)


def extract_file_id(input_str: str) -> str:
    """Extract a Drive file ID from a URL or bare ID string.

    Accepts:
    - Google Docs/Sheets URL: https://docs.google.com/document/d/ID/edit
    - Drive URL with query: https://drive.google.com/open?id=ID
    - Drive folder URL: https://drive.google.com/drive/folders/ID
    - Bare ID: 1aBcDeFgHiJkLmNoPqRsTuVwXyZ

    Raises ValueError if no valid ID can be extracted.
    """
    input_str = input_str.strip()

    if not input_str:
        raise ValueError("Cannot extract file ID from empty string")

    for pattern in _PATTERNS:
        match = pattern.search(input_str)
        if match:
            return match.group(1)

    if _BARE_ID.match(input_str):
        return input_str

    raise ValueError(f"Cannot extract file ID from: {input_str}")
