"""gdrive: CLI for Google Drive, Docs & Sheets."""

__version__ = "0.1.0"
