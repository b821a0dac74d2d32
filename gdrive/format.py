"""Output mode selection and formatting helpers."""

import json


def get_output_mode(args) -> str:
    """Determine output mode from parsed args."""
    if getattr(args, "json", False):
        return "json"
    if getattr(args, "verbose", False):
        return "verbose"
    if getattr(args, "plain", False):
        return "plain"
    return "terse"


def format_json(**fields) -> str:
    """Serialize a successful result as a JSON object with ``ok: true``."""
    return json.dumps({"ok": True, **fields}, indent=2, ensure_ascii=False)


def format_error(message: str) -> str:
    """Format an error message. Always plain text, always stderr."""
    return f"ERR: {message}"


def format_table(values: list[list]) -> str:
    """Render spreadsheet rows as a padded ``|``-separated table.

    Columns are padded to their widest cell. Empty cells and ``None``
    render as blanks.
    """
    widths: list[int] = []
    for row in values:
        for i, cell in enumerate(row):
            cell_str = "" if cell is None else str(cell)
            if i >= len(widths):
                widths.append(0)
            widths[i] = max(widths[i], len(cell_str))

    lines = []
    for row in values:
        cells = [
            ("" if cell is None else str(cell)).ljust(widths[i])
            for i, cell in enumerate(row)
        ]
        lines.append(" | ".join(cells))
    return "\n".join(lines)
