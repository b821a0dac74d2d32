"""Google Sheets API v4 wrapper functions with error translation."""

import json
import logging

from googleapiclient.errors import HttpError

from gdrive.util import AuthError, GdriveError

logger = logging.getLogger(__name__)


def _translate_http_error(e: HttpError, spreadsheet_id: str) -> None:
    """Translate HttpError for Sheets API operations."""
    status = int(e.resp.status)
    if status == 401:
        raise AuthError("Authentication expired. Run `gdrive auth`.")
    if status == 403:
        raise GdriveError(f"Permission denied: {spreadsheet_id}")
    if status == 404:
        raise GdriveError(f"Spreadsheet not found: {spreadsheet_id}")
    if status == 400:
        raise GdriveError(f"Bad request: {e.reason}", exit_code=3)
    raise GdriveError(f"API error ({status}): {e.reason}")


def parse_values_json(text: str) -> list[list]:
    """Parse CLI cell data, which must be a JSON array of arrays."""
    try:
        values = json.loads(text)
    except json.JSONDecodeError:
        values = None
    if not isinstance(values, list) or not all(isinstance(r, list) for r in values):
        raise GdriveError(
            "Invalid JSON data. Expected array of arrays, "
            """e.g. '[["Name","Age"],["John",30]]'""",
            exit_code=3,
        )
    return values


def get_spreadsheet(ctx, spreadsheet_id: str) -> dict:
    """Fetch spreadsheet metadata (title and sheet properties)."""
    try:
        return ctx.sheets.spreadsheets().get(
            spreadsheetId=spreadsheet_id,
            fields="properties(title), sheets(properties(sheetId, title))",
        ).execute()
    except HttpError as e:
        _translate_http_error(e, spreadsheet_id)


def sheet_titles(spreadsheet: dict) -> list[str]:
    return [
        s.get("properties", {}).get("title", "")
        for s in spreadsheet.get("sheets", [])
    ]


def first_sheet_title(spreadsheet: dict) -> str:
    titles = sheet_titles(spreadsheet)
    return titles[0] if titles and titles[0] else "Sheet1"


def read_values(ctx, spreadsheet_id: str, range_: str | None = None) -> list[list]:
    """Read cell values. Without a range the whole first sheet is read."""
    if not range_:
        range_ = first_sheet_title(get_spreadsheet(ctx, spreadsheet_id))
    logger.debug("reading %s!%s", spreadsheet_id, range_)
    try:
        response = ctx.sheets.spreadsheets().values().get(
            spreadsheetId=spreadsheet_id, range=range_,
        ).execute()
        return response.get("values", [])
    except HttpError as e:
        _translate_http_error(e, spreadsheet_id)


def read_as_objects(
    ctx, spreadsheet_id: str, range_: str | None = None,
) -> list[dict]:
    """Read rows as dicts keyed by the (trimmed) first-row headers.

    Missing trailing cells become empty strings. A range with no data
    rows below the header yields an empty list.
    """
    values = read_values(ctx, spreadsheet_id, range_)
    if len(values) < 2:
        return []

    headers = [str(h).strip() for h in values[0]]
    return [
        {h: (row[i] if i < len(row) and row[i] is not None else "")
         for i, h in enumerate(headers)}
        for row in values[1:]
    ]


def write_values(ctx, spreadsheet_id: str, range_: str, values: list[list]) -> dict:
    """Overwrite a range, parsing input as if typed by a user.

    Returns:
        Dict with keys: updatedRange, updatedCells (from the API response).
    """
    try:
        return ctx.sheets.spreadsheets().values().update(
            spreadsheetId=spreadsheet_id,
            range=range_,
            valueInputOption="USER_ENTERED",
            body={"values": values},
        ).execute()
    except HttpError as e:
        _translate_http_error(e, spreadsheet_id)


def append_rows(ctx, spreadsheet_id: str, range_: str, rows: list[list]) -> dict:
    """Append rows after the last row of data in a range.

    Returns:
        The API's ``updates`` dict (updatedRange, updatedCells, ...).
    """
    try:
        response = ctx.sheets.spreadsheets().values().append(
            spreadsheetId=spreadsheet_id,
            range=range_,
            valueInputOption="USER_ENTERED",
            insertDataOption="INSERT_ROWS",
            body={"values": rows},
        ).execute()
        return response.get("updates", {})
    except HttpError as e:
        _translate_http_error(e, spreadsheet_id)


def clear_range(ctx, spreadsheet_id: str, range_: str) -> str:
    """Clear values (not formatting) in a range. Returns the cleared range."""
    try:
        response = ctx.sheets.spreadsheets().values().clear(
            spreadsheetId=spreadsheet_id, range=range_, body={},
        ).execute()
        return response.get("clearedRange", range_)
    except HttpError as e:
        _translate_http_error(e, spreadsheet_id)


def write_objects(
    ctx,
    spreadsheet_id: str,
    range_: str,
    data: list[dict],
    headers: list[str] | None = None,
) -> dict | None:
    """Write dicts as rows under a header row.

    Headers default to the keys of the first dict. Missing keys become
    empty cells. Writing no data does nothing and returns None.
    """
    if not data:
        return None
    cols = headers or list(data[0].keys())
    values = [list(cols)]
    values.extend([obj.get(col, "") for col in cols] for obj in data)
    return write_values(ctx, spreadsheet_id, range_, values)
