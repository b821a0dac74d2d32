"""Drive API wrapper functions with error translation."""

import logging

from googleapiclient.errors import HttpError

from gdrive.util import AuthError, FOLDER_MIME, DOC_MIME, GdriveError

logger = logging.getLogger(__name__)

_FILE_FIELDS = "id, name, mimeType, modifiedTime"


def _translate_http_error(e: HttpError, file_id: str) -> None:
    """Translate a googleapiclient HttpError into GdriveError or AuthError."""
    status = int(e.resp.status)

    if status == 401:
        raise AuthError("Authentication expired. Run `gdrive auth`.")

    if status == 403:
        raise GdriveError(f"Permission denied: {file_id}")

    if status == 404:
        raise GdriveError(f"File not found: {file_id}")

    raise GdriveError(f"API error ({status}): {e.reason}")


def _escape_query_value(value: str) -> str:
    """Escape a value for embedding in a Drive API query string.

    Backslashes are escaped first, then single quotes, to avoid
    double-escaping.
    """
    value = value.replace("\\", "\\\\")
    value = value.replace("'", "\\'")
    return value


def list_folder(ctx, folder_id: str = "root") -> list[dict]:
    """List the non-trashed children of a folder, auto-paginating."""
    query = f"'{_escape_query_value(folder_id)}' in parents and trashed = false"
    logger.debug("listing folder %s", folder_id)
    try:
        all_files: list[dict] = []
        page_token = None

        while True:
            response = (
                ctx.drive.files()
                .list(
                    q=query,
                    fields=f"nextPageToken, files({_FILE_FIELDS})",
                    orderBy="name",
                    pageSize=100,
                    pageToken=page_token,
                    supportsAllDrives=True,
                    includeItemsFromAllDrives=True,
                )
                .execute()
            )
            all_files.extend(response.get("files", []))
            page_token = response.get("nextPageToken")
            if page_token is None:
                break

        return all_files
    except HttpError as e:
        _translate_http_error(e, folder_id)


def find_folder_by_path(ctx, path: str) -> str | None:
    """Resolve a folder path like ``/Team/Ads/Scripts`` to a folder ID.

    Walks one path component at a time starting from My Drive's root.
    Returns None if any component is missing. ``/`` resolves to ``root``.
    """
    current = "root"
    for name in (p for p in path.split("/") if p):
        query = (
            f"'{current}' in parents"
            f" and name = '{_escape_query_value(name)}'"
            f" and mimeType = '{FOLDER_MIME}' and trashed = false"
        )
        try:
            response = (
                ctx.drive.files()
                .list(
                    q=query,
                    fields="files(id, name)",
                    pageSize=1,
                    supportsAllDrives=True,
                    includeItemsFromAllDrives=True,
                )
                .execute()
            )
        except HttpError as e:
            _translate_http_error(e, path)

        files = response.get("files", [])
        if not files or not files[0].get("id"):
            return None
        current = files[0]["id"]

    return current


def resolve_folder(ctx, path_or_id: str) -> str:
    """Return a folder ID for either a ``/path`` or an ID (returned as-is)."""
    if not path_or_id.startswith("/"):
        return path_or_id
    folder_id = find_folder_by_path(ctx, path_or_id)
    if folder_id is None:
        raise GdriveError(f"Folder not found: {path_or_id}")
    return folder_id


def search_files(
    ctx, query: str, docs_only: bool = False, limit: int = 20,
) -> list[dict]:
    """Search files by name, most recently modified first.

    Args:
        query: Search term, matched with ``name contains``.
        docs_only: Restrict results to Google Docs.
        limit: Maximum number of results.
    """
    drive_query = f"name contains '{_escape_query_value(query)}' and trashed = false"
    if docs_only:
        drive_query += f" and mimeType = '{DOC_MIME}'"

    try:
        response = (
            ctx.drive.files()
            .list(
                q=drive_query,
                fields=f"files({_FILE_FIELDS}, parents)",
                orderBy="modifiedTime desc",
                pageSize=limit,
                supportsAllDrives=True,
                includeItemsFromAllDrives=True,
            )
            .execute()
        )
        return response.get("files", [])
    except HttpError as e:
        _translate_http_error(e, "")


def get_file_path(ctx, file_id: str) -> str:
    """Build the display path of a file by walking its parents to the root."""
    parts: list[str] = []
    current = file_id
    try:
        while current:
            result = (
                ctx.drive.files()
                .get(fileId=current, fields="name, parents", supportsAllDrives=True)
                .execute()
            )
            parts.insert(0, result.get("name", ""))
            parents = result.get("parents") or []
            current = parents[0] if parents else None
            if current == "root":
                break
    except HttpError as e:
        _translate_http_error(e, file_id)

    return "/" + "/".join(parts)


def rename_file(ctx, file_id: str, new_name: str) -> dict:
    """Rename a file.

    Returns:
        Dict with keys: id, name, url.
    """
    try:
        result = (
            ctx.drive.files()
            .update(
                fileId=file_id,
                body={"name": new_name},
                fields="id, name, webViewLink",
                supportsAllDrives=True,
            )
            .execute()
        )
    except HttpError as e:
        _translate_http_error(e, file_id)

    return {
        "id": result["id"],
        "name": result["name"],
        "url": result.get("webViewLink")
        or f"https://drive.google.com/file/d/{file_id}",
    }


def delete_file(ctx, file_id: str) -> None:
    """Permanently delete a file (bypasses the trash)."""
    logger.debug("deleting file %s", file_id)
    try:
        ctx.drive.files().delete(fileId=file_id, supportsAllDrives=True).execute()
    except HttpError as e:
        _translate_http_error(e, file_id)


def move_to_folder(ctx, file_id: str, folder_id: str) -> None:
    """Move a file from My Drive's root into a folder."""
    try:
        ctx.drive.files().update(
            fileId=file_id,
            addParents=folder_id,
            removeParents="root",
            fields="id, parents",
            supportsAllDrives=True,
        ).execute()
    except HttpError as e:
        _translate_http_error(e, folder_id)
