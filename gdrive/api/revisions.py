"""Revision history: listing, exporting and diffing document revisions."""

import logging
from concurrent.futures import ThreadPoolExecutor

from googleapiclient.errors import HttpError

from gdrive.util import AuthError, GdriveError

logger = logging.getLogger(__name__)


def _translate_http_error(e: HttpError, file_id: str) -> None:
    """Translate HttpError for revisions operations."""
    status = int(e.resp.status)
    if status == 401:
        raise AuthError("Authentication expired. Run `gdrive auth`.")
    if status == 403:
        raise GdriveError(f"Permission denied: {file_id}")
    if status == 404:
        raise GdriveError(f"File or revision not found: {file_id}")
    raise GdriveError(f"API error ({status}): {e.reason}")


def list_revisions(ctx, file_id: str) -> list[dict]:
    """List all revisions of a file, oldest first."""
    try:
        response = ctx.drive.revisions().list(
            fileId=file_id,
            fields=(
                "revisions(id, modifiedTime, "
                "lastModifyingUser(displayName, emailAddress), exportLinks)"
            ),
        ).execute()
        return response.get("revisions", [])
    except HttpError as e:
        _translate_http_error(e, file_id)


def get_export_link(
    ctx, file_id: str, revision_id: str, mime_type: str = "text/plain",
) -> str:
    """Return a revision's export URL for the given MIME type."""
    try:
        revision = ctx.drive.revisions().get(
            fileId=file_id, revisionId=revision_id, fields="id, exportLinks",
        ).execute()
    except HttpError as e:
        _translate_http_error(e, file_id)

    link = (revision.get("exportLinks") or {}).get(mime_type)
    if not link:
        raise GdriveError(
            f"No {mime_type} export link available for revision {revision_id}"
        )
    return link


def download_export(ctx, url: str) -> str:
    """Download an export link with the context's credentials."""
    logger.debug("downloading %s", url)
    session = ctx.authorized_session()
    try:
        response = session.get(url, timeout=60)
    finally:
        session.close()

    if response.status_code == 401:
        raise AuthError("Authentication expired. Run `gdrive auth`.")
    if not response.ok:
        raise GdriveError(
            f"Failed to fetch revision content: "
            f"{response.status_code} {response.reason}"
        )
    return response.text


def get_revision_content(ctx, file_id: str, revision_id: str) -> str:
    """Fetch the plain-text content of one revision."""
    return download_export(ctx, get_export_link(ctx, file_id, revision_id))


def simple_diff(old_text: str, new_text: str) -> str:
    """Line-set diff between two texts.

    Lists ``- line`` for each non-blank old line with no (whitespace-
    insensitive) equal in the new text, then ``+ line`` for the converse.
    Line order and repetition are ignored.
    """
    old_lines = old_text.split("\n")
    new_lines = new_text.split("\n")
    old_set = {line.strip() for line in old_lines}
    new_set = {line.strip() for line in new_lines}

    changes = [
        f"- {line}" for line in old_lines
        if line.strip() and line.strip() not in new_set
    ]
    changes.extend(
        f"+ {line}" for line in new_lines
        if line.strip() and line.strip() not in old_set
    )
    return "\n".join(changes)


def diff_revisions(ctx, file_id: str, old_rev: str, new_rev: str) -> str:
    """Diff the plain text of two revisions.

    Export links are looked up one after the other (the API client is not
    thread-safe); the two downloads then run in parallel, each on its own
    HTTP session.
    """
    links = [get_export_link(ctx, file_id, rev) for rev in (old_rev, new_rev)]
    with ThreadPoolExecutor(max_workers=2) as pool:
        old_text, new_text = pool.map(lambda url: download_export(ctx, url), links)
    return simple_diff(old_text, new_text)
