"""Comments API wrapper functions (Drive API v3)."""

import html

from googleapiclient.errors import HttpError

from gdrive.util import AuthError, GdriveError

_COMMENT_FIELDS = (
    "id, content, author(displayName, emailAddress), "
    "resolved, createdTime, modifiedTime, quotedFileContent(value), "
    "replies(author(displayName, emailAddress), modifiedTime, content, action)"
)


def _translate_http_error(e: HttpError, file_id: str) -> None:
    """Translate HttpError for comments operations."""
    status = int(e.resp.status)
    if status == 401:
        raise AuthError("Authentication expired. Run `gdrive auth`.")
    if status == 403:
        raise GdriveError(f"Permission denied: {file_id}")
    if status == 404:
        raise GdriveError(f"File or comment not found: {file_id}")
    raise GdriveError(f"API error ({status}): {e.reason}")


def unescape_quoted(value: str) -> str:
    """Decode the HTML entities Drive leaves in quoted anchor text."""
    return html.unescape(value)


def list_comments(ctx, file_id: str, include_resolved: bool = True) -> list[dict]:
    """List comments on a file, auto-paginating.

    Args:
        file_id: The file ID.
        include_resolved: If False, resolved comments are filtered out
            client-side after fetching.

    Returns:
        List of comment dicts with id, content, author, resolved,
        quotedFileContent and replies.
    """
    try:
        all_comments: list[dict] = []
        page_token = None

        while True:
            params: dict = {
                "fileId": file_id,
                "includeDeleted": False,
                "fields": f"nextPageToken, comments({_COMMENT_FIELDS})",
                "pageSize": 100,
            }
            if page_token:
                params["pageToken"] = page_token

            response = ctx.drive.comments().list(**params).execute()
            all_comments.extend(response.get("comments", []))
            page_token = response.get("nextPageToken")
            if page_token is None:
                break

        if not include_resolved:
            all_comments = [c for c in all_comments if not c.get("resolved", False)]

        return all_comments
    except HttpError as e:
        _translate_http_error(e, file_id)


def create_reply(ctx, file_id: str, comment_id: str, content: str) -> dict:
    """Reply to a comment.

    Returns:
        Reply dict with id, content, author.
    """
    try:
        return ctx.drive.replies().create(
            fileId=file_id,
            commentId=comment_id,
            body={"content": content},
            fields="id, content, author(displayName)",
        ).execute()
    except HttpError as e:
        _translate_http_error(e, file_id)


def resolve_comment(ctx, file_id: str, comment_id: str) -> bool:
    """Mark a comment resolved and report whether it actually is.

    Drive silently ignores the update when the caller may not resolve
    the comment (only its author or the file owner can), so the comment
    is read back after updating.
    """
    try:
        comments = ctx.drive.comments()
        existing = comments.get(
            fileId=file_id, commentId=comment_id, fields="content, resolved",
        ).execute()
        if existing.get("resolved"):
            return True

        # comments.update requires content even when only resolving
        comments.update(
            fileId=file_id,
            commentId=comment_id,
            body={"content": existing.get("content", ""), "resolved": True},
            fields="id, resolved",
        ).execute()

        after = comments.get(
            fileId=file_id, commentId=comment_id, fields="resolved",
        ).execute()
        return after.get("resolved") is True
    except HttpError as e:
        _translate_http_error(e, file_id)
