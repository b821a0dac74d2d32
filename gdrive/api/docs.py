"""Google Docs API v1 wrapper functions with error translation."""

import logging

from googleapiclient.errors import HttpError

from gdrive.util import AuthError, GdriveError, doc_url

logger = logging.getLogger(__name__)

_TAB_BANNER = "═" * 60


def _translate_http_error(e: HttpError, doc_id: str) -> None:
    """Translate HttpError for Docs API operations."""
    status = int(e.resp.status)
    if status == 401:
        raise AuthError("Authentication expired. Run `gdrive auth`.")
    if status == 403:
        raise GdriveError(f"Permission denied: {doc_id}")
    if status == 404:
        raise GdriveError(f"Document not found: {doc_id}")
    raise GdriveError(f"API error ({status}): {e.reason}")


def _extract_paragraph_text(paragraph: dict) -> str:
    parts = []
    for pe in paragraph.get("elements", []):
        text_run = pe.get("textRun")
        if text_run is None:
            continue
        parts.append(text_run.get("content", ""))
    return "".join(parts)


def _extract_table_text(table: dict) -> str:
    """Render a table as one ``a | b | c`` line per row, then a blank line."""
    lines = []
    for row in table.get("tableRows", []):
        cells = []
        for cell in row.get("tableCells", []):
            cell_text = "".join(
                _extract_paragraph_text(el["paragraph"])
                for el in cell.get("content", [])
                if "paragraph" in el
            )
            cells.append(cell_text.strip())
        lines.append(" | ".join(cells) + "\n")
    return "".join(lines) + "\n"


def extract_body_text(body: dict) -> str:
    """Extract plain text from a document (or tab) body."""
    parts = []
    for element in body.get("content", []):
        if "paragraph" in element:
            parts.append(_extract_paragraph_text(element["paragraph"]))
        elif "table" in element:
            parts.append(_extract_table_text(element["table"]))
    return "".join(parts)


def list_tabs(document: dict) -> list[dict]:
    """Return ``{"id", "title", "index"}`` for each top-level tab."""
    tabs = []
    for i, tab in enumerate(document.get("tabs", [])):
        props = tab.get("tabProperties", {})
        tabs.append({
            "id": props.get("tabId") or f"tab-{i}",
            "title": props.get("title") or f"Tab {i + 1}",
            "index": i,
        })
    return tabs


def get_document(ctx, doc_id: str, include_tabs: bool = True) -> dict:
    """Fetch the full document structure via documents().get()."""
    logger.debug("fetching document %s", doc_id)
    try:
        return (
            ctx.docs.documents()
            .get(documentId=doc_id, includeTabsContent=include_tabs)
            .execute()
        )
    except HttpError as e:
        _translate_http_error(e, doc_id)


def _select_tab(document: dict, tabs: list[dict], selector) -> dict:
    """Find a tab by 0-based index (int) or case-insensitive title."""
    raw_tabs = document.get("tabs", [])
    idx = None
    if isinstance(selector, int):
        if 0 <= selector < len(raw_tabs):
            idx = selector
    else:
        for t in tabs:
            if t["title"].lower() == str(selector).lower():
                idx = t["index"]
                break

    if idx is None or "documentTab" not in raw_tabs[idx]:
        raise GdriveError(f"Tab not found: {selector}", exit_code=3)
    return raw_tabs[idx]


def read_document(
    ctx, doc_id: str, list_only: bool = False, tab=None,
) -> dict:
    """Read a document's text.

    Args:
        doc_id: The document ID.
        list_only: Only collect tab info, leave content empty.
        tab: Tab selector, a 0-based index (int) or a title (str).
            When omitted, all tabs are read; with more than one tab each
            is preceded by a banner naming it.

    Returns:
        Dict with keys: title, content, tabs.
    """
    document = get_document(ctx, doc_id)
    title = document.get("title") or "Untitled"
    tabs = list_tabs(document)

    if list_only:
        return {"title": title, "content": "", "tabs": tabs}

    raw_tabs = document.get("tabs", [])
    if not raw_tabs:
        # Older responses without tabs carry the text in `body`
        content = extract_body_text(document.get("body", {}))
        return {"title": title, "content": content, "tabs": tabs}

    if tab is not None:
        selected = _select_tab(document, tabs, tab)
        content = extract_body_text(selected["documentTab"].get("body", {}))
        return {"title": title, "content": content, "tabs": tabs}

    parts = []
    for info, raw in zip(tabs, raw_tabs):
        if len(raw_tabs) > 1:
            parts.append(f"\n{_TAB_BANNER}\nTAB: {info['title']}\n{_TAB_BANNER}\n\n")
        body = raw.get("documentTab", {}).get("body")
        if body:
            parts.append(extract_body_text(body))

    return {"title": title, "content": "".join(parts).strip(), "tabs": tabs}


def batch_update(ctx, doc_id: str, requests: list[dict]) -> dict:
    """Run a batchUpdate. An empty request list is a no-op."""
    if not requests:
        return {}
    logger.debug("batchUpdate %s: %d requests", doc_id, len(requests))
    try:
        return (
            ctx.docs.documents()
            .batchUpdate(documentId=doc_id, body={"requests": requests})
            .execute()
        )
    except HttpError as e:
        _translate_http_error(e, doc_id)


def _content_requests(content: str, markdown: bool) -> list[dict]:
    """Requests that write content into an empty document body."""
    if markdown:
        from gdrive.mdparse import markdown_to_requests

        return markdown_to_requests(content)
    if not content:
        return []
    return [{"insertText": {"location": {"index": 1}, "text": content}}]


def create_document(
    ctx,
    title: str,
    content: str = "",
    folder_id: str | None = None,
    markdown: bool = False,
) -> dict:
    """Create a new Google Doc, optionally filed in a folder and filled.

    Args:
        title: Document title.
        content: Initial content; blank content leaves the doc empty.
        folder_id: Folder to move the new doc into.
        markdown: Format content from markdown instead of inserting it raw.

    Returns:
        Dict with keys: id, title, url.
    """
    try:
        result = ctx.docs.documents().create(body={"title": title}).execute()
    except HttpError as e:
        _translate_http_error(e, folder_id or "")
    doc_id = result["documentId"]

    if folder_id:
        from gdrive.api.drive import move_to_folder

        move_to_folder(ctx, doc_id, folder_id)

    if content.strip():
        batch_update(ctx, doc_id, _content_requests(content, markdown))

    return {"id": doc_id, "title": title, "url": doc_url(doc_id)}


def replace_document_content(
    ctx, doc_id: str, content: str, markdown: bool = False,
) -> dict:
    """Replace a document's body with new content.

    The existing text is deleted in its own batchUpdate, then the new
    content is written into the now-empty body. A body holding only its
    terminal newline has nothing to delete.

    Returns:
        Dict with keys: id, url.
    """
    document = get_document(ctx, doc_id, include_tabs=False)
    body_content = document.get("body", {}).get("content", [])
    end_index = body_content[-1].get("endIndex", 1) if body_content else 1

    if end_index > 2:
        batch_update(ctx, doc_id, [{
            "deleteContentRange": {
                "range": {"startIndex": 1, "endIndex": end_index - 1},
            }
        }])

    batch_update(ctx, doc_id, _content_requests(content, markdown))

    return {"id": doc_id, "url": doc_url(doc_id)}
