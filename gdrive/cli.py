"""CLI parser, subcommand dispatch, and exception handler."""

import argparse
import logging
import os
import sys

from gdrive import __version__
from gdrive.util import AuthError, DOC_MIME, FOLDER_MIME, GdriveError, SHEET_MIME


class GdriveArgumentParser(argparse.ArgumentParser):
    """Custom parser that exits with code 3 on usage errors (not 2)."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        print(f"ERR: {message}", file=sys.stderr)
        sys.exit(3)


def _resolve_id(raw: str) -> str:
    """Extract a file ID, wrapping ValueError as GdriveError(exit_code=3)."""
    from gdrive.util import extract_file_id

    try:
        return extract_file_id(raw)
    except ValueError as e:
        raise GdriveError(str(e), exit_code=3)


def _read_file(path: str) -> str:
    """Read a local text file."""
    if not os.path.isfile(path):
        raise GdriveError(f"file not found: {path}", exit_code=3)
    try:
        with open(path, encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        raise GdriveError(f"cannot read file: {e}", exit_code=3)


def _read_stdin() -> str:
    """Read piped stdin; an interactive terminal yields nothing."""
    if sys.stdin is None or sys.stdin.isatty():
        return ""
    return sys.stdin.read()


def _resolve_content(args) -> str:
    """Content from --content, else --file, else piped stdin."""
    content = getattr(args, "content", None)
    if content is not None:
        return content
    path = getattr(args, "file", None)
    if path:
        return _read_file(path)
    return _read_stdin()


_TYPE_LABELS = {
    FOLDER_MIME: "folder",
    DOC_MIME: "doc",
    SHEET_MIME: "sheet",
}


def _format_file_list(files: list[dict], mode: str) -> str:
    """Format a list of file dicts for output."""
    if mode == "json":
        from gdrive.format import format_json

        return format_json(files=files)

    lines = []
    for f in files:
        fid = f.get("id", "")
        name = f.get("name", "")
        mime = f.get("mimeType", "")
        modified = f.get("modifiedTime", "")
        if mode == "verbose":
            lines.append(f"{fid}\t{name}\t{modified}\t{mime}")
        elif mode == "plain":
            lines.append(f"{fid}\t{name}\t{mime}")
        else:
            label = _TYPE_LABELS.get(mime, "file")
            lines.append(f"{fid}\t{label}\t{name}\t{modified[:10]}")
    return "\n".join(lines)


def cmd_auth(args, ctx) -> int:
    """Handler for `gdrive auth`."""
    from gdrive.auth import authenticate

    authenticate(no_browser=getattr(args, "no_browser", False))
    return 0


def cmd_list(args, ctx) -> int:
    """Handler for `gdrive list`."""
    from gdrive.api.drive import list_folder, resolve_folder
    from gdrive.format import get_output_mode

    target = getattr(args, "folder", None) or "root"
    if target == "root" or target.startswith("/"):
        folder_id = resolve_folder(ctx, target)
    else:
        folder_id = _resolve_id(target)

    # Folders, then docs, then everything else; the API already sorted by name
    rank = {FOLDER_MIME: 0, DOC_MIME: 1}
    files = sorted(
        list_folder(ctx, folder_id),
        key=lambda f: rank.get(f.get("mimeType", ""), 2),
    )

    mode = get_output_mode(args)
    output = _format_file_list(files, mode)
    if output:
        print(output)
    elif mode not in ("json", "plain"):
        print("Empty folder.")

    return 0


def cmd_search(args, ctx) -> int:
    """Handler for `gdrive search`."""
    from gdrive.api.drive import search_files
    from gdrive.format import get_output_mode

    limit = getattr(args, "limit", 20)
    if limit < 1:
        raise GdriveError("--limit must be at least 1", exit_code=3)
    files = search_files(
        ctx, args.query,
        docs_only=getattr(args, "docs_only", False),
        limit=limit,
    )

    mode = get_output_mode(args)
    output = _format_file_list(files, mode)
    if output:
        print(output)
    elif mode not in ("json", "plain"):
        print("No results.")

    return 0


def cmd_read(args, ctx) -> int:
    """Handler for `gdrive read`."""
    doc_id = _resolve_id(args.doc)
    list_only = getattr(args, "list_tabs", False)
    tab = getattr(args, "tab", None)
    if tab is not None and tab.isdigit():
        tab = int(tab)

    from gdrive.api.docs import read_document

    result = read_document(ctx, doc_id, list_only=list_only, tab=tab)

    from gdrive.format import format_json, get_output_mode

    mode = get_output_mode(args)
    if mode == "json":
        if list_only:
            print(format_json(title=result["title"], tabs=result["tabs"]))
        else:
            print(format_json(**result))
        return 0

    if list_only:
        if mode == "verbose":
            print(f"Title: {result['title']}")
        if not result["tabs"] and mode != "plain":
            print("No tabs.")
        for t in result["tabs"]:
            print(f"{t['index']}\t{t['id']}\t{t['title']}")
        return 0

    if mode == "verbose":
        print(f"Title: {result['title']}")
        for t in result["tabs"]:
            print(f"  [{t['index']}] {t['title']}")
        print("─" * 60)
    content = result["content"]
    print(content, end="" if content.endswith("\n") else "\n")
    return 0


def _print_created(result: dict, mode: str, verb: str) -> None:
    from gdrive.format import format_json

    if mode == "json":
        print(format_json(**result))
    elif mode == "plain":
        print(f"id\t{result['id']}")
        print(f"url\t{result['url']}")
    elif mode == "verbose":
        if "title" in result:
            print(f"{verb}: {result['title']}")
        print(f"ID: {result['id']}")
        print(f"URL: {result['url']}")
    else:
        print(result["id"])


def cmd_create(args, ctx) -> int:
    """Handler for `gdrive create`."""
    content = _resolve_content(args)
    markdown = getattr(args, "markdown", False)

    folder_id = None
    folder = getattr(args, "folder", None)
    if folder:
        from gdrive.api.drive import resolve_folder

        folder_id = resolve_folder(ctx, folder if folder.startswith("/") else _resolve_id(folder))

    from gdrive.api.docs import create_document

    result = create_document(
        ctx, args.title, content=content, folder_id=folder_id, markdown=markdown,
    )

    from gdrive.format import get_output_mode

    _print_created(result, get_output_mode(args), "Created")
    return 0


def cmd_update(args, ctx) -> int:
    """Handler for `gdrive update`."""
    doc_id = _resolve_id(args.doc)
    content = _resolve_content(args)
    if not content:
        raise GdriveError(
            "no content: pass --content, --file, or pipe it on stdin",
            exit_code=3,
        )

    from gdrive.api.docs import replace_document_content

    result = replace_document_content(
        ctx, doc_id, content, markdown=getattr(args, "markdown", False),
    )

    from gdrive.format import get_output_mode

    mode = get_output_mode(args)
    if mode == "terse":
        print(f"OK updated {doc_id}")
    else:
        _print_created(result, mode, "Updated")
    return 0


def cmd_rename(args, ctx) -> int:
    """Handler for `gdrive rename`."""
    file_id = _resolve_id(args.file)

    from gdrive.api.drive import rename_file

    result = rename_file(ctx, file_id, args.name)

    from gdrive.format import format_json, get_output_mode

    mode = get_output_mode(args)
    if mode == "json":
        print(format_json(**result))
    elif mode == "plain":
        print(f"id\t{result['id']}")
        print(f"name\t{result['name']}")
    elif mode == "verbose":
        print(f"Renamed: {result['name']}")
        print(f"ID: {result['id']}")
        print(f"URL: {result['url']}")
    else:
        print(f"OK renamed to {result['name']}")
    return 0


def cmd_delete(args, ctx) -> int:
    """Handler for `gdrive delete`."""
    file_id = _resolve_id(args.file)

    from gdrive.util import confirm_destructive

    confirm_destructive(
        f"permanently delete {file_id}", force=getattr(args, "force", False),
    )

    from gdrive.api.drive import delete_file

    delete_file(ctx, file_id)

    from gdrive.format import format_json, get_output_mode

    mode = get_output_mode(args)
    if mode == "json":
        print(format_json(id=file_id, status="deleted"))
    elif mode == "plain":
        print(f"id\t{file_id}")
    else:
        print(f"OK deleted {file_id}")
    return 0


def _revision_author(rev: dict) -> str:
    user = rev.get("lastModifyingUser", {})
    return user.get("displayName") or user.get("emailAddress") or "unknown"


def cmd_revisions(args, ctx) -> int:
    """Handler for `gdrive revisions`."""
    doc_id = _resolve_id(args.doc)
    diff = getattr(args, "diff", None)
    export = getattr(args, "export", None)

    from gdrive.format import format_json, get_output_mode

    mode = get_output_mode(args)

    if diff:
        from gdrive.api.revisions import diff_revisions

        old_rev, new_rev = diff
        changes = diff_revisions(ctx, doc_id, old_rev, new_rev)
        if mode == "json":
            print(format_json(old=old_rev, new=new_rev, diff=changes))
        elif not changes.strip():
            print("No text differences found.")
        else:
            if mode == "verbose":
                print(f"Changes {old_rev} -> {new_rev}:")
            print(changes)
        return 0

    if export:
        from gdrive.api.revisions import get_revision_content

        content = get_revision_content(ctx, doc_id, export)
        if mode == "json":
            print(format_json(revision=export, content=content))
        else:
            print(content, end="" if content.endswith("\n") else "\n")
        return 0

    from gdrive.api.revisions import list_revisions

    revisions = list_revisions(ctx, doc_id)
    if mode == "json":
        print(format_json(revisions=revisions))
    elif not revisions:
        if mode != "plain":
            print("No revisions.")
    else:
        for rev in revisions:
            rid = rev.get("id", "")
            modified = rev.get("modifiedTime", "")
            author = _revision_author(rev)
            if mode == "plain":
                print(f"{rid}\t{modified}\t{author}")
            elif mode == "verbose":
                exportable = "yes" if rev.get("exportLinks") else "no"
                print(f"{rid}\t{modified}\t{author}\texport={exportable}")
            else:
                print(f"{rid}\t{modified[:16].replace('T', ' ')}\t{author}")
    return 0


def cmd_comments(args, ctx) -> int:
    """Handler for `gdrive comments`."""
    doc_id = _resolve_id(args.doc)

    from gdrive.api.comments import list_comments, unescape_quoted

    include_resolved = getattr(args, "all", False)
    comments = list_comments(ctx, doc_id, include_resolved=include_resolved)

    from gdrive.format import format_json, get_output_mode

    mode = get_output_mode(args)
    if mode == "json":
        print(format_json(comments=comments))
    elif mode == "plain":
        for c in comments:
            status = "resolved" if c.get("resolved", False) else "open"
            author = c.get("author", {})
            author_str = author.get("emailAddress") or author.get("displayName", "unknown")
            print(f"{c.get('id', '')}\t{status}\t{author_str}\t{c.get('content', '')}")
    elif not comments:
        print("No comments.")
    else:
        for c in comments:
            status = "resolved" if c.get("resolved", False) else "open"
            author = c.get("author", {})
            author_str = author.get("emailAddress") or author.get("displayName", "unknown")
            created = c.get("createdTime", "")
            date_str = created if mode == "verbose" else created[:10]
            print(f"#{c.get('id', '')} [{status}] {author_str} {date_str}")
            quoted = c.get("quotedFileContent", {}).get("value", "")
            if quoted:
                print(f'  on: "{unescape_quoted(quoted)}"')
            print(f'  "{c.get("content", "")}"')
            for r in c.get("replies", []):
                reply_content = r.get("content", "")
                if not reply_content:
                    continue  # action-only replies
                r_author = r.get("author", {})
                r_author_str = r_author.get("emailAddress") or r_author.get("displayName", "unknown")
                print(f'  -> {r_author_str}: "{reply_content}"')

    return 0


def cmd_reply(args, ctx) -> int:
    """Handler for `gdrive reply`."""
    doc_id = _resolve_id(args.doc)
    comment_id = args.comment_id

    text = args.text
    if getattr(args, "stdin", False):
        text = _read_stdin().strip()
    if not text:
        raise GdriveError(
            "no reply text: pass it as an argument or pipe it with --stdin",
            exit_code=3,
        )

    from gdrive.api.comments import create_reply

    result = create_reply(ctx, doc_id, comment_id, text)

    from gdrive.format import format_json, get_output_mode

    mode = get_output_mode(args)
    if mode == "json":
        print(format_json(commentId=comment_id, replyId=result.get("id", ""), status="created"))
    elif mode == "plain":
        print(f"commentId\t{comment_id}")
        print(f"replyId\t{result.get('id', '')}")
    else:
        print(f"OK reply on #{comment_id}")
    return 0


def cmd_resolve(args, ctx) -> int:
    """Handler for `gdrive resolve`."""
    doc_id = _resolve_id(args.doc)
    comment_id = args.comment_id

    from gdrive.api.comments import resolve_comment

    if not resolve_comment(ctx, doc_id, comment_id):
        raise GdriveError(
            f"could not resolve comment #{comment_id}: only the comment "
            "author or the file owner can resolve it",
        )

    from gdrive.format import format_json, get_output_mode

    mode = get_output_mode(args)
    if mode == "json":
        print(format_json(id=comment_id, status="resolved"))
    elif mode == "plain":
        print(f"id\t{comment_id}")
        print("status\tresolved")
    else:
        print(f"OK resolved comment #{comment_id}")
    return 0


def cmd_sheets_read(args, ctx) -> int:
    """Handler for `gdrive sheets-read`."""
    sheet_id = _resolve_id(args.spreadsheet)
    range_ = getattr(args, "range", None)

    from gdrive.format import format_json, format_table, get_output_mode

    mode = get_output_mode(args)

    if getattr(args, "objects", False):
        from gdrive.api.sheets import read_as_objects

        rows = read_as_objects(ctx, sheet_id, range_)
        if mode == "json":
            print(format_json(rows=rows))
        else:
            for row in rows:
                print("\t".join(f"{k}={v}" for k, v in row.items()))
        return 0

    from gdrive.api.sheets import read_values

    values = read_values(ctx, sheet_id, range_)
    if mode == "json":
        print(format_json(values=values))
    elif mode == "plain":
        for row in values:
            print("\t".join("" if c is None else str(c) for c in row))
    elif not values:
        print("No data.")
    else:
        print(format_table(values))
        if mode == "verbose":
            print(f"\n{len(values)} rows")
    return 0


def _print_updated(updated: dict, mode: str, verb: str) -> None:
    from gdrive.format import format_json

    cells = updated.get("updatedCells", 0)
    rng = updated.get("updatedRange", "")
    if mode == "json":
        print(format_json(updatedCells=cells, updatedRange=rng))
    elif mode == "plain":
        print(f"updatedCells\t{cells}")
        print(f"updatedRange\t{rng}")
    else:
        print(f"OK {verb} {cells} cells in {rng}")


def cmd_sheets_write(args, ctx) -> int:
    """Handler for `gdrive sheets-write`."""
    from gdrive.api.sheets import parse_values_json, write_values
    from gdrive.format import get_output_mode

    values = parse_values_json(args.data)
    sheet_id = _resolve_id(args.spreadsheet)
    updated = write_values(ctx, sheet_id, args.range, values)
    _print_updated(updated, get_output_mode(args), "updated")
    return 0


def cmd_sheets_append(args, ctx) -> int:
    """Handler for `gdrive sheets-append`."""
    from gdrive.api.sheets import append_rows, parse_values_json
    from gdrive.format import get_output_mode

    rows = parse_values_json(args.data)
    sheet_id = _resolve_id(args.spreadsheet)
    updated = append_rows(ctx, sheet_id, args.range, rows)
    _print_updated(updated, get_output_mode(args), "appended")
    return 0


def cmd_sheets_clear(args, ctx) -> int:
    """Handler for `gdrive sheets-clear`."""
    sheet_id = _resolve_id(args.spreadsheet)

    from gdrive.util import confirm_destructive

    confirm_destructive(
        f"clear {args.range} in {sheet_id}", force=getattr(args, "force", False),
    )

    from gdrive.api.sheets import clear_range

    cleared = clear_range(ctx, sheet_id, args.range)

    from gdrive.format import format_json, get_output_mode

    mode = get_output_mode(args)
    if mode == "json":
        print(format_json(clearedRange=cleared))
    elif mode == "plain":
        print(f"clearedRange\t{cleared}")
    else:
        print(f"OK cleared {cleared}")
    return 0


def build_parser() -> GdriveArgumentParser:
    """Build the CLI argument parser with all subcommands."""
    parser = GdriveArgumentParser(
        prog="gdrive",
        description="CLI for Google Drive, Docs & Sheets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=f"gdrive {__version__}",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Log API calls to stderr",
    )

    # Global output mode flags via a parent parser so they work
    # both before and after the subcommand name.
    output_parent = argparse.ArgumentParser(add_help=False)
    output_group = output_parent.add_mutually_exclusive_group()
    output_group.add_argument(
        "--json", action="store_true", default=argparse.SUPPRESS, help="JSON output",
    )
    output_group.add_argument(
        "--verbose", action="store_true", default=argparse.SUPPRESS,
        help="Detailed output",
    )
    output_group.add_argument(
        "--plain", action="store_true", default=argparse.SUPPRESS,
        help="Stable TSV output",
    )

    # Also add to the top-level parser for `gdrive --json <cmd>` form
    top_output_group = parser.add_mutually_exclusive_group()
    top_output_group.add_argument("--json", action="store_true", help="JSON output")
    top_output_group.add_argument(
        "--verbose", action="store_true", help="Detailed output"
    )
    top_output_group.add_argument(
        "--plain", action="store_true", help="Stable TSV output"
    )

    parser.add_argument(
        "--allow-commands",
        default=os.environ.get("GDRIVE_ALLOW_COMMANDS", ""),
        help="Comma-separated list of allowed subcommands",
    )

    sub = parser.add_subparsers(dest="command")

    # auth
    auth_p = sub.add_parser("auth", parents=[output_parent], help="Authenticate with Google")
    auth_p.add_argument(
        "--no-browser", action="store_true",
        help="Print the consent URL instead of opening a browser",
    )
    auth_p.set_defaults(func=cmd_auth)

    # list
    list_p = sub.add_parser("list", parents=[output_parent], help="List files in a folder")
    list_p.add_argument(
        "folder", nargs="?", default="root",
        help="Folder path (/A/B), folder ID or URL (default: root)",
    )
    list_p.set_defaults(func=cmd_list)

    # search
    search_p = sub.add_parser("search", parents=[output_parent], help="Search files by name")
    search_p.add_argument("query", help="Search term")
    search_p.add_argument("--docs-only", action="store_true", help="Only Google Docs")
    search_p.add_argument("--limit", type=int, default=20, help="Maximum results (default 20)")
    search_p.set_defaults(func=cmd_search)

    # read
    read_p = sub.add_parser("read", parents=[output_parent], help="Read a doc as plain text")
    read_p.add_argument("doc", help="Document ID or URL")
    read_tab_group = read_p.add_mutually_exclusive_group()
    read_tab_group.add_argument("--list-tabs", action="store_true", help="List tabs only")
    read_tab_group.add_argument("--tab", help="Tab title or 0-based index")
    read_p.set_defaults(func=cmd_read)

    # create
    create_p = sub.add_parser("create", parents=[output_parent], help="Create a new doc")
    create_p.add_argument("title", help="Document title")
    create_p.add_argument("--folder", help="Folder path (/A/B) or ID")
    create_content = create_p.add_mutually_exclusive_group()
    create_content.add_argument("--content", help="Initial content")
    create_content.add_argument("--file", help="Read initial content from file")
    create_p.add_argument(
        "--markdown", action="store_true",
        help="Format content from markdown (headings, bullets, bold, italic)",
    )
    create_p.set_defaults(func=cmd_create)

    # update
    update_p = sub.add_parser("update", parents=[output_parent], help="Replace a doc's content")
    update_p.add_argument("doc", help="Document ID or URL")
    update_content = update_p.add_mutually_exclusive_group()
    update_content.add_argument("--content", help="New content")
    update_content.add_argument("--file", help="Read new content from file")
    update_p.add_argument(
        "--markdown", action="store_true", help="Format content from markdown",
    )
    update_p.set_defaults(func=cmd_update)

    # rename
    rename_p = sub.add_parser("rename", parents=[output_parent], help="Rename a file")
    rename_p.add_argument("file", help="File ID or URL")
    rename_p.add_argument("name", help="New name")
    rename_p.set_defaults(func=cmd_rename)

    # delete
    delete_p = sub.add_parser("delete", parents=[output_parent], help="Permanently delete a file")
    delete_p.add_argument("file", help="File ID or URL")
    delete_p.add_argument("--force", action="store_true", help="Skip confirmation")
    delete_p.set_defaults(func=cmd_delete)

    # revisions
    rev_p = sub.add_parser("revisions", parents=[output_parent], help="List or diff revisions")
    rev_p.add_argument("doc", help="Document ID or URL")
    rev_mode = rev_p.add_mutually_exclusive_group()
    rev_mode.add_argument(
        "--diff", nargs=2, metavar=("OLD", "NEW"), help="Diff two revisions",
    )
    rev_mode.add_argument("--export", metavar="REV", help="Print a revision's text")
    rev_p.set_defaults(func=cmd_revisions)

    # comments
    comments_p = sub.add_parser("comments", parents=[output_parent], help="List comments on a file")
    comments_p.add_argument("doc", help="Document ID or URL")
    comments_p.add_argument(
        "--all", action="store_true", help="Include resolved comments",
    )
    comments_p.set_defaults(func=cmd_comments)

    # reply
    reply_p = sub.add_parser("reply", parents=[output_parent], help="Reply to a comment")
    reply_p.add_argument("doc", help="Document ID or URL")
    reply_p.add_argument("comment_id", help="Comment ID to reply to")
    reply_p.add_argument("text", nargs="?", default="", help="Reply text")
    reply_p.add_argument(
        "--stdin", action="store_true", help="Read reply text from stdin",
    )
    reply_p.set_defaults(func=cmd_reply)

    # resolve
    resolve_p = sub.add_parser("resolve", parents=[output_parent], help="Resolve a comment")
    resolve_p.add_argument("doc", help="Document ID or URL")
    resolve_p.add_argument("comment_id", help="Comment ID to resolve")
    resolve_p.set_defaults(func=cmd_resolve)

    # sheets-read
    sr_p = sub.add_parser("sheets-read", parents=[output_parent], help="Read spreadsheet values")
    sr_p.add_argument("spreadsheet", help="Spreadsheet ID or URL")
    sr_p.add_argument("range", nargs="?", help="A1 range (default: whole first sheet)")
    sr_p.add_argument(
        "--objects", action="store_true", help="Rows keyed by the header row",
    )
    sr_p.set_defaults(func=cmd_sheets_read)

    # sheets-write / sheets-append
    for name, func, help_text in (
        ("sheets-write", cmd_sheets_write, "Overwrite a range with values"),
        ("sheets-append", cmd_sheets_append, "Append rows to a range"),
    ):
        p = sub.add_parser(name, parents=[output_parent], help=help_text)
        p.add_argument("spreadsheet", help="Spreadsheet ID or URL")
        p.add_argument("range", help="A1 range, e.g. Sheet1!A1:C2")
        p.add_argument("data", help='JSON array of rows, e.g. \'[["a",1]]\'')
        p.set_defaults(func=func)

    # sheets-clear
    sc_p = sub.add_parser("sheets-clear", parents=[output_parent], help="Clear a range")
    sc_p.add_argument("spreadsheet", help="Spreadsheet ID or URL")
    sc_p.add_argument("range", help="A1 range")
    sc_p.add_argument("--force", action="store_true", help="Skip confirmation")
    sc_p.set_defaults(func=cmd_sheets_clear)

    return parser


def main() -> int:
    """Entry point for the gdrive CLI."""
    parser = build_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help(sys.stderr)
        return 3

    # Output flags may be split between the top-level and subcommand parsers
    output_flags = sum([
        getattr(args, "json", False),
        getattr(args, "verbose", False),
        getattr(args, "plain", False),
    ])
    if output_flags > 1:
        parser.error("--json, --verbose, and --plain are mutually exclusive")

    # Command allowlist enforcement
    allowed = getattr(args, "allow_commands", "")
    if allowed:
        allow_set = {c.strip().lower() for c in allowed.split(",") if c.strip()}
        if args.command.lower() not in allow_set:
            print(f"ERR: command not allowed: {args.command}", file=sys.stderr)
            return 3

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if not args.debug:
        logging.getLogger("googleapiclient").setLevel(logging.ERROR)

    from gdrive.api import ApiContext
    from gdrive.format import format_error

    try:
        with ApiContext() as ctx:
            return args.func(args, ctx)
    except AuthError as e:
        print(format_error(str(e)), file=sys.stderr)
        return 2
    except GdriveError as e:
        print(format_error(str(e)), file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print("ERR: interrupted", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"ERR: unexpected error: {e}", file=sys.stderr)
        return 1
