"""Tests for gdrive.api.drive: Drive API wrapper functions with mocked service."""

from unittest.mock import MagicMock

import httplib2
import pytest
from googleapiclient.errors import HttpError

from gdrive.api.drive import (
    _escape_query_value,
    _translate_http_error,
    delete_file,
    find_folder_by_path,
    get_file_path,
    list_folder,
    move_to_folder,
    rename_file,
    resolve_folder,
    search_files,
)
from gdrive.util import AuthError, GdriveError


def _make_http_error(status: int, reason: str = "") -> HttpError:
    """Create a mock HttpError with the given status and reason."""
    resp = httplib2.Response({"status": str(status)})
    error = HttpError(resp, b"")
    error.reason = reason
    return error


def _ctx():
    return MagicMock()


class TestTranslateHttpError:
    def test_401_raises_auth_error(self):
        with pytest.raises(AuthError, match="Authentication expired"):
            _translate_http_error(_make_http_error(401), "abc123")

    def test_403(self):
        with pytest.raises(GdriveError, match="Permission denied: abc123"):
            _translate_http_error(_make_http_error(403), "abc123")

    def test_404(self):
        with pytest.raises(GdriveError, match="File not found: abc123"):
            _translate_http_error(_make_http_error(404), "abc123")

    def test_500(self):
        err = _make_http_error(500, reason="Internal Server Error")
        with pytest.raises(GdriveError, match=r"API error \(500\): Internal Server Error"):
            _translate_http_error(err, "abc123")


class TestEscapeQueryValue:
    def test_no_special_chars(self):
        assert _escape_query_value("hello") == "hello"

    def test_single_quote(self):
        assert _escape_query_value("it's") == "it\\'s"

    def test_backslash_escaped_first(self):
        assert _escape_query_value("a\\'b") == "a\\\\\\'b"


class TestListFolder:
    def test_paginates(self):
        ctx = _ctx()
        ctx.drive.files().list().execute.side_effect = [
            {"files": [{"id": "1"}], "nextPageToken": "tok"},
            {"files": [{"id": "2"}]},
        ]

        assert list_folder(ctx, "F1") == [{"id": "1"}, {"id": "2"}]

        calls = ctx.drive.files().list.call_args_list
        assert calls[-2].kwargs["pageToken"] is None
        assert calls[-1].kwargs["pageToken"] == "tok"
        assert calls[-1].kwargs["q"] == "'F1' in parents and trashed = false"
        assert calls[-1].kwargs["orderBy"] == "name"

    def test_defaults_to_root(self):
        ctx = _ctx()
        ctx.drive.files().list().execute.return_value = {}
        assert list_folder(ctx) == []
        assert ctx.drive.files().list.call_args.kwargs["q"].startswith("'root' in parents")

    def test_error_translated(self):
        ctx = _ctx()
        ctx.drive.files().list().execute.side_effect = _make_http_error(404)
        with pytest.raises(GdriveError, match="File not found: F1"):
            list_folder(ctx, "F1")


class TestFindFolderByPath:
    def test_walks_components(self):
        ctx = _ctx()
        ctx.drive.files().list().execute.side_effect = [
            {"files": [{"id": "A_ID", "name": "Team"}]},
            {"files": [{"id": "B_ID", "name": "Ads"}]},
        ]

        assert find_folder_by_path(ctx, "/Team/Ads/") == "B_ID"

        second_query = ctx.drive.files().list.call_args.kwargs["q"]
        assert second_query.startswith("'A_ID' in parents and name = 'Ads'")
        assert "mimeType = 'application/vnd.google-apps.folder'" in second_query

    def test_missing_component(self):
        ctx = _ctx()
        ctx.drive.files().list().execute.side_effect = [
            {"files": [{"id": "A_ID"}]},
            {"files": []},
        ]
        assert find_folder_by_path(ctx, "/Team/Nope") is None

    def test_root_path(self):
        ctx = _ctx()
        assert find_folder_by_path(ctx, "/") == "root"
        ctx.drive.files().list().execute.assert_not_called()

    def test_quotes_escaped(self):
        ctx = _ctx()
        ctx.drive.files().list().execute.return_value = {"files": [{"id": "X"}]}
        find_folder_by_path(ctx, "/Bob's")
        assert "name = 'Bob\\'s'" in ctx.drive.files().list.call_args.kwargs["q"]


class TestResolveFolder:
    def test_id_passthrough(self):
        ctx = _ctx()
        assert resolve_folder(ctx, "FOLDER_ID") == "FOLDER_ID"
        ctx.drive.files.assert_not_called()

    def test_path_found(self):
        ctx = _ctx()
        ctx.drive.files().list().execute.return_value = {"files": [{"id": "X"}]}
        assert resolve_folder(ctx, "/Docs") == "X"

    def test_path_not_found(self):
        ctx = _ctx()
        ctx.drive.files().list().execute.return_value = {"files": []}
        with pytest.raises(GdriveError, match="Folder not found: /Docs"):
            resolve_folder(ctx, "/Docs")


class TestSearchFiles:
    def test_query_and_limit(self):
        ctx = _ctx()
        ctx.drive.files().list().execute.return_value = {"files": [{"id": "1"}]}

        assert search_files(ctx, "budget", limit=5) == [{"id": "1"}]

        kwargs = ctx.drive.files().list.call_args.kwargs
        assert kwargs["q"] == "name contains 'budget' and trashed = false"
        assert kwargs["pageSize"] == 5
        assert kwargs["orderBy"] == "modifiedTime desc"

    def test_docs_only(self):
        ctx = _ctx()
        ctx.drive.files().list().execute.return_value = {}
        assert search_files(ctx, "x", docs_only=True) == []
        q = ctx.drive.files().list.call_args.kwargs["q"]
        assert q.endswith("and mimeType = 'application/vnd.google-apps.document'")

    def test_auth_error(self):
        ctx = _ctx()
        ctx.drive.files().list().execute.side_effect = _make_http_error(401)
        with pytest.raises(AuthError):
            search_files(ctx, "x")


class TestGetFilePath:
    def test_walks_parents_to_root(self):
        ctx = _ctx()
        ctx.drive.files().get().execute.side_effect = [
            {"name": "Doc", "parents": ["P1"]},
            {"name": "Team", "parents": ["root"]},
        ]
        assert get_file_path(ctx, "D1") == "/Team/Doc"

    def test_shared_file_without_parents(self):
        ctx = _ctx()
        ctx.drive.files().get().execute.return_value = {"name": "Shared"}
        assert get_file_path(ctx, "D1") == "/Shared"


class TestRenameFile:
    def test_returns_url(self):
        ctx = _ctx()
        ctx.drive.files().update().execute.return_value = {
            "id": "F1", "name": "New", "webViewLink": "https://view/F1",
        }
        assert rename_file(ctx, "F1", "New") == {
            "id": "F1", "name": "New", "url": "https://view/F1",
        }
        assert ctx.drive.files().update.call_args.kwargs["body"] == {"name": "New"}

    def test_url_fallback(self):
        ctx = _ctx()
        ctx.drive.files().update().execute.return_value = {"id": "F1", "name": "N"}
        assert rename_file(ctx, "F1", "N")["url"] == "https://drive.google.com/file/d/F1"

    def test_permission_denied(self):
        ctx = _ctx()
        ctx.drive.files().update().execute.side_effect = _make_http_error(403)
        with pytest.raises(GdriveError, match="Permission denied: F1"):
            rename_file(ctx, "F1", "N")


class TestDeleteAndMove:
    def test_delete(self):
        ctx = _ctx()
        delete_file(ctx, "F1")
        ctx.drive.files().delete.assert_called_with(fileId="F1", supportsAllDrives=True)

    def test_delete_not_found(self):
        ctx = _ctx()
        ctx.drive.files().delete().execute.side_effect = _make_http_error(404)
        with pytest.raises(GdriveError, match="File not found: F1"):
            delete_file(ctx, "F1")

    def test_move(self):
        ctx = _ctx()
        move_to_folder(ctx, "D1", "FOLDER")
        kwargs = ctx.drive.files().update.call_args.kwargs
        assert kwargs["fileId"] == "D1"
        assert kwargs["addParents"] == "FOLDER"
        assert kwargs["removeParents"] == "root"
