"""Tests for book root discovery."""

import errno

import pytest

from conftest import write_json
from config.exceptions import BookNotFoundError, StorageAccessError
from storage.paths import (
    PathResolver,
    ScaffoldDetector,
    build_path_candidates,
    is_book_json_path,
    sanitize_incoming_path,
)


def _book(root, updated_at="2024-01-01T00:00:00.000Z", **extra):
    write_json(root / "book.json", {"title": root.name, "updatedAt": updated_at, **extra})
    return root


class TestPathCandidates:
    def test_trailing_slash_stripped(self):
        assert build_path_candidates("/books/libro/") == ["/books/libro"]

    def test_backslashes_normalized(self):
        assert "C:/Books/libro" in build_path_candidates("C:\\Books\\libro")

    def test_drive_root_kept(self):
        assert "C:/" in build_path_candidates("C:\\")

    def test_extended_length_prefix(self):
        assert "C:/Books/libro" in build_path_candidates("\\\\?\\C:\\Books\\libro")
        assert sanitize_incoming_path("//?/C:/Books") == "C:/Books"

    def test_file_uri_decoded(self):
        assert sanitize_incoming_path("file:///home/ana/Mi%20libro") == "/home/ana/Mi libro"

    def test_file_uri_with_drive(self):
        assert sanitize_incoming_path("file:///C:/Books/libro") == "C:/Books/libro"

    def test_book_json_parent_added(self):
        candidates = build_path_candidates("/books/libro/book.json")
        assert "/books/libro" in candidates
        assert "/books/libro/book.json" in candidates

    def test_is_book_json_path(self):
        assert is_book_json_path("C:\\x\\BOOK.JSON")
        assert not is_book_json_path("/x/mybook.json")

    def test_blank(self):
        assert build_path_candidates("  ") == []


class TestScaffoldDetector:
    def test_full_scaffold(self, tmp_path, make_scaffold):
        detector = ScaffoldDetector()
        make_scaffold(tmp_path)
        assert detector.is_scaffold(tmp_path)
        assert detector.is_book_directory(tmp_path)

    def test_partial_scaffold(self, tmp_path):
        (tmp_path / "chapters").mkdir()
        (tmp_path / "assets").mkdir()
        detector = ScaffoldDetector()
        assert not detector.is_scaffold(tmp_path)
        assert not detector.is_book_directory(tmp_path)

    def test_book_file_alone(self, tmp_path):
        _book(tmp_path)
        assert ScaffoldDetector().is_book_directory(tmp_path)

    def test_book_json_directory_is_not_a_file(self, tmp_path):
        (tmp_path / "book.json").mkdir()
        assert not ScaffoldDetector().has_book_file(tmp_path)

    def test_missing_path(self, tmp_path):
        assert not ScaffoldDetector().is_book_directory(tmp_path / "nope")


class TestResolveDirect:
    @pytest.mark.asyncio
    async def test_root_resolves_to_itself(self, tmp_path):
        root = _book(tmp_path / "libro")
        assert await PathResolver().resolve_book_directory(str(root)) == str(root)

    @pytest.mark.asyncio
    async def test_book_json_resolves_to_root(self, tmp_path):
        root = _book(tmp_path / "libro")
        assert await PathResolver().resolve_book_directory(str(root / "book.json")) == str(root)

    @pytest.mark.asyncio
    async def test_scaffold_without_book_json(self, tmp_path, make_scaffold):
        root = make_scaffold(tmp_path / "libro")
        assert await PathResolver().resolve_book_directory(str(root) + "/") == str(root)

    @pytest.mark.asyncio
    async def test_file_uri(self, tmp_path):
        root = _book(tmp_path / "libro")
        assert await PathResolver().resolve_book_directory(root.as_uri()) == str(root)


class TestResolveNested:
    def test_single_nested_book(self, tmp_path):
        root = _book(tmp_path / "escritos" / "2024" / "libro")
        assert PathResolver().resolve_sync(str(tmp_path)) == str(root)

    def test_immediate_child(self, tmp_path, make_scaffold):
        root = make_scaffold(tmp_path / "libro")
        (tmp_path / "notas").mkdir()
        assert PathResolver().resolve_sync(str(tmp_path)) == str(root)

    def test_most_recently_updated_wins(self, tmp_path, caplog):
        _book(tmp_path / "a", "2024-01-01T00:00:00.000Z")
        newest = _book(tmp_path / "b" / "deep", "2024-06-01T00:00:00.000Z")
        _book(tmp_path / "c", "2024-03-01T00:00:00.000Z")
        assert PathResolver().resolve_sync(str(tmp_path)) == str(newest)
        assert "most recently updated" in caplog.text

    def test_created_at_fallback(self, tmp_path):
        write_json(tmp_path / "a" / "book.json", {"createdAt": "2024-02-01T00:00:00.000Z"})
        write_json(tmp_path / "b" / "book.json", {"createdAt": "2023-02-01T00:00:00.000Z"})
        assert PathResolver().resolve_sync(str(tmp_path)) == str(tmp_path / "a")

    def test_ignored_directories_skipped(self, tmp_path):
        _book(tmp_path / "node_modules" / "pkg")
        _book(tmp_path / ".git" / "libro")
        with pytest.raises(BookNotFoundError):
            PathResolver().resolve_sync(str(tmp_path))

    def test_depth_bound(self, tmp_path):
        _book(tmp_path / "a" / "b" / "c")
        with pytest.raises(BookNotFoundError):
            PathResolver(max_depth=1).resolve_sync(str(tmp_path))
        assert PathResolver(max_depth=2).resolve_sync(str(tmp_path)) == str(tmp_path / "a" / "b" / "c")

    def test_directory_bound(self, tmp_path):
        _book(tmp_path / "a" / "b")
        with pytest.raises(BookNotFoundError):
            PathResolver(max_directories=1).resolve_sync(str(tmp_path))
        assert PathResolver(max_directories=2).resolve_sync(str(tmp_path)) == str(tmp_path / "a" / "b")


class TestResolveFailures:
    def test_missing_path_is_not_found(self, tmp_path):
        with pytest.raises(BookNotFoundError) as exc:
            PathResolver().resolve_sync(str(tmp_path / "nada"))
        assert exc.value.path == str(tmp_path / "nada")

    def test_plain_file_is_not_found(self, tmp_path):
        target = tmp_path / "notas.txt"
        target.write_text("x")
        with pytest.raises(BookNotFoundError):
            PathResolver().resolve_sync(str(target))

    def test_empty_folder_is_not_found(self, tmp_path):
        with pytest.raises(BookNotFoundError):
            PathResolver().resolve_sync(str(tmp_path))

    def test_access_error_reported_with_path(self, tmp_path):
        locked = tmp_path / "locked"
        locked.mkdir()

        class LockedDetector(ScaffoldDetector):
            def is_book_directory(self, path):
                if str(path).endswith("locked"):
                    raise PermissionError(errno.EACCES, "Permission denied")
                return super().is_book_directory(path)

        with pytest.raises(StorageAccessError) as exc:
            PathResolver(LockedDetector()).resolve_sync(str(tmp_path))
        assert exc.value.path == str(locked)
        assert "Permission denied" in exc.value.cause

    def test_access_error_ignored_when_a_book_is_found(self, tmp_path):
        (tmp_path / "locked").mkdir()
        root = _book(tmp_path / "libro")

        class LockedDetector(ScaffoldDetector):
            def is_book_directory(self, path):
                if str(path).endswith("locked"):
                    raise PermissionError(errno.EACCES, "Permission denied")
                return super().is_book_directory(path)

        assert PathResolver(LockedDetector()).resolve_sync(str(tmp_path)) == str(root)
