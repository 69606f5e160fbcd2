"""Tests for chapter version history."""

import pytest

from conftest import read_json, write_json
from storage.snapshot_store import parse_version


class TestParseVersion:
    @pytest.mark.parametrize("name,chapter_id,expected", [
        ("01_v1.json", "01", 1),
        ("01_v12.json", "01", 12),
        ("010_v1.json", "01", 0),
        ("01_v1.json", "010", 0),
        ("01_vx.json", "01", 0),
        ("01_v1.json.bak", "01", 0),
        ("a.b_v2.json", "a.b", 2),
        ("axb_v2.json", "a.b", 0),
    ])
    def test_parse(self, name, chapter_id, expected):
        assert parse_version(name, chapter_id) == expected


class TestSnapshots:
    @pytest.mark.asyncio
    async def test_three_snapshots_then_restore(self, store, books_dir):
        project = await store.metadata.create_book_project(str(books_dir), "Libro")
        root = project.path
        chapter = project.chapters["01"]
        for n in (1, 2, 3):
            chapter = await store.chapters.save_chapter(root, chapter.copy(content=f"<p>v{n}</p>"))
            snapshot = await store.snapshots.save_chapter_snapshot(root, chapter, f"paso {n}")
            assert snapshot.version == n

        versions_dir = books_dir / "libro" / "versions"
        assert sorted(p.name for p in versions_dir.iterdir()) == ["01_v1.json", "01_v2.json", "01_v3.json"]

        await store.chapters.save_chapter(root, chapter.copy(content="<p>perdido</p>"))
        restored = await store.snapshots.restore_last_snapshot(root, "01")
        assert restored.content == "<p>v3</p>"
        assert read_json(books_dir / "libro" / "chapters" / "01.json")["content"] == "<p>v3</p>"
        assert len(list(versions_dir.iterdir())) == 3

    @pytest.mark.asyncio
    async def test_snapshot_document_shape(self, store, books_dir):
        project = await store.metadata.create_book_project(str(books_dir), "Libro")
        chapter = project.chapters["01"].copy(content_json={"type": "doc"})
        await store.snapshots.save_chapter_snapshot(project.path, chapter, "hito", "Primer borrador")

        on_disk = read_json(books_dir / "libro" / "versions" / "01_v1.json")
        assert on_disk["chapterId"] == "01"
        assert on_disk["reason"] == "hito"
        assert on_disk["milestoneLabel"] == "Primer borrador"
        assert on_disk["chapter"]["contentJson"] is None

    @pytest.mark.asyncio
    async def test_next_version_follows_gaps(self, store, books_dir):
        project = await store.metadata.create_book_project(str(books_dir), "Libro")
        versions_dir = books_dir / "libro" / "versions"
        write_json(versions_dir / "01_v7.json", {"version": 7, "chapterId": "01", "chapter": {}})
        snapshot = await store.snapshots.save_chapter_snapshot(project.path, project.chapters["01"], "x")
        assert snapshot.version == 8

    @pytest.mark.asyncio
    async def test_other_chapters_do_not_count(self, store, books_dir):
        project = await store.metadata.create_book_project(str(books_dir), "Libro")
        versions_dir = books_dir / "libro" / "versions"
        write_json(versions_dir / "010_v5.json", {"version": 5, "chapterId": "010", "chapter": {}})
        snapshot = await store.snapshots.save_chapter_snapshot(project.path, project.chapters["01"], "x")
        assert snapshot.version == 1

    @pytest.mark.asyncio
    async def test_listing_ascending_and_skips_corrupt(self, store, books_dir):
        project = await store.metadata.create_book_project(str(books_dir), "Libro")
        versions_dir = books_dir / "libro" / "versions"
        write_json(versions_dir / "01_v10.json", {"version": 10, "chapterId": "01", "chapter": {"content": "<p>10</p>"}})
        write_json(versions_dir / "01_v2.json", {"version": 2, "chapterId": "01", "chapter": {"content": "<p>2</p>"}})
        (versions_dir / "01_v3.json").write_text("roto", encoding="utf-8")
        write_json(versions_dir / "01_v4.json", ["not", "an", "object"])
        (versions_dir / "notas.txt").write_text("x")

        snapshots = await store.snapshots.list_chapter_snapshots(project.path, "01")
        assert [s.version for s in snapshots] == [2, 10]
        assert snapshots[-1].chapter.content == "<p>10</p>"

    @pytest.mark.asyncio
    async def test_version_taken_from_file_name(self, store, books_dir):
        project = await store.metadata.create_book_project(str(books_dir), "Libro")
        write_json(books_dir / "libro" / "versions" / "01_v3.json",
                   {"version": 1, "chapterId": "01", "chapter": {}})
        snapshots = await store.snapshots.list_chapter_snapshots(project.path, "01")
        assert [s.version for s in snapshots] == [3]

    @pytest.mark.asyncio
    async def test_restore_without_snapshots(self, store, books_dir):
        project = await store.metadata.create_book_project(str(books_dir), "Libro")
        assert await store.snapshots.restore_last_snapshot(project.path, "01") is None

    @pytest.mark.asyncio
    async def test_missing_versions_dir(self, store, tmp_path):
        assert await store.snapshots.list_chapter_snapshots(tmp_path, "01") == []
