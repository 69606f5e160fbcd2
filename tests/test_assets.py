"""Tests for cover images and export files."""

import pytest

from conftest import read_json
from config.exceptions import PreconditionError
from storage.assets import AssetStore, image_extension, sanitize_export_file_name


class TestNames:
    @pytest.mark.parametrize("source,expected", [
        ("/img/portada.JPG", "jpg"),
        ("/img/portada", "png"),
        ("/img/portada.webp", "webp"),
    ])
    def test_image_extension(self, source, expected):
        assert image_extension(source) == expected

    @pytest.mark.parametrize("name,fallback,expected", [
        ("Mi libro final.MD", "txt", "Mi-libro-final.md"),
        ("notas", "txt", "notas.txt"),
        ("  ", "md", "export.md"),
        ("../../etc/passwd", "txt", "------etc-passwd.txt"),
    ])
    def test_export_file_name(self, name, fallback, expected):
        assert sanitize_export_file_name(name, fallback) == expected


class TestCoverImages:
    @pytest.mark.asyncio
    async def test_set_and_clear_cover(self, store, books_dir, tmp_path):
        project = await store.metadata.create_book_project(str(books_dir), "Libro")
        source = tmp_path / "portada.PNG"
        source.write_bytes(b"\x89PNG")

        metadata = await store.assets.set_cover_image(project.path, project.metadata, str(source))
        root = books_dir / "libro"
        assert metadata.cover_image == "assets/cover.png"
        assert (root / "assets" / "cover.png").read_bytes() == b"\x89PNG"
        assert read_json(root / "book.json")["coverImage"] == "assets/cover.png"
        assert AssetStore.cover_absolute_path(project.path, metadata) == f"{project.path}/assets/cover.png"

        metadata = await store.assets.clear_cover_image(project.path, metadata)
        assert metadata.cover_image is None
        assert not (root / "assets" / "cover.png").exists()
        assert read_json(root / "book.json")["coverImage"] is None
        assert AssetStore.cover_absolute_path(project.path, metadata) is None

    @pytest.mark.asyncio
    async def test_back_cover(self, store, books_dir, tmp_path):
        project = await store.metadata.create_book_project(str(books_dir), "Libro")
        source = tmp_path / "contra.jpeg"
        source.write_bytes(b"jpeg")
        metadata = await store.assets.set_back_cover_image(project.path, project.metadata, str(source))
        assert metadata.back_cover_image == "assets/back-cover.jpeg"
        assert AssetStore.back_cover_absolute_path(project.path, metadata).endswith("assets/back-cover.jpeg")

        metadata = await store.assets.clear_back_cover_image(project.path, metadata)
        assert metadata.back_cover_image is None
        assert not (books_dir / "libro" / "assets" / "back-cover.jpeg").exists()
        assert read_json(books_dir / "libro" / "book.json")["backCoverImage"] is None

    @pytest.mark.asyncio
    async def test_missing_source_refused(self, store, books_dir, tmp_path):
        project = await store.metadata.create_book_project(str(books_dir), "Libro")
        with pytest.raises(PreconditionError):
            await store.assets.set_cover_image(project.path, project.metadata, str(tmp_path / "nada.png"))

    @pytest.mark.asyncio
    async def test_clear_when_file_already_gone(self, store, books_dir):
        project = await store.metadata.create_book_project(str(books_dir), "Libro")
        metadata = project.metadata.copy(cover_image="assets/cover.png")
        metadata = await store.assets.clear_cover_image(project.path, metadata)
        assert metadata.cover_image is None

    @pytest.mark.asyncio
    async def test_clear_never_deletes_outside_book(self, store, books_dir, tmp_path, caplog):
        project = await store.metadata.create_book_project(str(books_dir), "Libro")
        outside = tmp_path / "importante.png"
        outside.write_bytes(b"png")

        for reference in ("../../importante.png", str(outside)):
            metadata = project.metadata.copy(cover_image=reference)
            metadata = await store.assets.clear_cover_image(project.path, metadata)
            assert metadata.cover_image is None
            assert outside.exists()
        assert "outside the book folder" in caplog.text


class TestExports:
    @pytest.mark.asyncio
    async def test_text_export(self, tmp_path):
        path = await AssetStore().write_text_export(tmp_path, "borrador", "hola")
        assert path == str(tmp_path / "exports" / "borrador.txt")
        assert (tmp_path / "exports" / "borrador.txt").read_text(encoding="utf-8") == "hola"

    @pytest.mark.asyncio
    async def test_markdown_export(self, tmp_path):
        path = await AssetStore().write_markdown_export(tmp_path, "Libro completo", "# Titulo\n")
        assert path.endswith("Libro-completo.md")
