"""Tests for chat log reconciliation between the legacy and per-file shapes."""

import pytest

from conftest import read_json, write_json
from models.chat import BookChats, ChatMessage
from models.enums import ChatRole, ChatScope
from models.schema import decode_book_metadata
from storage.chat_store import ChatStore

M1 = {"id": "m1", "role": "assistant", "scope": "chapter", "content": "Hola",
      "createdAt": "2023-01-01T00:00:00.000Z"}


def _message(message_id: str, content: str, scope=ChatScope.CHAPTER) -> ChatMessage:
    return ChatMessage(id=message_id, role=ChatRole.USER, scope=scope, content=content,
                       created_at="2024-01-01T00:00:00.000Z")


class TestLegacyReconciliation:
    @pytest.mark.asyncio
    async def test_legacy_then_per_file(self, tmp_path):
        chats = ChatStore()
        write_json(tmp_path / "book.json", {"title": "Libro", "chapterOrder": ["01"],
                                            "chats": {"book": [], "chapters": {"01": [M1]}}})
        metadata = decode_book_metadata(read_json(tmp_path / "book.json"))
        assert not (tmp_path / "chats").exists()

        loaded = await chats.load_chats_from_disk(tmp_path, metadata.chapter_order, metadata.chats)
        assert [m.id for m in loaded.chapters["01"]] == ["m1"]

        await chats.update_book_chats(tmp_path, metadata, loaded)
        on_disk = read_json(tmp_path / "book.json")
        assert "chats" not in on_disk

        fresh = decode_book_metadata(on_disk)
        assert fresh.chats.chapters == {}
        reloaded = await chats.load_chats_from_disk(tmp_path, fresh.chapter_order, fresh.chats)
        assert [(m.id, m.content) for m in reloaded.chapters["01"]] == [("m1", "Hola")]
        assert read_json(tmp_path / "chats" / "01.json")[0]["id"] == "m1"

    @pytest.mark.asyncio
    async def test_files_override_legacy(self, tmp_path):
        write_json(tmp_path / "chats" / "01.json", [{"id": "new", "content": "Nuevo"}])
        write_json(tmp_path / "chats" / "book.json", [{"id": "b1", "content": "Libro"}])
        legacy = {"book": [{"id": "old-b", "content": "Viejo"}], "chapters": {"01": [M1]}}

        loaded = await ChatStore().load_chats_from_disk(tmp_path, ["01"], legacy)
        assert [m.id for m in loaded.chapters["01"]] == ["new"]
        assert [m.id for m in loaded.book] == ["b1"]
        assert loaded.book[0].scope == ChatScope.BOOK

    @pytest.mark.asyncio
    async def test_corrupt_file_keeps_legacy(self, tmp_path, caplog):
        (tmp_path / "chats").mkdir()
        (tmp_path / "chats" / "01.json").write_text("[{", encoding="utf-8")
        (tmp_path / "chats" / "book.json").write_text("", encoding="utf-8")
        legacy = {"book": [{"id": "b0", "content": "Plan"}], "chapters": {"01": [M1]}}

        loaded = await ChatStore().load_chats_from_disk(tmp_path, ["01"], legacy)
        assert [m.id for m in loaded.chapters["01"]] == ["m1"]
        assert [m.id for m in loaded.book] == ["b0"]
        assert "legacy" in caplog.text

    @pytest.mark.asyncio
    async def test_orphan_chat_files_adopted(self, tmp_path):
        write_json(tmp_path / "chats" / "07.json", [{"id": "x", "content": "Perdido"}])
        (tmp_path / "chats" / "08.json").write_text("roto", encoding="utf-8")

        loaded = await ChatStore().load_chats_from_disk(tmp_path, ["01"])
        assert [m.content for m in loaded.chapters["07"]] == ["Perdido"]
        assert "08" not in loaded.chapters

    @pytest.mark.asyncio
    async def test_no_chats_anywhere(self, tmp_path):
        loaded = await ChatStore().load_chats_from_disk(tmp_path, ["01"], None)
        assert loaded.book == []
        assert loaded.chapters == {}


class TestSaveChats:
    @pytest.mark.asyncio
    async def test_writes_every_scope(self, tmp_path):
        chats = BookChats(
            book=[_message("b", "General", ChatScope.BOOK)],
            chapters={"01": [_message("c", "Uno")], "02": []},
        )
        await ChatStore().save_chats_to_disk(tmp_path, chats)
        assert read_json(tmp_path / "chats" / "book.json")[0]["content"] == "General"
        assert read_json(tmp_path / "chats" / "01.json")[0]["scope"] == "chapter"
        assert read_json(tmp_path / "chats" / "02.json") == []

    @pytest.mark.asyncio
    async def test_stray_files_pruned(self, tmp_path):
        write_json(tmp_path / "chats" / "05.json", [{"content": "viejo"}])
        (tmp_path / "chats" / "notas.txt").write_text("no es json")

        await ChatStore().save_chats_to_disk(tmp_path, BookChats(chapters={"01": []}))
        remaining = sorted(p.name for p in (tmp_path / "chats").iterdir())
        assert remaining == ["01.json", "book.json", "notas.txt"]

    @pytest.mark.asyncio
    async def test_messages_normalized_on_save(self, tmp_path):
        chats = BookChats(chapters={"01": [_message("", "  "), _message("", "texto")]})
        saved = await ChatStore().save_chats_to_disk(tmp_path, chats)
        assert len(saved.chapters["01"]) == 1
        assert saved.chapters["01"][0].id.startswith("msg_")

    @pytest.mark.asyncio
    async def test_chapter_named_book_does_not_replace_book_chat(self, tmp_path, caplog):
        chats = BookChats(
            book=[_message("b", "General", ChatScope.BOOK)],
            chapters={"book": [_message("c", "Capitulo")], "Book": [_message("d", "Otro")]},
        )
        await ChatStore().save_chats_to_disk(tmp_path, chats)
        book_log = read_json(tmp_path / "chats" / "book.json")
        assert [m["content"] for m in book_log] == ["General"]
        assert "would replace the book chat" in caplog.text

        loaded = await ChatStore().load_chats_from_disk(tmp_path, ["book"])
        assert "book" not in loaded.chapters
        assert [m.content for m in loaded.book] == ["General"]
