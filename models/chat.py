"""Conversation log data models."""

from dataclasses import dataclass, field

from models.enums import ChatRole, ChatScope


@dataclass
class ChatMessage:
    """A single message in a book-scope or chapter-scope conversation."""
    id: str = ""
    role: ChatRole = ChatRole.USER
    scope: ChatScope = ChatScope.BOOK
    content: str = ""
    created_at: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "role": self.role.value,
            "content": self.content,
            "createdAt": self.created_at,
            "scope": self.scope.value,
        }


@dataclass
class BookChats:
    """All conversations of a book: one book-wide log plus one log per chapter."""
    book: list[ChatMessage] = field(default_factory=list)
    chapters: dict[str, list[ChatMessage]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "book": [m.to_dict() for m in self.book],
            "chapters": {
                chapter_id: [m.to_dict() for m in messages]
                for chapter_id, messages in self.chapters.items()
            },
        }

    def copy(self) -> "BookChats":
        return BookChats(
            book=list(self.book),
            chapters={k: list(v) for k, v in self.chapters.items()},
        )
