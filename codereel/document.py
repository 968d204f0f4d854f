"""Immutable, line-indexed source text container."""

from collections.abc import Iterator


class Document:
    """Ordered sequence of source lines.

    A Document never changes after construction. Slicing produces a new
    Document that shares no mutable state with the original.

    Usage:
        doc = Document.from_text("a\\nb\\nc")
        doc.slice(1, 2).get_line(0)  # "b"

    """

    __slots__ = ("_lines",)

    def __init__(self, lines: tuple[str, ...] | list[str] = ()) -> None:
        self._lines: tuple[str, ...] = tuple(lines)

    @classmethod
    def from_text(cls, text: str) -> "Document":
        """Split text on line breaks into a Document.

        Args:
            text: Source text. "\\r\\n" line endings are normalized.

        Returns:
            A Document with one entry per line.

        """
        return cls(tuple(line.rstrip("\r") for line in text.split("\n")))

    @property
    def lines(self) -> tuple[str, ...]:
        return self._lines

    @property
    def line_count(self) -> int:
        return len(self._lines)

    @property
    def text(self) -> str:
        return "\n".join(self._lines)

    def get_line(self, index: int) -> str | None:
        """Return the line at ``index``, or None when out of range."""
        if 0 <= index < len(self._lines):
            return self._lines[index]
        return None

    def get_lines(self, start: int, end: int) -> list[str]:
        """Return the inclusive range ``[start, end]``, clamped to the document."""
        start = max(0, start)
        end = min(end, len(self._lines) - 1)
        if end < start:
            return []
        return list(self._lines[start:end + 1])

    def slice(self, start: int, end: int) -> "Document":
        """Return a new Document holding the inclusive range ``[start, end]``."""
        return Document(self.get_lines(start, end))

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self._lines)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return self._lines == other._lines

    def __hash__(self) -> int:
        return hash(self._lines)

    def __repr__(self) -> str:
        return f"Document(line_count={len(self._lines)})"
