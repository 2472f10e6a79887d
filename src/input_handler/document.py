"""
Raw Document Data Class.

Immutable container for everything the parser needs from the text
extraction step: the original bytes, the extracted text, the page count
and the cleaned, numbered lines.

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from src.utils.helpers import clean_line


@dataclass(frozen=True)
class DocumentLine:
    """
    A single cleaned, non-empty line of document text.

    Attributes:
        number: 1-based line number in the extracted text (blank lines
            are counted, so numbers match the raw-text export).
        text: Line content after noise stripping.
    """
    number: int
    text: str


@dataclass(frozen=True)
class RawDocument:
    """
    Extracted invoice text, ready for classification.

    Attributes:
        text: Full extracted text as produced by the extractor.
        lines: Ordered cleaned lines; empty lines are dropped.
        page_count: Number of pages, when known.
        content: Original file bytes (empty when built from text).
        source: Where the document came from, for logs and exports.

    Example:
        >>> doc = RawDocument.from_text("ICDC Number: ICDC0123\\n\\n15016 (12)")
        >>> [line.number for line in doc.lines]
        [1, 3]
    """
    text: str
    lines: Tuple[DocumentLine, ...]
    page_count: Optional[int] = None
    content: bytes = field(default=b"", repr=False)
    source: Optional[str] = None

    @classmethod
    def from_text(
        cls,
        text: str,
        page_count: Optional[int] = None,
        content: bytes = b"",
        source: Optional[str] = None
    ) -> 'RawDocument':
        """
        Build a document from already-extracted text.

        Args:
            text: Raw text blob.
            page_count: Page count reported by the extractor.
            content: Original bytes, if available.
            source: Optional source label (file name).

        Returns:
            RawDocument with numbered, cleaned lines.
        """
        text = text or ""
        lines = []
        for number, raw_line in enumerate(text.splitlines(), 1):
            cleaned = clean_line(raw_line)
            if cleaned:
                lines.append(DocumentLine(number=number, text=cleaned))

        return cls(
            text=text,
            lines=tuple(lines),
            page_count=page_count,
            content=content,
            source=source
        )

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def __repr__(self) -> str:
        return (
            f"RawDocument(source={self.source!r}, "
            f"pages={self.page_count}, "
            f"lines={len(self.lines)})"
        )
