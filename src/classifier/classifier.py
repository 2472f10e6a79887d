"""
Line Classifier Module.

Tags every line of a RawDocument with a structural role by testing an
ordered list of LineGrammar objects. The first grammar that matches
wins; lines no grammar recognises are tagged UNCLASSIFIED and kept for
diagnostics (block product names live on such lines).

Before classification, financial labels that the text extractor broke
over several lines ("Invoice" / "Value:") are merged back into one line.

Author: ML Engineering Team
"""

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from config import get_config
from src.utils.logger import get_logger
from src.input_handler.document import DocumentLine, RawDocument
from .grammars import (
    AMOUNT_TOKEN,
    DEFAULT_GRAMMARS,
    FINANCIAL_LABELS,
    LABEL_FRAGMENT_PATTERN,
    LineGrammar,
    LineRole,
)

# Initialize module logger
logger = get_logger(__name__)

# A complete label, optionally followed by its amount
_FULL_LABEL_PATTERN = re.compile(
    r"^(?:" + "|".join(pattern for _, pattern in FINANCIAL_LABELS) + r")"
    rf"\s*:?\s*(?:{AMOUNT_TOKEN})?$",
    re.IGNORECASE
)


@dataclass(frozen=True)
class ClassifiedLine:
    """
    A document line with its role.

    Attributes:
        number: 1-based source line number.
        text: Cleaned line text.
        role: Assigned structural role.
        grammar: Name of the grammar that matched, None if unclassified.
        fields: Named groups captured by that grammar.
    """
    number: int
    text: str
    role: LineRole
    grammar: Optional[str] = None
    fields: Dict[str, str] = field(default_factory=dict, hash=False, compare=False)

    def to_dict(self) -> Dict[str, object]:
        return {
            'line': self.number,
            'text': self.text,
            'role': self.role.value,
            'grammar': self.grammar,
        }


@dataclass(frozen=True)
class ClassifiedDocument:
    """
    Result of classification: the document plus one ClassifiedLine per line.

    Attributes:
        document: Source document.
        lines: Classified lines in document order.
    """
    document: RawDocument
    lines: Tuple[ClassifiedLine, ...]

    def by_role(self, *roles: LineRole) -> List[ClassifiedLine]:
        """Return the lines tagged with any of the given roles, in order."""
        return [line for line in self.lines if line.role in roles]

    def role_counts(self) -> Dict[str, int]:
        counts = Counter(line.role.value for line in self.lines)
        return dict(sorted(counts.items()))

    def to_diagnostics(self) -> List[Dict[str, object]]:
        return [line.to_dict() for line in self.lines]


class LineClassifier:
    """
    Assigns a structural role to every line.

    Attributes:
        grammars: Ordered grammars; the first match wins.
        label_merge_depth: Max fragments joined into one financial label.

    Example:
        >>> classifier = LineClassifier()
        >>> classified = classifier.classify(RawDocument.from_text(text))
        >>> classified.role_counts()
        {'financial': 6, 'header': 3, 'product': 14, ...}
    """

    def __init__(
        self,
        grammars: Optional[Sequence[LineGrammar]] = None,
        label_merge_depth: Optional[int] = None
    ) -> None:
        self.grammars = tuple(grammars) if grammars is not None else DEFAULT_GRAMMARS
        self.label_merge_depth = label_merge_depth or get_config(
            "classifier.label_merge_depth", 5
        )

    def classify(self, document: RawDocument) -> ClassifiedDocument:
        """
        Classify every line of a document.

        Args:
            document: Extracted invoice text.

        Returns:
            ClassifiedDocument in source order.
        """
        merged = self.merge_label_fragments(document.lines)
        classified = tuple(self.classify_line(line) for line in merged)

        result = ClassifiedDocument(document=document, lines=classified)
        logger.info(f"Classified {len(classified)} lines: {result.role_counts()}")
        return result

    def classify_line(self, line: DocumentLine) -> ClassifiedLine:
        """
        Classify one line against the grammar list.

        Args:
            line: Cleaned document line.

        Returns:
            ClassifiedLine; UNCLASSIFIED when nothing matches.
        """
        for grammar in self.grammars:
            fields = grammar.match(line.text)
            if fields is not None:
                logger.debug(f"line {line.number} -> {grammar.name}: {line.text}")
                return ClassifiedLine(
                    number=line.number,
                    text=line.text,
                    role=grammar.role,
                    grammar=grammar.name,
                    fields=fields
                )

        return ClassifiedLine(number=line.number, text=line.text, role=LineRole.UNCLASSIFIED)

    def merge_label_fragments(self, lines: Sequence[DocumentLine]) -> List[DocumentLine]:
        """
        Re-join financial labels printed one or two words per line.

        A run of word-only lines is merged with the following lines (up
        to ``label_merge_depth`` lines in total) when the joined text is
        exactly one financial label, optionally followed by its amount.
        The shortest such run wins and keeps the first line's number.

        Args:
            lines: Cleaned document lines.

        Returns:
            New line list with fragments merged.
        """
        merged: List[DocumentLine] = []
        i = 0
        while i < len(lines):
            line = lines[i]
            span = self._fragment_span(lines, i)
            if span > 1:
                text = " ".join(l.text for l in lines[i:i + span])
                logger.debug(f"Merged label fragments at line {line.number}: {text}")
                merged.append(DocumentLine(number=line.number, text=text))
                i += span
            else:
                merged.append(line)
                i += 1
        return merged

    def _fragment_span(self, lines: Sequence[DocumentLine], start: int) -> int:
        first = lines[start].text
        if not LABEL_FRAGMENT_PATTERN.match(first) or _FULL_LABEL_PATTERN.match(first):
            return 1

        parts = [first]
        for offset in range(1, self.label_merge_depth):
            index = start + offset
            if index >= len(lines):
                break
            parts.append(lines[index].text)
            if _FULL_LABEL_PATTERN.match(" ".join(parts)):
                return offset + 1
            # Only the last fragment may carry anything but words
            if not LABEL_FRAGMENT_PATTERN.match(lines[index].text):
                break
        return 1
