"""
Per-document parse state.

A ParseContext is created for every invoice and threaded through the
pipeline stages. It accumulates warnings and an optional diagnostic
trace; nothing in it is shared between documents.

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


@dataclass
class ParseContext:
    """
    Mutable scan state for a single document.

    Attributes:
        warnings: Human-readable warnings, in the order they were raised.
        trace: Diagnostic records keyed by stage name; only filled when
            ``collect_trace`` is set.
        collect_trace: Whether stages should record diagnostics.
        source: Optional document label used in log messages.

    Example:
        >>> ctx = ParseContext()
        >>> ctx.warn("extractor", "Unknown pack type 'X', defaulting to G", line=14)
        >>> ctx.warnings
        ["[extractor] line 14: Unknown pack type 'X', defaulting to G"]
    """
    warnings: List[str] = field(default_factory=list)
    trace: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    collect_trace: bool = False
    source: Optional[str] = None

    def warn(self, stage: str, message: str, line: Optional[int] = None) -> None:
        """
        Record a warning for the caller and log it.

        Args:
            stage: Pipeline stage raising the warning.
            message: What went wrong and what was done about it.
            line: Source line number, when the warning concerns one line.
        """
        location = f" line {line}" if line is not None else ""
        text = f"[{stage}]{location}: {message}"
        self.warnings.append(text)
        logger.warning(f"{self.source or 'document'} {text}")

    def record(self, stage: str, entry: Dict[str, Any]) -> None:
        """Append a diagnostic entry for a stage when tracing is enabled."""
        if self.collect_trace:
            self.trace.setdefault(stage, []).append(entry)
