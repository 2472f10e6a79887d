"""
Parse Result Data Class.

This module defines the structure returned for every parsed invoice:
header fields, financial fields, resolved line items with their brand
matches, the summary cross-check and all warnings.

Author: ML Engineering Team
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.utils.helpers import to_serializable
from src.financial.models import FinancialFields, SummaryTotals, SummaryValidation, TotalCheck
from src.quantity.models import ResolvedLineItem


@dataclass
class ParseDiagnostics:
    """
    Debugging side-channel of a parse; never part of the serialized result.

    Attributes:
        raw_text: Text the parser received.
        classification: Per-line role assignments.
        trace: Per-stage decision records.
    """
    raw_text: str = ""
    classification: List[Dict[str, Any]] = field(default_factory=list)
    trace: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)


@dataclass
class ParseResult:
    """
    Represents the outcome of parsing one ICDC invoice.

    ``success`` is False only when the document holds no product lines;
    every other problem is reported through ``warnings``.

    Attributes:
        success: Whether the document was accepted.
        invoice_number: ICDC number, if printed.
        invoice_date: ISO invoice date, if printed.
        financial: Monetary fields.
        items: Resolved line items, brand matches attached.
        summary_validation: Items versus the printed summary, or None.
        warnings: Every warning raised while parsing, in order.
        error: Reason for a rejected document.
        page_count: Page count reported by the text extractor.
        source_file: Source file name, when parsed from a file.
        summary: Decoded summary totals, or None.
        total_check: Printed total versus the component sum.
        diagnostics: Debugging side-channel (not serialized).

    Example:
        >>> result = parse_invoice(text, catalog_rows)
        >>> result.success, len(result.items)
        (True, 14)
        >>> print(result.to_json())
    """
    success: bool
    invoice_number: Optional[str] = None
    invoice_date: Optional[str] = None
    financial: FinancialFields = field(default_factory=FinancialFields)
    items: List[ResolvedLineItem] = field(default_factory=list)
    summary_validation: Optional[SummaryValidation] = None
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None
    page_count: Optional[int] = None
    source_file: Optional[str] = None
    summary: Optional[SummaryTotals] = None
    total_check: Optional[TotalCheck] = None
    diagnostics: Optional[ParseDiagnostics] = field(default=None, repr=False, compare=False)

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def review_items(self) -> List[ResolvedLineItem]:
        """Items flagged for manual review."""
        return [item for item in self.items if item.needs_review]

    @property
    def total_cases(self) -> int:
        return sum(item.cases for item in self.items)

    @property
    def total_bottles(self) -> int:
        return sum(item.bottles for item in self.items)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary format.

        Returns:
            JSON-ready dictionary (Decimals as strings, enums as values).
        """
        return to_serializable({
            'success': self.success,
            'invoice_number': self.invoice_number,
            'invoice_date': self.invoice_date,
            'financial': self.financial.to_dict(),
            'items': [item.to_dict() for item in self.items],
            'summary_validation': self.summary_validation.to_dict() if self.summary_validation else None,
            'warnings': list(self.warnings),
            'error': self.error,
            'page_count': self.page_count,
            'source_file': self.source_file,
            'summary': self.summary.to_dict() if self.summary else None,
            'total_check': self.total_check.to_dict() if self.total_check else None,
        })

    def to_json(self, indent: Optional[int] = 2) -> str:
        """
        Convert to JSON string.

        Keys are sorted and nothing time-dependent is included, so the
        same input always gives the same bytes.

        Args:
            indent: JSON indentation level.

        Returns:
            JSON string representation.
        """
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True, ensure_ascii=False)

    def __str__(self) -> str:
        status = "OK" if self.success else f"FAILED ({self.error})"
        return (
            f"ParseResult({self.invoice_number or '-'}: {status}, "
            f"items={self.item_count}, warnings={len(self.warnings)})"
        )
