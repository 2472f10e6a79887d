"""
Resolved Line Item Data Class.

Author: ML Engineering Team
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, TYPE_CHECKING

from src.extractor.models import ProductLineRaw

if TYPE_CHECKING:
    from src.brand_resolution.models import BrandMatch


class ResolutionMethod(Enum):
    """How a line's cases/bottles pair was chosen."""
    SUMMARY_EXACT = "summary-exact"
    DEFAULT_SPLIT = "default-split"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ResolvedLineItem:
    """
    A product line with its quantity resolved.

    Instances are immutable; later stages derive new instances with
    ``dataclasses.replace`` (confidence upgrade, brand match).

    Attributes:
        item_id: 1-based position in the invoice's item list.
        line: Raw fields as printed.
        cases: Whole cases received.
        bottles: Loose bottles, ``0 <= bottles < pack_quantity``.
        resolution_confidence: 0.0 to 1.0; 1.0 only for summary-exact.
        resolution_method: How the split was chosen.
        needs_review: Set for fallback quantities and unmatched brands.
        brand_match: Catalog match, attached by brand resolution.
    """
    item_id: int
    line: ProductLineRaw
    cases: int
    bottles: int
    resolution_confidence: float
    resolution_method: ResolutionMethod
    needs_review: bool = False
    brand_match: Optional['BrandMatch'] = None

    def __post_init__(self):
        if self.cases < 0 or not 0 <= self.bottles < self.line.pack_quantity:
            raise ValueError(
                f"Invalid quantity {self.cases}c/{self.bottles}b for pack of "
                f"{self.line.pack_quantity}"
            )

    @property
    def total_units(self) -> int:
        return self.cases * self.line.pack_quantity + self.bottles

    @property
    def summary_bucket(self) -> str:
        return self.line.summary_bucket

    def to_dict(self) -> Dict[str, Any]:
        data = {'item_id': self.item_id}
        data.update(self.line.to_dict())
        data.update({
            'cases': self.cases,
            'bottles': self.bottles,
            'total_units': self.total_units,
            'resolution_confidence': self.resolution_confidence,
            'resolution_method': self.resolution_method.value,
            'needs_review': self.needs_review,
            'brand_match': self.brand_match.to_dict() if self.brand_match else None,
        })
        return data
