"""
Brand Resolution Engine.

Links each resolved line item to a catalog record:

    1. exact   - a single record with the same brand number, size, pack
                 quantity and pack type; confidence 100
    2. fuzzy   - records of the same brand number within the size
                 tolerance; confidence falls linearly from 100 at equal
                 size to the floor at the tolerance edge. Closest size
                 wins, then highest standard MRP, then pack agreement,
                 then lowest catalog id
    3. none    - nothing usable; the item is kept and flagged for review

Resolution is a pure function of (item, catalog snapshot).

Author: ML Engineering Team
"""

from dataclasses import replace
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from config import get_config
from src.utils.logger import get_logger
from src.utils.parse_context import ParseContext
from src.quantity.models import ResolvedLineItem
from .catalog import BrandCatalog
from .models import BrandMatch, MasterBrandRecord, MatchMethod

# Initialize module logger
logger = get_logger(__name__)

STAGE = "brand"


class BrandResolver:
    """
    Matches line items against a catalog snapshot.

    Attributes:
        size_tolerance_ml: Max size difference for a fuzzy match.
        confidence_floor: Fuzzy confidence at the tolerance edge.

    Example:
        >>> resolver = BrandResolver(size_tolerance_ml=10, confidence_floor=60)
        >>> match = resolver.resolve(item, catalog)
        >>> match.method, match.confidence
        (<MatchMethod.FUZZY: 'fuzzy'>, 80.0)
    """

    def __init__(
        self,
        size_tolerance_ml: Optional[int] = None,
        confidence_floor: Optional[float] = None
    ) -> None:
        self.size_tolerance_ml = (
            size_tolerance_ml if size_tolerance_ml is not None
            else get_config("brand_resolution.size_tolerance_ml", 10)
        )
        self.confidence_floor = (
            confidence_floor if confidence_floor is not None
            else get_config("brand_resolution.confidence_floor", 60)
        )

    def resolve(
        self,
        item: ResolvedLineItem,
        catalog: BrandCatalog,
        context: Optional[ParseContext] = None
    ) -> BrandMatch:
        """
        Resolve one item.

        Args:
            item: Resolved line item.
            catalog: Catalog snapshot.
            context: Parse context receiving warnings.

        Returns:
            BrandMatch for the item.
        """
        line = item.line

        exact = catalog.exact(line.catalog_key)
        if len(exact) == 1:
            record = exact[0]
            return BrandMatch(
                resolved_line_item_id=item.item_id,
                master_brand_id=record.id,
                confidence=100.0,
                method=MatchMethod.EXACT,
                brand_name=record.brand_name,
                size_difference_ml=0
            )
        if len(exact) > 1 and context is not None:
            context.warn(
                STAGE,
                f"Catalog has {len(exact)} records for brand {line.brand_number} "
                f"{line.size_ml}ml {line.pack_type.value}{line.pack_quantity}; using fuzzy ranking",
                line=line.source_line_number
            )

        candidates = [
            record for record in catalog.for_brand(line.brand_number)
            if abs(record.size_ml - line.size_ml) <= self.size_tolerance_ml
        ]
        if candidates:
            best = min(candidates, key=lambda record: self._rank_key(record, item))
            difference = abs(best.size_ml - line.size_ml)
            return BrandMatch(
                resolved_line_item_id=item.item_id,
                master_brand_id=best.id,
                confidence=self.fuzzy_confidence(difference),
                method=MatchMethod.FUZZY,
                brand_name=best.brand_name,
                size_difference_ml=difference
            )

        if context is not None:
            context.warn(
                STAGE,
                f"No catalog match for brand {line.brand_number} {line.size_ml}ml; left for manual linking",
                line=line.source_line_number
            )
        return BrandMatch(
            resolved_line_item_id=item.item_id,
            master_brand_id=None,
            confidence=0.0,
            method=MatchMethod.NONE
        )

    def resolve_all(
        self,
        items: Sequence[ResolvedLineItem],
        catalog: BrandCatalog,
        context: Optional[ParseContext] = None
    ) -> List[ResolvedLineItem]:
        """
        Attach a BrandMatch to every item.

        Items without a match are flagged ``needs_review``.

        Returns:
            New item list; the input items are not modified.
        """
        resolved = []
        for item in items:
            match = self.resolve(item, catalog, context)
            needs_review = item.needs_review or match.method is MatchMethod.NONE
            resolved.append(replace(item, brand_match=match, needs_review=needs_review))

        methods = [item.brand_match.method.value for item in resolved]
        logger.info(
            f"Brand resolution: exact={methods.count('exact')}, "
            f"fuzzy={methods.count('fuzzy')}, none={methods.count('none')}"
        )
        return resolved

    def fuzzy_confidence(self, size_difference_ml: int) -> float:
        """
        Linear confidence for a size difference inside the tolerance.

        Example:
            >>> BrandResolver(10, 60).fuzzy_confidence(5)
            80.0
        """
        if self.size_tolerance_ml <= 0:
            return 100.0
        drop = (100 - self.confidence_floor) * size_difference_ml / self.size_tolerance_ml
        return round(100 - drop, 2)

    @staticmethod
    def _rank_key(record: MasterBrandRecord, item: ResolvedLineItem) -> Tuple:
        line = item.line
        pack_disagreement = (
            (record.pack_quantity != line.pack_quantity)
            + (record.pack_type != line.pack_type.value)
        )
        mrp = record.standard_mrp if record.standard_mrp is not None else Decimal("-1")
        return (abs(record.size_ml - line.size_ml), -mrp, pack_disagreement, str(record.id))
