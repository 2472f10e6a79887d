"""
Quantity Disambiguation Engine.

Resolves each product line's quantity token into a (cases, bottles)
pair in four steps:

    1. enumerate every split point of the token
    2. drop readings with bottles >= pack quantity
    3. rank the rest (see candidates.py)
    4. when the invoice prints a cases/bottles summary, solve each
       summary bucket (IML, Beer) as a whole: if exactly one choice of
       readings reproduces the bucket's printed cases and bottles, every
       line in the bucket takes that reading with confidence 1.0

Lines the summary cannot pin down keep their best-ranked reading at the
default confidence. A line with no valid reading at all is set to 0/0,
confidence 0.0 and flagged for review.

Author: ML Engineering Team
"""

from typing import List, Optional, Sequence, TYPE_CHECKING

from config import get_config
from src.utils.logger import get_logger
from src.utils.parse_context import ParseContext
from src.extractor.models import ProductLineRaw, SUMMARY_BUCKET_BEER, SUMMARY_BUCKET_IML
from .candidates import QuantityCandidate, rank_splits
from .models import ResolutionMethod, ResolvedLineItem
from .solver import SolveStatus, solve_bucket

if TYPE_CHECKING:
    from src.financial.models import SummaryTotals

# Initialize module logger
logger = get_logger(__name__)

STAGE = "quantity"


class QuantityDisambiguationEngine:
    """
    Turns raw product lines into ResolvedLineItems.

    Attributes:
        canonical_bottle_digits: Conventional bottles-suffix length.
        default_confidence: Confidence of an unconfirmed best split.
        max_token_length: Longer tokens are treated as noise (fallback).
        summary_cross_check: Whether summary totals are used at all.

    Example:
        >>> engine = QuantityDisambiguationEngine()
        >>> engine.rank("1800", 12)[0].as_tuple()
        (180, 0)
    """

    def __init__(
        self,
        canonical_bottle_digits: Optional[int] = None,
        default_confidence: Optional[float] = None,
        max_token_length: Optional[int] = None,
        summary_cross_check: Optional[bool] = None
    ) -> None:
        self.canonical_bottle_digits = canonical_bottle_digits or get_config(
            "quantity.canonical_bottle_digits", 2
        )
        self.default_confidence = (
            default_confidence if default_confidence is not None
            else get_config("quantity.default_confidence", 0.6)
        )
        self.max_token_length = max_token_length or get_config("quantity.max_token_length", 10)
        self.summary_cross_check = (
            summary_cross_check if summary_cross_check is not None
            else get_config("quantity.summary_cross_check", True)
        )

    def rank(self, token: str, pack_quantity: int) -> List[QuantityCandidate]:
        """
        Valid readings of a token, best first.

        Args:
            token: Concatenated cases/bottles digits.
            pack_quantity: Bottles per case.

        Returns:
            Ranked candidates; empty when no reading is physically possible
            or the token is longer than ``max_token_length``.
        """
        if len(token) > self.max_token_length:
            return []
        return rank_splits(token, pack_quantity, self.canonical_bottle_digits)

    def candidates_for(
        self,
        raw: ProductLineRaw,
        context: Optional[ParseContext] = None
    ) -> List[QuantityCandidate]:
        """
        Readings for one product line.

        A line whose template prints bottles in their own column has
        exactly one reading; a bottles count of a full case or more is
        folded into cases with a warning.

        Args:
            raw: Product line.
            context: Parse context receiving warnings.

        Returns:
            Ranked candidates for the line.
        """
        if not raw.is_delimited:
            return self.rank(raw.quantity_token, raw.pack_quantity)

        if len(raw.quantity_token) > self.max_token_length:
            return []

        cases = int(raw.quantity_token)
        bottles = int(raw.bottles_token)
        if bottles >= raw.pack_quantity:
            folded_cases = cases + bottles // raw.pack_quantity
            folded_bottles = bottles % raw.pack_quantity
            if context is not None:
                context.warn(
                    STAGE,
                    f"{bottles} loose bottles is at least a full case of {raw.pack_quantity}; "
                    f"read as {folded_cases}c/{folded_bottles}b",
                    line=raw.source_line_number
                )
            cases, bottles = folded_cases, folded_bottles

        return [QuantityCandidate(cases=cases, bottles=bottles, split_index=len(raw.quantity_token), score=0)]

    def resolve_line(
        self,
        raw: ProductLineRaw,
        item_id: int = 1,
        context: Optional[ParseContext] = None
    ) -> ResolvedLineItem:
        """
        Resolve a single line without document-level information.

        Args:
            raw: Product line.
            item_id: Identifier to give the resolved item.
            context: Parse context receiving warnings.

        Returns:
            default-split item, or a fallback item when no reading survives.
        """
        return self._default_resolution(raw, self.candidates_for(raw, context), item_id, context)

    def resolve(
        self,
        raw_lines: Sequence[ProductLineRaw],
        summary: Optional['SummaryTotals'],
        context: ParseContext
    ) -> List[ResolvedLineItem]:
        """
        Resolve every product line of a document.

        Args:
            raw_lines: Product lines in item order.
            summary: Printed cases/bottles totals, if the invoice has them.
            context: Parse context receiving warnings and trace entries.

        Returns:
            One ResolvedLineItem per raw line, same order, item ids from 1.
        """
        candidate_lists = [self.candidates_for(raw, context) for raw in raw_lines]
        items = [
            self._default_resolution(raw, candidates, item_id, context)
            for item_id, (raw, candidates) in enumerate(zip(raw_lines, candidate_lists), 1)
        ]

        if summary is not None and self.summary_cross_check:
            for bucket in (SUMMARY_BUCKET_IML, SUMMARY_BUCKET_BEER):
                self._apply_summary(bucket, summary, raw_lines, candidate_lists, items, context)

        for item, candidates in zip(items, candidate_lists):
            context.record(STAGE, {
                'item_id': item.item_id,
                'line': item.line.source_line_number,
                'token': item.line.quantity_token,
                'pack_quantity': item.line.pack_quantity,
                'candidates': [[c.cases, c.bottles, c.score] for c in candidates],
                'cases': item.cases,
                'bottles': item.bottles,
                'method': item.resolution_method.value,
                'confidence': item.resolution_confidence,
            })

        methods = [item.resolution_method.value for item in items]
        logger.info(
            f"Resolved {len(items)} quantities: "
            + ", ".join(f"{m}={methods.count(m)}" for m in sorted(set(methods)))
        )
        return items

    def _default_resolution(
        self,
        raw: ProductLineRaw,
        candidates: List[QuantityCandidate],
        item_id: int,
        context: Optional[ParseContext]
    ) -> ResolvedLineItem:
        if not candidates:
            if context is not None:
                context.warn(
                    STAGE,
                    f"No valid cases/bottles reading of '{raw.quantity_token}' for pack of "
                    f"{raw.pack_quantity}; set to 0/0 for manual review",
                    line=raw.source_line_number
                )
            return ResolvedLineItem(
                item_id=item_id,
                line=raw,
                cases=0,
                bottles=0,
                resolution_confidence=0.0,
                resolution_method=ResolutionMethod.FALLBACK,
                needs_review=True
            )

        best = candidates[0]
        return ResolvedLineItem(
            item_id=item_id,
            line=raw,
            cases=best.cases,
            bottles=best.bottles,
            resolution_confidence=self.default_confidence,
            resolution_method=ResolutionMethod.DEFAULT_SPLIT
        )

    def _apply_summary(
        self,
        bucket: str,
        summary: 'SummaryTotals',
        raw_lines: Sequence[ProductLineRaw],
        candidate_lists: Sequence[List[QuantityCandidate]],
        items: List[ResolvedLineItem],
        context: ParseContext
    ) -> None:
        target = summary.bucket(bucket)
        if target is None:
            return

        indices = [i for i, raw in enumerate(raw_lines) if raw.summary_bucket == bucket]
        if not indices:
            if target != (0, 0):
                context.warn(
                    STAGE,
                    f"Summary lists {target[0]}c/{target[1]}b of {bucket} but no {bucket} lines were found"
                )
            return

        if any(not candidate_lists[i] for i in indices):
            context.warn(
                STAGE,
                f"{bucket} summary cross-check skipped: a line has no valid reading"
            )
            return

        solution = solve_bucket([candidate_lists[i] for i in indices], target[0], target[1])

        if solution.status is SolveStatus.UNIQUE:
            for index, choice in zip(indices, solution.choices):
                chosen = candidate_lists[index][choice]
                items[index] = ResolvedLineItem(
                    item_id=items[index].item_id,
                    line=raw_lines[index],
                    cases=chosen.cases,
                    bottles=chosen.bottles,
                    resolution_confidence=1.0,
                    resolution_method=ResolutionMethod.SUMMARY_EXACT
                )
            logger.info(f"{bucket} quantities pinned by summary ({len(indices)} lines)")
            return

        if solution.status is SolveStatus.AMBIGUOUS:
            reason = "several readings match the printed totals"
        else:
            reason = "no reading matches the printed totals"
        context.warn(
            STAGE,
            f"{bucket} summary cross-check inconclusive ({reason}: "
            f"{target[0]}c/{target[1]}b); keeping default splits"
        )
