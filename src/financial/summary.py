"""
Summary Line Parser and Validator.

The summary line prints IML, Beer and grand totals as cases/bottles
pairs, but the generator glues each bottles figure to the next cases
figure:

    Total (Cases/Btls):18 / 0291 / 0309 / 0
                       |    |  |   |  |   |
                   IML c  IML b|  Beer b| Total b
                            Beer c   Total c

The two glued parts are split by trying every split point and keeping
the unique combination for which IML + Beer equals the grand total in
both cases and bottles. A fully separated form with six numbers is read
directly.

Author: ML Engineering Team
"""

import re
from typing import Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING

from src.utils.logger import get_logger
from src.utils.parse_context import ParseContext
from src.extractor.models import SUMMARY_BUCKET_BEER, SUMMARY_BUCKET_IML
from .models import SummaryTotals, SummaryValidation

if TYPE_CHECKING:
    from src.quantity.models import ResolvedLineItem

# Initialize module logger
logger = get_logger(__name__)

STAGE = "summary"

_NUMBER = re.compile(r"\d+")


class SummaryLineParser:
    """
    Decodes the body of a "Total (Cases/Btls)" line.

    Example:
        >>> SummaryLineParser().parse("18 / 0291 / 0309 / 0").to_dict()
        {'IML': {'cases': 18, 'bottles': 0}, 'Beer': {'cases': 291, 'bottles': 0},
         'Total': {'cases': 309, 'bottles': 0}}
    """

    def parse(
        self,
        body: str,
        context: Optional[ParseContext] = None,
        line: Optional[int] = None
    ) -> Optional[SummaryTotals]:
        """
        Parse a summary body.

        Args:
            body: Text after the "Total (Cases/Btls):" label.
            context: Parse context receiving warnings.
            line: Source line number.

        Returns:
            SummaryTotals, or None when the body cannot be decoded
            unambiguously.
        """
        numbers = _NUMBER.findall(body)

        if len(numbers) == 6:
            values = [int(n) for n in numbers]
            totals = SummaryTotals(*values, source_line=line)
            if (totals.iml_cases + totals.beer_cases != totals.total_cases
                    or totals.iml_bottles + totals.beer_bottles != totals.total_bottles):
                self._warn(context, f"Summary buckets do not add up to the grand total: '{body}'", line)
            return totals

        if len(numbers) == 4:
            return self._parse_glued(numbers, body, context, line)

        if len(numbers) == 2:
            return SummaryTotals(
                total_cases=int(numbers[0]),
                total_bottles=int(numbers[1]),
                source_line=line
            )

        self._warn(context, f"Unrecognized summary layout: '{body}'", line)
        return None

    def _parse_glued(
        self,
        parts: Sequence[str],
        body: str,
        context: Optional[ParseContext],
        line: Optional[int]
    ) -> Optional[SummaryTotals]:
        iml_cases = int(parts[0])
        total_bottles = int(parts[3])

        solutions: List[Tuple[int, int, int, int]] = []
        for iml_bottles, beer_cases in _splits(parts[1]):
            for beer_bottles, total_cases in _splits(parts[2]):
                if (iml_cases + beer_cases == total_cases
                        and iml_bottles + beer_bottles == total_bottles):
                    solutions.append((iml_bottles, beer_cases, beer_bottles, total_cases))

        unique = sorted(set(solutions))
        if len(unique) != 1:
            reason = "no" if not unique else "several"
            self._warn(context, f"Summary line has {reason} consistent readings: '{body}'", line)
            return None

        iml_bottles, beer_cases, beer_bottles, total_cases = unique[0]
        return SummaryTotals(
            iml_cases=iml_cases,
            iml_bottles=iml_bottles,
            beer_cases=beer_cases,
            beer_bottles=beer_bottles,
            total_cases=total_cases,
            total_bottles=total_bottles,
            source_line=line
        )

    @staticmethod
    def _warn(context: Optional[ParseContext], message: str, line: Optional[int]) -> None:
        if context is not None:
            context.warn(STAGE, message, line=line)
        else:
            logger.warning(message)


def _splits(digits: str) -> List[Tuple[int, int]]:
    return [(int(digits[:k]), int(digits[k:])) for k in range(1, len(digits))]


def validate_summary(
    items: Sequence['ResolvedLineItem'],
    summary: Optional[SummaryTotals]
) -> Optional[SummaryValidation]:
    """
    Compare resolved items with the printed summary.

    Only the buckets the summary actually prints are compared; each is
    compared on both cases and bottles.

    Args:
        items: Resolved line items.
        summary: Parsed summary, or None.

    Returns:
        SummaryValidation, or None when there is no summary.
    """
    if summary is None:
        return None

    actual: Dict[str, Dict[str, int]] = {}
    for bucket in (SUMMARY_BUCKET_IML, SUMMARY_BUCKET_BEER, "Total"):
        members = [i for i in items if bucket == "Total" or i.summary_bucket == bucket]
        actual[bucket] = {
            'cases': sum(i.cases for i in members),
            'bottles': sum(i.bottles for i in members),
            'units': sum(i.total_units for i in members),
        }

    expected = summary.to_dict()
    matched = all(
        actual[bucket]['cases'] == values['cases'] and actual[bucket]['bottles'] == values['bottles']
        for bucket, values in expected.items()
    )

    return SummaryValidation(
        matched=matched,
        expected=expected,
        actual={bucket: actual[bucket] for bucket in expected}
    )
