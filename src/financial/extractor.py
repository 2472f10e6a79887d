"""
Financial Extractor Module.

Finds the labelled monetary fields of an invoice. Templates print them
in three ways, all handled by one "label, then nearest number" rule:

    same line     Special Excise Cess:1,91,760.00
    split line    Retail Shop Excise Turnover Tax:
                  1,30,944.00
    block         Invoice Value:
                  MRP Rounding Off:
                  13,09,438.00
                  75,794.40

A label takes the first number after it on its own line. A label with
no number waits for the next standalone amount line; waiting labels are
served in the order they were printed, within a lookahead window.

Author: ML Engineering Team
"""

from collections import deque
from dataclasses import replace
from decimal import Decimal
from typing import Deque, Dict, Optional, Tuple

from config import get_config
from src.utils.logger import get_logger
from src.utils.parse_context import ParseContext
from src.postprocessor.normalizers import AmountNormalizer
from src.classifier.classifier import ClassifiedDocument
from src.classifier.grammars import FINANCIAL_LABEL_PATTERN, LineRole
from .models import FinancialFields, TotalCheck

# Initialize module logger
logger = get_logger(__name__)

STAGE = "financial"

# Roles whose lines may carry labels; header lines sometimes share a
# line with "Retail Shop Excise Tax"
_LABEL_ROLES = (LineRole.FINANCIAL, LineRole.HEADER)


class FinancialExtractor:
    """
    Extracts FinancialFields and checks the printed total.

    Attributes:
        lookahead_lines: How far (in classified lines) a label may sit
            above its amount.
        rounding_tolerance: Allowed |printed - derived| total difference.

    Example:
        >>> extractor = FinancialExtractor()
        >>> fields = extractor.extract(classified, context)
        >>> check = extractor.cross_validate(fields, context)
    """

    def __init__(
        self,
        lookahead_lines: Optional[int] = None,
        rounding_tolerance: Optional[float] = None
    ) -> None:
        self.lookahead_lines = lookahead_lines or get_config("financial.lookahead_lines", 12)
        tolerance = (
            rounding_tolerance if rounding_tolerance is not None
            else get_config("financial.rounding_tolerance", 1.0)
        )
        self.rounding_tolerance = Decimal(str(tolerance))
        self.amounts = AmountNormalizer()

    def extract(self, classified: ClassifiedDocument, context: ParseContext) -> FinancialFields:
        """
        Extract every labelled amount.

        Args:
            classified: Classified document.
            context: Parse context receiving warnings.

        Returns:
            FinancialFields; fields the invoice does not print stay None.
        """
        values: Dict[str, Decimal] = {}
        pending: Deque[Tuple[str, int, int]] = deque()  # (field, line index, line number)

        for index, line in enumerate(classified.lines):
            if line.role in _LABEL_ROLES:
                self._read_labels(line.text, index, line.number, values, pending)
            elif line.role is LineRole.AMOUNT:
                while pending and index - pending[0][1] > self.lookahead_lines:
                    name, _, number = pending.popleft()
                    context.warn(STAGE, f"No amount found for '{name}'", line=number)
                if pending:
                    name, _, number = pending.popleft()
                    values[name] = self.amounts.to_decimal(line.fields['amount'])
                    context.record(STAGE, {'field': name, 'label_line': number, 'amount_line': line.number})
                    logger.debug(f"{name} = {values[name]} (amount on line {line.number})")

        for name, _, number in pending:
            context.warn(STAGE, f"No amount found for '{name}'", line=number)

        fields = FinancialFields(**values)
        logger.info(f"Extracted {len(values)} financial fields")
        return fields

    def _read_labels(
        self,
        text: str,
        index: int,
        number: int,
        values: Dict[str, Decimal],
        pending: Deque[Tuple[str, int, int]]
    ) -> None:
        matches = list(FINANCIAL_LABEL_PATTERN.finditer(text))
        for position, match in enumerate(matches):
            name = match.lastgroup
            if name in values or any(p[0] == name for p in pending):
                logger.debug(f"Repeated label '{name}' on line {number} ignored")
                continue

            end = matches[position + 1].start() if position + 1 < len(matches) else len(text)
            amount = self.amounts.find_amount(text[match.end():end])
            if amount is not None:
                values[name] = amount
                logger.debug(f"{name} = {amount} (line {number})")
            else:
                pending.append((name, index, number))

    def cross_validate(self, fields: FinancialFields, context: ParseContext) -> Tuple[FinancialFields, TotalCheck]:
        """
        Compare the printed total with the sum of its components.

        A disagreement beyond the rounding tolerance is a warning; the
        printed total is kept. Net Invoice Value is checked the same way
        against Invoice Value plus MRP Rounding Off when all three are
        printed. When no total is printed the derived sum
        becomes the total and is flagged as derived.

        Args:
            fields: Extracted fields.
            context: Parse context receiving warnings.

        Returns:
            Tuple of (possibly completed fields, TotalCheck).
        """
        self._check_net_value(fields, context)
        derived = fields.derived_total()
        printed = fields.total_amount if not fields.total_amount_derived else None

        if printed is None:
            check = TotalCheck(printed=None, derived=derived, difference=None, within_tolerance=True)
            if derived is not None:
                fields = replace(fields, total_amount=derived, total_amount_derived=True)
            return fields, check

        if derived is None:
            return fields, TotalCheck(printed=printed, derived=None, difference=None, within_tolerance=True)

        difference = printed - derived
        within = abs(difference) <= self.rounding_tolerance
        if not within:
            context.warn(
                STAGE,
                f"Printed total {printed} differs from component sum {derived} by {difference}; "
                f"printed total kept"
            )
        return fields, TotalCheck(printed=printed, derived=derived, difference=difference, within_tolerance=within)

    def _check_net_value(self, fields: FinancialFields, context: ParseContext) -> None:
        # Net Invoice Value is printed as Invoice Value plus MRP Rounding Off
        parts = (fields.net_invoice_value, fields.invoice_value, fields.mrp_rounding_off)
        if any(part is None for part in parts):
            return
        expected = fields.invoice_value + fields.mrp_rounding_off
        difference = fields.net_invoice_value - expected
        if abs(difference) > self.rounding_tolerance:
            context.warn(
                STAGE,
                f"Net invoice value {fields.net_invoice_value} differs from invoice value plus "
                f"MRP rounding {expected} by {difference}"
            )
