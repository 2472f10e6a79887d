"""
Financial Data Classes.

Author: ML Engineering Team
"""

from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from src.utils.helpers import to_serializable

# Components whose sum is the payable total
TOTAL_COMPONENTS = (
    'invoice_value',
    'mrp_rounding_off',
    'retail_excise_turnover_tax',
    'special_excise_cess',
    'tcs',
)


@dataclass(frozen=True)
class FinancialFields:
    """
    Monetary fields printed on an ICDC invoice.

    Every amount is optional: a field the invoice does not print is
    None, which is not the same as a printed zero.

    Attributes:
        invoice_value: "Invoice Value".
        mrp_rounding_off: "MRP Rounding Off".
        net_invoice_value: "Net Invoice Value" (invoice value plus rounding).
        retail_shop_excise_tax: "Retail Shop Excise Tax", printed in the
            header block; informational, not part of the total.
        retail_excise_turnover_tax: "Retail Shop Excise Turnover Tax"
            (or "Bar Excise Turnover Tax").
        special_excise_cess: "Special Excise Cess".
        tcs: "TCS".
        total_amount: Printed total, or the derived total when the
            invoice prints none.
        total_amount_derived: True when total_amount was computed.
    """
    invoice_value: Optional[Decimal] = None
    mrp_rounding_off: Optional[Decimal] = None
    net_invoice_value: Optional[Decimal] = None
    retail_shop_excise_tax: Optional[Decimal] = None
    retail_excise_turnover_tax: Optional[Decimal] = None
    special_excise_cess: Optional[Decimal] = None
    tcs: Optional[Decimal] = None
    total_amount: Optional[Decimal] = None
    total_amount_derived: bool = False

    def derived_total(self) -> Optional[Decimal]:
        """Sum of the printed total components, None if none is printed."""
        present = [getattr(self, name) for name in TOTAL_COMPONENTS if getattr(self, name) is not None]
        if not present:
            return None
        return sum(present, Decimal("0"))

    def to_dict(self) -> Dict[str, Any]:
        return to_serializable({f.name: getattr(self, f.name) for f in fields(self)})


@dataclass(frozen=True)
class TotalCheck:
    """
    Printed total versus the sum of its components.

    Attributes:
        printed: Printed total, if any.
        derived: Sum of the components that are present.
        difference: printed - derived, when both exist.
        within_tolerance: False only when both exist and disagree beyond
            the rounding tolerance.
    """
    printed: Optional[Decimal]
    derived: Optional[Decimal]
    difference: Optional[Decimal]
    within_tolerance: bool

    def to_dict(self) -> Dict[str, Any]:
        return to_serializable({
            'printed': self.printed,
            'derived': self.derived,
            'difference': self.difference,
            'within_tolerance': self.within_tolerance,
        })


@dataclass(frozen=True)
class SummaryTotals:
    """
    Cases/bottles totals from the "Total (Cases/Btls)" line.

    Any bucket may be missing when the line only prints part of it.
    """
    iml_cases: Optional[int] = None
    iml_bottles: Optional[int] = None
    beer_cases: Optional[int] = None
    beer_bottles: Optional[int] = None
    total_cases: Optional[int] = None
    total_bottles: Optional[int] = None
    source_line: Optional[int] = None

    def bucket(self, name: str) -> Optional[Tuple[int, int]]:
        """
        Totals for "IML", "Beer" or "Total".

        Returns:
            (cases, bottles), or None when the line does not print them.
        """
        prefix = name.lower()
        cases = getattr(self, f"{prefix}_cases", None)
        bottles = getattr(self, f"{prefix}_bottles", None)
        if cases is None or bottles is None:
            return None
        return (cases, bottles)

    def to_dict(self) -> Dict[str, Any]:
        return {
            name: {'cases': self.bucket(name)[0], 'bottles': self.bucket(name)[1]}
            for name in ("IML", "Beer", "Total")
            if self.bucket(name) is not None
        }


@dataclass(frozen=True)
class SummaryValidation:
    """
    Resolved items compared against the printed summary.

    Attributes:
        matched: True when every printed bucket equals the items' sums.
        expected: Printed {bucket: {cases, bottles}}.
        actual: Item sums {bucket: {cases, bottles, units}}.
    """
    matched: bool
    expected: Dict[str, Dict[str, int]]
    actual: Dict[str, Dict[str, int]]

    def to_dict(self) -> Dict[str, Any]:
        return {'matched': self.matched, 'expected': self.expected, 'actual': self.actual}
