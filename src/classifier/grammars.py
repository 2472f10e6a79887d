"""
Line Grammars Module.

Each known line shape on an ICDC invoice is described by one LineGrammar:
a name, the structural role it assigns and an anchored regular
expression with named groups. DEFAULT_GRAMMARS lists them in priority
order; the classifier stops at the first grammar that matches.

Product grammars:
    table           1 5016 (12) KING FISHER PREMIUM LAGER BEER Beer G 12 / 650 ml 100 0
    compact_packed  15016 (12)KING FISHER PREMIUM LAGER BEERBeerG12 / 650 ml1000
    compact         15016KING FISHER PREMIUM LAGER BEERBeerG12 / 650 ml1000
    block_header    15016 (12)            (name lines and a detail line follow)
    block_detail    BeerG12/650ml6800     or     Beer G 12/650ml 680 0

Author: ML Engineering Team
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Pattern, Tuple


class LineRole(Enum):
    """Structural role of a document line."""
    HEADER = "header"
    PRODUCT = "product"
    BLOCK_HEADER = "block_header"
    BLOCK_DETAIL = "block_detail"
    SUMMARY = "summary"
    FINANCIAL = "financial"
    AMOUNT = "amount"
    FOOTER = "footer"
    UNCLASSIFIED = "unclassified"


# Category tokens as printed on compact lines. Case-sensitive on purpose:
# product names are printed in capitals ("... LAGER BEER") while the
# category column is title case ("Beer").
CATEGORY_TOKEN = (
    r"Beer|IMFL|IML|Duty\s*Paid|Duty\s*Free|DUTY_PAID|DUTY_FREE|DUTY\s*PAID|DUTY\s*FREE"
    r"|Wine|RTD|Feni"
)

# Financial labels. Longer labels come first so that "Net Invoice Value"
# is never read as "Invoice Value" and "Retail Shop Excise Turnover Tax"
# never as "Retail Shop Excise Tax".
FINANCIAL_LABELS: Tuple[Tuple[str, str], ...] = (
    ("net_invoice_value", r"Net\s*Invoice\s*Value"),
    ("invoice_value", r"Invoice\s*Value"),
    ("mrp_rounding_off", r"MRP\s*Rounding\s*Off"),
    ("retail_excise_turnover_tax", r"(?:(?:Retail\s*Shop|Retail|Bar)\s*)?Excise\s*Turnover\s*Tax"),
    ("retail_shop_excise_tax", r"Retail\s*Shop\s*Excise\s*Tax"),
    ("special_excise_cess", r"Special\s*Excise\s*Cess"),
    ("tcs", r"\bTCS\b"),
    ("total_amount", r"Total\s*Amount|Grand\s*Total|Total\s*Payable"),
)

FINANCIAL_LABEL_PATTERN = re.compile(
    "|".join(f"(?P<{name}>{pattern})" for name, pattern in FINANCIAL_LABELS),
    re.IGNORECASE
)

AMOUNT_TOKEN = r"-?(?:Rs\.?\s*)?(?:\d{1,3}(?:,\d{2,3})+|\d+)\.\d{1,2}"

# Lines consisting of label words only, candidates for label merging
LABEL_FRAGMENT_PATTERN = re.compile(r"^[A-Za-z&.]+(?:\s+[A-Za-z&.]+)*\s*:?$")


@dataclass(frozen=True)
class LineGrammar:
    """
    One recognisable line shape.

    Attributes:
        name: Stable identifier, reported in diagnostics.
        role: Role assigned to lines this grammar matches.
        pattern: Anchored compiled expression with named groups.

    Example:
        >>> grammar = DEFAULT_GRAMMARS[0]
        >>> grammar.match("Total (Cases/Btls):18 / 0291 / 0309 / 0")
        {'body': '18 / 0291 / 0309 / 0'}
    """
    name: str
    role: LineRole
    pattern: Pattern

    def match(self, line: str) -> Optional[Dict[str, str]]:
        """
        Match a cleaned line.

        Args:
            line: Line text.

        Returns:
            Captured named groups (unmatched optional groups omitted),
            or None when the line does not have this shape.
        """
        m = self.pattern.match(line)
        if m is None:
            return None
        return {key: value for key, value in m.groupdict().items() if value is not None}


def _grammar(name: str, role: LineRole, pattern: str, flags: int = 0) -> LineGrammar:
    return LineGrammar(name=name, role=role, pattern=re.compile(pattern, flags))


SUMMARY_GRAMMAR = _grammar(
    "summary", LineRole.SUMMARY,
    r"^Total\s*\(\s*Cases\s*/\s*Btls\.?\s*\)\s*:?\s*(?P<body>.*)$",
    re.IGNORECASE
)

TABLE_GRAMMAR = _grammar(
    "table", LineRole.PRODUCT,
    r"^(?P<serial>\d{1,2})\s+(?P<brand_number>\d{4})\s*(?:\((?P<header_pack>\d+)\))?\s+"
    r"(?P<product_name>.+?)\s+(?P<category>[A-Za-z_]+(?:\s+(?:Paid|Free|PAID|FREE))?)\s+"
    r"(?P<pack_type>[A-Z])\s+(?P<pack_quantity>\d+)\s*/\s*(?P<size_ml>\d+)\s*ml\s+"
    r"(?P<quantity>\d+)\s+(?P<bottles>\d+)$"
)

COMPACT_PACKED_GRAMMAR = _grammar(
    "compact_packed", LineRole.PRODUCT,
    r"^(?P<serial>\d{1,2})(?P<brand_number>\d{4})\s*\((?P<header_pack>\d+)\)\s*"
    rf"(?P<product_name>.+?)\s*(?P<category>{CATEGORY_TOKEN})\s*"
    r"(?P<pack_type>[A-Z])\s*(?P<pack_quantity>\d+)\s*/\s*(?P<size_ml>\d+)\s*ml\s*"
    r"(?P<quantity>\d+)(?:\s+(?P<bottles>\d+))?$"
)

COMPACT_GRAMMAR = _grammar(
    "compact", LineRole.PRODUCT,
    r"^(?P<serial>\d{1,2})(?P<brand_number>\d{4})(?!\s*\()\s*"
    rf"(?P<product_name>.+?)\s*(?P<category>{CATEGORY_TOKEN})\s*"
    r"(?P<pack_type>[A-Z])\s*(?P<pack_quantity>\d+)\s*/\s*(?P<size_ml>\d+)\s*ml\s*"
    r"(?P<quantity>\d+)(?:\s+(?P<bottles>\d+))?$"
)

BLOCK_HEADER_GRAMMAR = _grammar(
    "block_header", LineRole.BLOCK_HEADER,
    r"^(?P<serial>\d{1,2})(?P<brand_number>\d{4})(?:\s*\((?P<header_pack>\d+)\))?$"
)

BLOCK_DETAIL_GRAMMAR = _grammar(
    "block_detail", LineRole.BLOCK_DETAIL,
    rf"^(?:(?P<product_name>[^\d()]*?)\s*)?(?P<category>{CATEGORY_TOKEN})\s*"
    r"(?P<pack_type>[A-Z])\s*(?P<pack_quantity>\d+)\s*/\s*(?P<size_ml>\d+)\s*ml\s*"
    r"(?P<quantity>\d+)(?:\s+(?P<bottles>\d+))?$"
)

HEADER_GRAMMAR = _grammar(
    "header", LineRole.HEADER,
    r"^(?P<label>ICDC\s*(?:Number|No\.?)|ICDC\d{12,18}|Invoice\s*Date|TIN\s*NO|Particulars"
    r"|Name\s*of\s*the\s*Licensee|Licensee|Depot|Permit\s*No).*$",
    re.IGNORECASE
)

FINANCIAL_GRAMMAR = _grammar(
    "financial", LineRole.FINANCIAL,
    r"^(?:" + "|".join(pattern for _, pattern in FINANCIAL_LABELS) + r").*$",
    re.IGNORECASE
)

AMOUNT_GRAMMAR = _grammar(
    "amount", LineRole.AMOUNT,
    rf"^(?P<amount>{AMOUNT_TOKEN})$"
)

FOOTER_GRAMMAR = _grammar(
    "footer", LineRole.FOOTER,
    r"^(?:Page\s*\d+(?:\s*(?:of|/)\s*\d+)?|(?:Authori[sz]ed\s+)?Signat(?:ure|ory)\b.*|E\s*&\s*O\.?\s*E\.?"
    r"|This\s+is\s+a\s+computer\s+generated.*)$",
    re.IGNORECASE
)

# First match wins
DEFAULT_GRAMMARS: Tuple[LineGrammar, ...] = (
    SUMMARY_GRAMMAR,
    TABLE_GRAMMAR,
    COMPACT_PACKED_GRAMMAR,
    COMPACT_GRAMMAR,
    BLOCK_HEADER_GRAMMAR,
    BLOCK_DETAIL_GRAMMAR,
    HEADER_GRAMMAR,
    FINANCIAL_GRAMMAR,
    AMOUNT_GRAMMAR,
    FOOTER_GRAMMAR,
)
