"""
Product Line Data Model.

Defines the raw product line emitted by the format extractor together
with the closed vocabularies it uses (product category, pack type) and
the normalisation tables that map printed tokens onto them.

Author: ML Engineering Team
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class ProductCategory(Enum):
    """Canonical product category."""
    BEER = "Beer"
    IML = "IML"
    DUTY_PAID = "DutyPaid"
    DUTY_FREE = "DutyFree"


class PackType(Enum):
    """Container classification code printed per brand line."""
    GLASS = "G"
    CAN = "C"
    PLASTIC = "P"
    BOX = "B"


# Printed category tokens, keyed after upper-casing and removing
# spaces and underscores
CATEGORY_SYNONYMS: Dict[str, ProductCategory] = {
    "BEER": ProductCategory.BEER,
    "IML": ProductCategory.IML,
    "IMFL": ProductCategory.IML,
    "DUTYPAID": ProductCategory.DUTY_PAID,
    "DUTYFREE": ProductCategory.DUTY_FREE,
}

DEFAULT_CATEGORY = ProductCategory.IML
DEFAULT_PACK_TYPE = PackType.GLASS

# Standard bottle sizes and the short codes used on stock sheets
SIZE_CODES: Dict[int, str] = {
    60: "OO",
    90: "DD",
    180: "NN",
    275: "GP",
    330: "UP",
    375: "PP",
    500: "AP",
    650: "BS",
    750: "QQ",
    1000: "LL",
    2000: "XG",
}
UNKNOWN_SIZE_CODE = "XX"

# Summary-line buckets: beer is totalled on its own, everything else
# is printed under IML
SUMMARY_BUCKET_BEER = "Beer"
SUMMARY_BUCKET_IML = "IML"


def normalize_category(token: str) -> Tuple[ProductCategory, bool]:
    """
    Map a printed category token onto ProductCategory.

    Args:
        token: Token as captured by the grammar (e.g. "Duty Paid").

    Returns:
        Tuple of (category, recognized). Unrecognized tokens map to IML.

    Example:
        >>> normalize_category("DUTY_PAID")
        (<ProductCategory.DUTY_PAID: 'DutyPaid'>, True)
        >>> normalize_category("Wine")
        (<ProductCategory.IML: 'IML'>, False)
    """
    key = "".join((token or "").upper().replace("_", " ").split())
    category = CATEGORY_SYNONYMS.get(key)
    if category is None:
        return DEFAULT_CATEGORY, False
    return category, True


def normalize_pack_type(token: str) -> Tuple[PackType, bool]:
    """
    Map a printed pack-type letter onto PackType.

    Returns:
        Tuple of (pack type, recognized). Unrecognized letters map to G.
    """
    try:
        return PackType((token or "").strip().upper()), True
    except ValueError:
        return DEFAULT_PACK_TYPE, False


def size_code_for(size_ml: int) -> str:
    return SIZE_CODES.get(size_ml, UNKNOWN_SIZE_CODE)


@dataclass(frozen=True)
class ProductLineRaw:
    """
    Fields of one product line, exactly as printed.

    Attributes:
        serial: Serial number printed at the start of the line.
        brand_number: Four-digit brand number; kept as a string because
            leading zeros are significant in the catalog.
        product_name: Brand/product name.
        product_category: Canonical category.
        pack_type: Canonical pack type.
        pack_quantity: Bottles per case.
        size_ml: Bottle size in millilitres.
        quantity_token: Digits encoding cases and bottles. When the
            template prints bottles separately this holds cases only.
        source_line_number: Line the quantity was read from.
        grammar: Name of the grammar that produced the line.
        bottles_token: Separately printed bottles, if the template has
            a bottles column.
    """
    serial: int
    brand_number: str
    product_name: str
    product_category: ProductCategory
    pack_type: PackType
    pack_quantity: int
    size_ml: int
    quantity_token: str
    source_line_number: int
    grammar: str
    bottles_token: Optional[str] = None

    @property
    def size_code(self) -> str:
        return size_code_for(self.size_ml)

    @property
    def summary_bucket(self) -> str:
        if self.product_category is ProductCategory.BEER:
            return SUMMARY_BUCKET_BEER
        return SUMMARY_BUCKET_IML

    @property
    def is_delimited(self) -> bool:
        """True when cases and bottles were printed as separate numbers."""
        return self.bottles_token is not None

    @property
    def catalog_key(self) -> Tuple[str, int, int, str]:
        return (self.brand_number, self.size_ml, self.pack_quantity, self.pack_type.value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'serial': self.serial,
            'brand_number': self.brand_number,
            'product_name': self.product_name,
            'product_category': self.product_category.value,
            'pack_type': self.pack_type.value,
            'pack_quantity': self.pack_quantity,
            'size_ml': self.size_ml,
            'size_code': self.size_code,
            'quantity_token': self.quantity_token,
            'bottles_token': self.bottles_token,
            'source_line_number': self.source_line_number,
            'grammar': self.grammar,
        }
