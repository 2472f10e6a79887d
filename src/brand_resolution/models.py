"""
Brand Catalog Data Classes.

Author: ML Engineering Team
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from src.utils.exceptions import InvalidCatalogRecordError
from src.utils.helpers import to_serializable


class MatchMethod(Enum):
    EXACT = "exact"
    FUZZY = "fuzzy"
    NONE = "none"


# Accepted spellings for each record attribute
_FIELD_ALIASES = {
    'id': ('id', 'master_brand_id', 'masterBrandId'),
    'brand_number': ('brand_number', 'brandNumber'),
    'size_ml': ('size_ml', 'sizeMl', 'sizeML', 'size'),
    'pack_quantity': ('pack_quantity', 'packQuantity', 'pack_qty'),
    'pack_type': ('pack_type', 'packType'),
    'product_type': ('product_type', 'productType'),
    'brand_name': ('brand_name', 'brandName', 'name'),
    'standard_mrp': ('standard_mrp', 'standardMrp', 'mrp'),
    'invoice_price': ('invoice_price', 'invoicePrice'),
}


def _lookup(data: Dict[str, Any], attribute: str) -> Any:
    for key in _FIELD_ALIASES[attribute]:
        if data.get(key) not in (None, ''):
            return data[key]
    return None


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return Decimal(str(value).replace(',', ''))
    except InvalidOperation:
        return None


@dataclass(frozen=True)
class MasterBrandRecord:
    """
    One row of the master brand catalog (read-only to the parser).

    Uniquely keyed by (brand_number, size_ml, pack_quantity, pack_type).

    Attributes:
        id: Catalog identifier.
        brand_number: Four-digit brand number, zero padding preserved.
        size_ml: Bottle size in millilitres.
        pack_quantity: Bottles per case.
        pack_type: Pack type letter (G/C/P/B).
        product_type: Product category as stored in the catalog.
        brand_name: Display name.
        standard_mrp: Maximum retail price per bottle.
        invoice_price: Depot price per case.
    """
    id: Any
    brand_number: str
    size_ml: int
    pack_quantity: int
    pack_type: str
    product_type: Optional[str] = None
    brand_name: Optional[str] = None
    standard_mrp: Optional[Decimal] = None
    invoice_price: Optional[Decimal] = None

    @property
    def key(self) -> Tuple[str, int, int, str]:
        return (self.brand_number, self.size_ml, self.pack_quantity, self.pack_type)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MasterBrandRecord':
        """
        Build a record from a catalog row (snake_case or camelCase keys).

        Raises:
            InvalidCatalogRecordError: If a key field is missing or malformed.
        """
        missing = [
            name for name in ('id', 'brand_number', 'size_ml', 'pack_quantity', 'pack_type')
            if _lookup(data, name) is None
        ]
        if missing:
            raise InvalidCatalogRecordError(data, f"missing {', '.join(missing)}")

        try:
            size_ml = int(_lookup(data, 'size_ml'))
            pack_quantity = int(_lookup(data, 'pack_quantity'))
        except (TypeError, ValueError) as e:
            raise InvalidCatalogRecordError(data, str(e))

        return cls(
            id=_lookup(data, 'id'),
            brand_number=str(_lookup(data, 'brand_number')).strip().zfill(4),
            size_ml=size_ml,
            pack_quantity=pack_quantity,
            pack_type=str(_lookup(data, 'pack_type')).strip().upper(),
            product_type=_lookup(data, 'product_type'),
            brand_name=_lookup(data, 'brand_name'),
            standard_mrp=_to_decimal(_lookup(data, 'standard_mrp')),
            invoice_price=_to_decimal(_lookup(data, 'invoice_price'))
        )

    def to_dict(self) -> Dict[str, Any]:
        return to_serializable({
            'id': self.id,
            'brand_number': self.brand_number,
            'size_ml': self.size_ml,
            'pack_quantity': self.pack_quantity,
            'pack_type': self.pack_type,
            'product_type': self.product_type,
            'brand_name': self.brand_name,
            'standard_mrp': self.standard_mrp,
            'invoice_price': self.invoice_price,
        })


@dataclass(frozen=True)
class BrandMatch:
    """
    Link between a resolved line item and a catalog record.

    Attributes:
        resolved_line_item_id: Item the match belongs to.
        master_brand_id: Matched record id; always None for method NONE.
        confidence: 0 to 100.
        method: exact, fuzzy or none.
        brand_name: Matched record's name, for display.
        size_difference_ml: |catalog size - line size| for fuzzy matches.
    """
    resolved_line_item_id: int
    master_brand_id: Any
    confidence: float
    method: MatchMethod
    brand_name: Optional[str] = None
    size_difference_ml: Optional[int] = None

    def __post_init__(self):
        if self.method is MatchMethod.NONE and self.master_brand_id is not None:
            raise ValueError("A 'none' match cannot reference a catalog record")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'resolved_line_item_id': self.resolved_line_item_id,
            'master_brand_id': self.master_brand_id,
            'confidence': self.confidence,
            'method': self.method.value,
            'brand_name': self.brand_name,
            'size_difference_ml': self.size_difference_ml,
        }
