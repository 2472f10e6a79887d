"""
Format Extractor Module.

Turns classified product lines into ProductLineRaw records. Single-line
templates carry every field on one line; block templates spread a
product over a header line (serial, brand number, pack quantity), one
or more name lines and a detail line (category, pack, size, quantity).

No quantity interpretation happens here: the cases/bottles digits are
passed on untouched.

Author: ML Engineering Team
"""

from collections import Counter
from typing import Dict, List, Optional, Sequence, Set

from config import get_config
from src.utils.logger import get_logger
from src.utils.parse_context import ParseContext
from src.classifier.classifier import ClassifiedDocument, ClassifiedLine
from src.classifier.grammars import LineRole
from .models import (
    DEFAULT_CATEGORY,
    DEFAULT_PACK_TYPE,
    ProductLineRaw,
    normalize_category,
    normalize_pack_type,
)

# Initialize module logger
logger = get_logger(__name__)

STAGE = "extractor"


class FormatExtractor:
    """
    Builds ProductLineRaw records from a classified document.

    Attributes:
        block_window: Max lines searched after a block header for its
            detail line.

    Example:
        >>> extractor = FormatExtractor()
        >>> raw_lines = extractor.extract(classified, ParseContext())
        >>> raw_lines[0].brand_number
        '5016'
    """

    def __init__(self, block_window: Optional[int] = None) -> None:
        self.block_window = block_window or get_config("classifier.block_window", 8)

    def extract(self, classified: ClassifiedDocument, context: ParseContext) -> List[ProductLineRaw]:
        """
        Extract every product line in the document.

        Args:
            classified: Classified document.
            context: Parse context receiving warnings.

        Returns:
            Product lines ordered by serial (stable for equal serials).
        """
        lines = classified.lines
        consumed: Set[int] = set()
        products: List[ProductLineRaw] = []

        for index, line in enumerate(lines):
            if line.role is LineRole.PRODUCT:
                raw = self.build(line.fields, line.grammar, line.number, context)
            elif line.role is LineRole.BLOCK_HEADER:
                raw = self._assemble_block(lines, index, consumed, context)
            else:
                continue

            if raw is not None:
                products.append(raw)

        for line in lines:
            if line.role is LineRole.BLOCK_DETAIL and line.number not in consumed:
                context.warn(
                    STAGE,
                    f"Product detail without a preceding brand header ignored: '{line.text}'",
                    line=line.number
                )

        self._warn_duplicates(products, context)

        products.sort(key=lambda raw: raw.serial)
        logger.info(f"Extracted {len(products)} product lines")
        return products

    def build(
        self,
        fields: Dict[str, str],
        grammar: str,
        line_number: int,
        context: ParseContext
    ) -> Optional[ProductLineRaw]:
        """
        Build one ProductLineRaw from captured grammar fields.

        Unknown category or pack-type tokens are defaulted with a
        warning. A line whose pack quantity is zero is dropped with a
        warning since no bottles count could satisfy it.

        Args:
            fields: Named groups (serial, brand_number, product_name,
                category, pack_type, pack_quantity, size_ml, quantity and
                optionally header_pack, bottles).
            grammar: Grammar name.
            line_number: Source line number.
            context: Parse context receiving warnings.

        Returns:
            ProductLineRaw, or None when the line cannot be used.
        """
        category_token = fields.get('category', '')
        category, known = normalize_category(category_token)
        if not known:
            context.warn(
                STAGE,
                f"Unrecognized category '{category_token}', defaulting to {DEFAULT_CATEGORY.value}",
                line=line_number
            )

        pack_token = fields.get('pack_type', '')
        pack_type, known = normalize_pack_type(pack_token)
        if not known:
            context.warn(
                STAGE,
                f"Unrecognized pack type '{pack_token}', defaulting to {DEFAULT_PACK_TYPE.value}",
                line=line_number
            )

        pack_quantity = int(fields['pack_quantity'])
        header_pack = fields.get('header_pack')
        if header_pack is not None and int(header_pack) != pack_quantity:
            context.warn(
                STAGE,
                f"Pack quantity ({header_pack}) disagrees with detail ({pack_quantity}); "
                f"using {header_pack}",
                line=line_number
            )
            pack_quantity = int(header_pack)

        if pack_quantity < 1:
            context.warn(STAGE, "Pack quantity is zero; line skipped", line=line_number)
            return None

        product_name = " ".join(fields.get('product_name', '').split())

        raw = ProductLineRaw(
            serial=int(fields['serial']),
            brand_number=fields['brand_number'],
            product_name=product_name,
            product_category=category,
            pack_type=pack_type,
            pack_quantity=pack_quantity,
            size_ml=int(fields['size_ml']),
            quantity_token=fields['quantity'],
            source_line_number=line_number,
            grammar=grammar,
            bottles_token=fields.get('bottles')
        )
        context.record(STAGE, raw.to_dict())
        return raw

    def _assemble_block(
        self,
        lines: Sequence[ClassifiedLine],
        header_index: int,
        consumed: Set[int],
        context: ParseContext
    ) -> Optional[ProductLineRaw]:
        header = lines[header_index]
        name_parts: List[str] = []

        for line in lines[header_index + 1:header_index + 1 + self.block_window]:
            if line.role is LineRole.BLOCK_DETAIL and line.number not in consumed:
                consumed.add(line.number)
                fields = dict(line.fields)
                fields.update(
                    serial=header.fields['serial'],
                    brand_number=header.fields['brand_number'],
                    product_name=" ".join(name_parts + [line.fields.get('product_name', '')])
                )
                if 'header_pack' in header.fields:
                    fields['header_pack'] = header.fields['header_pack']
                return self.build(fields, "block", line.number, context)

            if line.role is LineRole.UNCLASSIFIED:
                name_parts.append(line.text)
                continue

            # Any other structured line ends the block
            break

        context.warn(
            STAGE,
            f"Brand header '{header.text}' has no detail line within "
            f"{self.block_window} lines; skipped",
            line=header.number
        )
        return None

    @staticmethod
    def _warn_duplicates(products: List[ProductLineRaw], context: ParseContext) -> None:
        counts = Counter(raw.catalog_key for raw in products)
        for raw in products:
            if counts[raw.catalog_key] > 1:
                brand, size, pack, pack_type = raw.catalog_key
                context.warn(
                    STAGE,
                    f"Brand {brand} {size}ml {pack_type}{pack} appears "
                    f"{counts[raw.catalog_key]} times; all lines kept",
                    line=raw.source_line_number
                )
