"""
Format Extraction Module.

Pulls raw product fields out of classified invoice lines and normalises
category and pack-type tokens.
"""

from .models import (
    ProductCategory,
    PackType,
    ProductLineRaw,
    normalize_category,
    normalize_pack_type,
    size_code_for,
    SIZE_CODES,
)
from .format_extractor import FormatExtractor
from .header_extractor import HeaderExtractor, InvoiceHeader

__all__ = [
    'ProductCategory',
    'PackType',
    'ProductLineRaw',
    'normalize_category',
    'normalize_pack_type',
    'size_code_for',
    'SIZE_CODES',
    'FormatExtractor',
    'HeaderExtractor',
    'InvoiceHeader'
]
