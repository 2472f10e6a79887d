"""
Brand Resolution Module.

Matches resolved line items to master catalog records (exact or
size-tolerant fuzzy) and scores each match.
"""

from .models import MasterBrandRecord, BrandMatch, MatchMethod
from .catalog import BrandCatalog
from .resolver import BrandResolver

__all__ = [
    'MasterBrandRecord',
    'BrandMatch',
    'MatchMethod',
    'BrandCatalog',
    'BrandResolver'
]
