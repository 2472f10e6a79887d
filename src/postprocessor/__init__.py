"""
Post-Processing Module for the ICDC Invoice Parser.

Normalizers shared by the extraction stages:
    - Date normalization to ISO format
    - Amount normalization to Decimal

Author: ML Engineering Team
"""

from .normalizers import DateNormalizer, AmountNormalizer

__all__ = [
    'DateNormalizer',
    'AmountNormalizer'
]
