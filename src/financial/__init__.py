"""
Financial Extraction Module.

Labelled monetary fields, the printed cases/bottles summary line and
the cross-checks run against both.
"""

from .models import FinancialFields, TotalCheck, SummaryTotals, SummaryValidation
from .summary import SummaryLineParser, validate_summary
from .extractor import FinancialExtractor

__all__ = [
    'FinancialFields',
    'TotalCheck',
    'SummaryTotals',
    'SummaryValidation',
    'SummaryLineParser',
    'validate_summary',
    'FinancialExtractor'
]
