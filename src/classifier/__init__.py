"""
Line Classification Module.

Ordered, first-match-wins grammars that tag each invoice line with a
structural role (product, summary, financial, header, footer, ...).
"""

from .grammars import LineRole, LineGrammar, DEFAULT_GRAMMARS, FINANCIAL_LABELS
from .classifier import LineClassifier, ClassifiedLine, ClassifiedDocument

__all__ = [
    'LineRole',
    'LineGrammar',
    'DEFAULT_GRAMMARS',
    'FINANCIAL_LABELS',
    'LineClassifier',
    'ClassifiedLine',
    'ClassifiedDocument'
]
