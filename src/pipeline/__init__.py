"""
Invoice Parsing Pipeline.

Entry points for turning extracted ICDC invoice text into structured
results.
"""

from src.utils.parse_context import ParseContext
from .result import ParseResult, ParseDiagnostics
from .parser import InvoiceParser, parse_invoice, as_catalog

__all__ = [
    'ParseContext',
    'ParseResult',
    'ParseDiagnostics',
    'InvoiceParser',
    'parse_invoice',
    'as_catalog'
]
