"""
Output Handler Module for the ICDC Invoice Parser.

This module provides functionality for:
    - Excel workbook generation (items, financial fields, line roles)
    - JSON diagnostics export (raw text, classification, trace)

Author: ML Engineering Team
"""

from .handler import OutputHandler
from .excel_exporter import ExcelExporter
from .diagnostics_exporter import DiagnosticsExporter

__all__ = ['OutputHandler', 'ExcelExporter', 'DiagnosticsExporter']
