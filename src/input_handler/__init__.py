"""
Input Handler Module.

Turns invoice files into RawDocument objects:
    - pdfplumber text extraction for text-layer PDFs
    - direct loading of saved text dumps
"""

from .document import RawDocument, DocumentLine
from .handler import InputHandler
from .pdf_processor import PDFTextExtractor

__all__ = [
    'RawDocument',
    'DocumentLine',
    'InputHandler',
    'PDFTextExtractor'
]
