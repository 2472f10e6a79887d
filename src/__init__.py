"""
ICDC Invoice Parser - Source Package.

Turns the text of Indian state excise ICDC invoices into structured
line items, quantities, financial fields and brand catalog matches.

Modules:
    - input_handler: PDF text extraction and plain-text loading
    - classifier: per-line structural roles
    - extractor: product line and header field extraction
    - quantity: cases/bottles disambiguation
    - financial: monetary fields and summary line
    - brand_resolution: master catalog matching
    - pipeline: InvoiceParser and parse_invoice
    - output_handler: Excel and JSON diagnostics export
    - evaluation: corpus metrics against ground truth

Architecture:
    Text -> Classify -> Extract -> Quantities -> Financial -> Brands
                                                              |
                                                 Export / Evaluation
"""

__version__ = "1.0.0"
__author__ = "ML Engineering Team"

__all__ = [
    'input_handler',
    'classifier',
    'extractor',
    'quantity',
    'financial',
    'brand_resolution',
    'pipeline',
    'postprocessor',
    'output_handler',
    'evaluation',
    'utils'
]
