"""
Invoice Header Extraction.

Reads the invoice number and invoice date printed at the top of an ICDC
document. Both are optional: a missing field is a warning, never a
failure.

Author: ML Engineering Team
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional

from src.utils.logger import get_logger
from src.utils.parse_context import ParseContext
from src.postprocessor.normalizers import DateNormalizer
from src.classifier.classifier import ClassifiedDocument

# Initialize module logger
logger = get_logger(__name__)

STAGE = "header"

# "ICDC Number: ICDC010706250123456" or "ICDC No.:" followed by the id
INVOICE_NUMBER_PATTERN = re.compile(
    r'ICDC\s*(?:Number|No\.?)\s*:?\s*(?P<number>[A-Z0-9]{6,})',
    re.IGNORECASE
)
# Bare inline token
INLINE_NUMBER_PATTERN = re.compile(r'\b(?P<number>ICDC\d{12,18})\b')
INVOICE_DATE_PATTERN = re.compile(
    r'Invoice\s*Date\s*:?\s*(?P<date>\d{1,2}[-/ ][A-Za-z]{3,9}[-/ ]\d{4}|\d{1,2}[-/.]\d{1,2}[-/.]\d{4})',
    re.IGNORECASE
)


@dataclass(frozen=True)
class InvoiceHeader:
    invoice_number: Optional[str] = None
    invoice_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {'invoice_number': self.invoice_number, 'invoice_date': self.invoice_date}


class HeaderExtractor:
    """
    Extracts invoice number and ISO invoice date.

    Example:
        >>> header = HeaderExtractor().extract(classified, ParseContext())
        >>> header.invoice_number, header.invoice_date
        ('ICDC010706250123456', '2025-06-06')
    """

    def __init__(self, date_normalizer: Optional[DateNormalizer] = None) -> None:
        self.date_normalizer = date_normalizer or DateNormalizer()

    def extract(self, classified: ClassifiedDocument, context: ParseContext) -> InvoiceHeader:
        """
        Extract header fields from the document text.

        Args:
            classified: Classified document.
            context: Parse context receiving warnings.

        Returns:
            InvoiceHeader with whatever could be read.
        """
        text = "\n".join(line.text for line in classified.lines)

        invoice_number = self._find_number(text)
        if invoice_number is None:
            context.warn(STAGE, "Invoice number not found")

        invoice_date = self._find_date(text)
        if invoice_date is None:
            context.warn(STAGE, "Invoice date not found")

        logger.debug(f"Header: number={invoice_number}, date={invoice_date}")
        return InvoiceHeader(invoice_number=invoice_number, invoice_date=invoice_date)

    @staticmethod
    def _find_number(text: str) -> Optional[str]:
        for pattern in (INVOICE_NUMBER_PATTERN, INLINE_NUMBER_PATTERN):
            match = pattern.search(text)
            if match:
                return match.group('number').upper()
        return None

    def _find_date(self, text: str) -> Optional[str]:
        match = INVOICE_DATE_PATTERN.search(text)
        if match:
            normalized = self.date_normalizer.normalize(match.group('date'))
            if normalized:
                return normalized
        return self.date_normalizer.extract_date(text)
