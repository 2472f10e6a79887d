"""
Data Normalizers Module.

This module provides normalization functions for:
    - Invoice dates (DD-Mon-YYYY and friends) to ISO format
    - Rupee amounts with Indian digit grouping to Decimal

Author: ML Engineering Team
"""

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from dateutil import parser as date_parser

from config import get_config
from src.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class DateNormalizer:
    """
    Normalizes invoice date strings to ISO format (YYYY-MM-DD).

    ICDC invoices print dates day-first ("06-Jun-2025", "06/06/2025"),
    so the dateutil fallback is always run with ``dayfirst=True``.

    Attributes:
        output_format: Target date format string
        input_formats: Explicit strptime formats tried before dateutil

    Example:
        >>> normalizer = DateNormalizer()
        >>> normalizer.normalize("06-Jun-2025")
        '2025-06-06'
        >>> normalizer.normalize("6/Jun/2025")
        '2025-06-06'
    """

    # Date shapes found on ICDC documents
    DATE_PATTERNS = [
        # DD-Mon-YYYY / DD/Mon/YYYY
        r'\b(\d{1,2})[-/ ]([A-Za-z]{3,9})[-/ ](\d{4})\b',
        # DD-MM-YYYY / DD/MM/YYYY
        r'\b(\d{1,2})[-/.](\d{1,2})[-/.](\d{4})\b',
        # YYYY-MM-DD
        r'\b(\d{4})-(\d{1,2})-(\d{1,2})\b',
    ]

    def __init__(self) -> None:
        self.output_format = get_config("postprocessing.date.output_format", "%Y-%m-%d")
        self.input_formats = get_config(
            "postprocessing.date.input_formats",
            ["%d-%b-%Y", "%d/%b/%Y", "%d-%m-%Y", "%d/%m/%Y", "%Y-%m-%d"]
        )

    def normalize(self, date_str: str) -> Optional[str]:
        """
        Normalize a date string to the configured output format.

        Args:
            date_str: Input date string in any recognized format.

        Returns:
            Normalized date string, or None if parsing fails.
        """
        if not date_str:
            return None

        date_str = self._clean_date_string(date_str)

        parsed_date = self._try_explicit_formats(date_str)
        if parsed_date is None:
            parsed_date = self._try_dateutil_parser(date_str)

        if parsed_date is None:
            logger.debug(f"Could not parse date: {date_str}")
            return None

        return parsed_date.strftime(self.output_format)

    def _clean_date_string(self, date_str: str) -> str:
        date_str = ' '.join(date_str.split())
        date_str = re.sub(r'^(?:invoice\s*date|date|dated)\s*:?\s*', '', date_str, flags=re.IGNORECASE)
        return date_str.strip()

    def _try_explicit_formats(self, date_str: str) -> Optional[datetime]:
        for fmt in self.input_formats:
            try:
                return datetime.strptime(date_str, fmt)
            except ValueError:
                continue
        return None

    def _try_dateutil_parser(self, date_str: str) -> Optional[datetime]:
        try:
            return date_parser.parse(date_str, dayfirst=True)
        except (ValueError, OverflowError):
            return None

    def extract_date(self, text: str) -> Optional[str]:
        """
        Find the first date in free text and normalize it.

        Args:
            text: Text that may contain a date.

        Returns:
            Normalized date string or None.
        """
        for pattern in self.DATE_PATTERNS:
            for match in re.finditer(pattern, text):
                normalized = self.normalize(match.group(0))
                if normalized:
                    return normalized
        return None


class AmountNormalizer:
    """
    Normalizes printed rupee amounts to Decimal.

    Handles Indian digit grouping ("13,85,232.40"), currency markers
    ("Rs.", "INR", the rupee sign) and a leading minus sign. Amounts are
    kept as Decimal end to end so that totals compare exactly.

    Example:
        >>> normalizer = AmountNormalizer()
        >>> normalizer.to_decimal("Rs. 13,85,232.40")
        Decimal('1385232.40')
        >>> normalizer.normalize("1,30,944.00")
        '130944.00'
    """

    CURRENCY_MARKERS = re.compile(r'(?:₹|\bRs\.?|\bINR\b)', re.IGNORECASE)
    NUMBER_PATTERN = re.compile(r'-?\d[\d,]*(?:\.\d+)?')
    CENTS = Decimal("0.01")

    def to_decimal(self, amount_str: str) -> Optional[Decimal]:
        """
        Convert an amount string to a Decimal rounded to paise.

        Args:
            amount_str: Printed amount, possibly with grouping commas.

        Returns:
            Decimal value, or None if the text holds no number.
        """
        if not amount_str:
            return None

        cleaned = self.CURRENCY_MARKERS.sub('', amount_str)
        match = self.NUMBER_PATTERN.search(cleaned)
        if match is None:
            return None

        digits = match.group(0).replace(',', '')
        try:
            return Decimal(digits).quantize(self.CENTS)
        except InvalidOperation:
            logger.debug(f"Could not parse amount: {amount_str}")
            return None

    def normalize(self, amount_str: str) -> Optional[str]:
        """
        Normalize an amount string to plain "1234.56" form.

        Returns:
            Normalized amount string or None.
        """
        value = self.to_decimal(amount_str)
        if value is None:
            return None
        return format(value, 'f')

    def find_amount(self, text: str) -> Optional[Decimal]:
        """
        Return the amount in a text fragment, as Decimal.

        Used for the fragment that follows a financial label on the same
        line ("Special Excise Cess:1,91,760.00"). Rates printed inside the
        label ("TCS (1%):", "Tax @ 10%:") are not amounts; a fragment
        holding only a rate returns None so the label can take its amount
        from a later line. Among the remaining numbers one with a decimal
        part is preferred, so "TCS (1%): 15,162.00" reads 15162.00.
        """
        if not text:
            return None

        cleaned = self.CURRENCY_MARKERS.sub('', text)
        numbers = [
            match.group(0) for match in self.NUMBER_PATTERN.finditer(cleaned)
            if not self._is_rate(cleaned, match)
        ]
        if not numbers:
            return None
        for number in numbers:
            if '.' in number:
                return self.to_decimal(number)
        return self.to_decimal(numbers[0])

    def _is_rate(self, text: str, match) -> bool:
        after = text[match.end():].lstrip()
        if after.startswith('%'):
            return True
        return text[:match.start()].rstrip().endswith('(') and after.startswith(')')
