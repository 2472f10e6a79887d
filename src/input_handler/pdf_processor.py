"""
PDF Text Extraction Module.

Adapter around pdfplumber that turns a text-layer PDF into a
RawDocument. Image-only (scanned) PDFs have no text layer and are
rejected with EmptyDocumentError; OCR is not part of this system.

Author: ML Engineering Team
"""

import io
from pathlib import Path
from typing import Optional, Union

import pdfplumber

from config import get_config
from src.utils.logger import get_logger
from src.utils.exceptions import CorruptedFileError, EmptyDocumentError
from .document import RawDocument

# Initialize module logger
logger = get_logger(__name__)


class PDFTextExtractor:
    """
    Extracts the text layer of an ICDC PDF.

    Pages are read in order and joined with newlines. Extraction stops
    after ``max_pages`` pages.

    Attributes:
        max_pages: Maximum number of pages to read
        x_tolerance: Horizontal glyph-merging tolerance for pdfplumber
        y_tolerance: Vertical line-merging tolerance for pdfplumber

    Example:
        >>> extractor = PDFTextExtractor()
        >>> document = extractor.extract("ICDC_0601.pdf")
        >>> print(document.page_count)
    """

    def __init__(
        self,
        max_pages: Optional[int] = None,
        x_tolerance: Optional[float] = None,
        y_tolerance: Optional[float] = None
    ) -> None:
        self.max_pages = max_pages or get_config("input.pdf.max_pages", 20)
        self.x_tolerance = x_tolerance or get_config("input.pdf.x_tolerance", 3)
        self.y_tolerance = y_tolerance or get_config("input.pdf.y_tolerance", 3)

        logger.debug(f"PDFTextExtractor initialized (max_pages={self.max_pages})")

    def extract(self, source: Union[str, Path, bytes]) -> RawDocument:
        """
        Extract text from a PDF file or an in-memory PDF.

        Args:
            source: Path to the PDF, or its raw bytes.

        Returns:
            RawDocument carrying the text, page count and original bytes.

        Raises:
            CorruptedFileError: If pdfplumber cannot open or read the PDF.
            EmptyDocumentError: If the PDF has no extractable text.
        """
        if isinstance(source, (bytes, bytearray)):
            content = bytes(source)
            label = "<bytes>"
        else:
            path = Path(source)
            content = path.read_bytes()
            label = path.name

        logger.info(f"Extracting text from PDF: {label}")

        try:
            with pdfplumber.open(io.BytesIO(content)) as pdf:
                page_count = len(pdf.pages)
                if page_count > self.max_pages:
                    logger.warning(
                        f"PDF has {page_count} pages, reading only the first {self.max_pages}"
                    )

                page_texts = []
                for page in pdf.pages[:self.max_pages]:
                    page_text = page.extract_text(
                        x_tolerance=self.x_tolerance,
                        y_tolerance=self.y_tolerance
                    ) or ""
                    page_texts.append(page_text)
        except Exception as e:
            logger.error(f"pdfplumber failed on {label}: {e}")
            raise CorruptedFileError(label, str(e))

        text = "\n".join(page_texts)
        if not text.strip():
            raise EmptyDocumentError(label)

        document = RawDocument.from_text(
            text,
            page_count=page_count,
            content=content,
            source=label
        )
        logger.info(f"Extracted {document.line_count} lines from {page_count} page(s)")
        return document
