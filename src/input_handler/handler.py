"""
Main Input Handler Module.

Loads invoice files from disk into RawDocument objects. PDFs go through
the pdfplumber text extractor; ``.txt`` files (text dumps saved by an
earlier extraction run) are read directly.

Usage:
    from src.input_handler import InputHandler

    handler = InputHandler()
    document = handler.load("ICDC_0601.pdf")

    # Every supported file in a directory
    paths = handler.collect("./invoices/")

Classes:
    InputHandler: Main class for file input handling
"""

from pathlib import Path
from typing import List, Optional, Union

from config import get_config
from src.utils.logger import get_logger
from src.utils.helpers import get_file_extension
from src.utils.exceptions import (
    InputError,
    UnsupportedFileTypeError,
    DocumentNotFoundError,
    CorruptedFileError,
    EmptyDocumentError
)

from .document import RawDocument
from .pdf_processor import PDFTextExtractor


# Initialize module logger
logger = get_logger(__name__)


class InputHandler:
    """
    Main input handler for invoice files.

    Attributes:
        supported_extensions: Set of accepted file extensions
        text_encoding: Encoding used for ``.txt`` inputs
        pdf_extractor: PDFTextExtractor used for ``.pdf`` inputs

    Example:
        >>> handler = InputHandler()
        >>> document = handler.load("ICDC_0601.pdf")
        >>> print(f"{document.line_count} lines")
    """

    PDF_EXTENSIONS = {'.pdf'}
    TEXT_EXTENSIONS = {'.txt'}

    def __init__(self, pdf_extractor: Optional[PDFTextExtractor] = None) -> None:
        self.supported_extensions = {
            ext.lower() for ext in get_config(
                "input.supported_extensions",
                list(self.PDF_EXTENSIONS | self.TEXT_EXTENSIONS)
            )
        }
        self.text_encoding = get_config("input.text_encoding", "utf-8")
        self.pdf_extractor = pdf_extractor or PDFTextExtractor()

        logger.debug(f"InputHandler initialized with extensions: {sorted(self.supported_extensions)}")

    def validate_file(self, filepath: Union[str, Path]) -> Path:
        """
        Validate that a file exists, is supported and is not empty.

        Args:
            filepath: Path to the file to validate.

        Returns:
            Path object pointing to the validated file.

        Raises:
            DocumentNotFoundError: If file doesn't exist.
            UnsupportedFileTypeError: If file type is not supported.
            CorruptedFileError: If the file is empty.
        """
        path = Path(filepath)

        if not path.exists():
            raise DocumentNotFoundError(str(filepath))

        if not path.is_file():
            raise InputError(f"Path is not a file: {filepath}")

        extension = get_file_extension(path)
        if extension not in self.supported_extensions:
            raise UnsupportedFileTypeError(extension, list(self.supported_extensions))

        if path.stat().st_size == 0:
            raise CorruptedFileError(str(filepath), "File is empty")

        return path

    def load(self, filepath: Union[str, Path]) -> RawDocument:
        """
        Load an invoice file as a RawDocument.

        Args:
            filepath: Path to the invoice file.

        Returns:
            RawDocument for the file.

        Raises:
            InputError: Any input problem (missing, unsupported, unreadable,
                no text layer).
        """
        path = self.validate_file(filepath)
        logger.info(f"Loading file: {path.name}")

        if get_file_extension(path) in self.PDF_EXTENSIONS:
            return self.pdf_extractor.extract(path)

        content = path.read_bytes()
        try:
            text = content.decode(self.text_encoding)
        except UnicodeDecodeError as e:
            raise CorruptedFileError(str(path), str(e))

        if not text.strip():
            raise EmptyDocumentError(str(path))

        return RawDocument.from_text(text, content=content, source=path.name)

    def collect(self, directory: Union[str, Path], recursive: bool = False) -> List[Path]:
        """
        List every supported file in a directory, sorted by path.

        Args:
            directory: Directory to scan.
            recursive: Whether to search subdirectories.

        Returns:
            Sorted list of file paths.

        Raises:
            DocumentNotFoundError: If the directory doesn't exist.
        """
        directory = Path(directory)
        if not directory.exists():
            raise DocumentNotFoundError(str(directory))
        if not directory.is_dir():
            raise InputError(f"Path is not a directory: {directory}")

        pattern = "**/*" if recursive else "*"
        files = {
            p for p in directory.glob(pattern)
            if p.is_file() and get_file_extension(p) in self.supported_extensions
        }

        logger.info(f"Found {len(files)} files to process in {directory}")
        return sorted(files)
