"""
Custom Exceptions Module.

All errors raised by the ICDC invoice parser. Only a structural failure
(no product lines at all) is fatal to a parse; field-level problems are
reported as warnings on the ParseResult instead of being raised.

Exception Hierarchy:
    InvoiceParsingError (base)
    ├── InputError
    │   ├── UnsupportedFileTypeError
    │   ├── DocumentNotFoundError
    │   ├── CorruptedFileError
    │   └── EmptyDocumentError
    ├── ExtractionError
    │   └── NoProductLinesError
    ├── CatalogError
    │   └── InvalidCatalogRecordError
    ├── ConfigurationError
    └── OutputError
        ├── ExcelExportError
        └── DiagnosticsExportError
"""


class InvoiceParsingError(Exception):
    """
    Base exception for all invoice parsing errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(InvoiceParsingError):
    """Base exception for input handling errors."""
    pass


class UnsupportedFileTypeError(InputError):
    """
    Raised when an unsupported file type is provided.

    Example:
        >>> raise UnsupportedFileTypeError(".doc", [".pdf", ".txt"])
    """

    def __init__(self, file_type: str, supported_types: list):
        message = f"Unsupported file type: '{file_type}'"
        details = {"file_type": file_type, "supported_types": sorted(supported_types)}
        super().__init__(message, details)


class DocumentNotFoundError(InputError):
    """Raised when the input file cannot be found."""

    def __init__(self, filepath: str):
        message = f"File not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


class CorruptedFileError(InputError):
    """Raised when a file is unreadable by the text extractor."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Corrupted or unreadable file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


class EmptyDocumentError(InputError):
    """Raised when a document yields no text at all (e.g. image-only PDF)."""

    def __init__(self, filepath: str):
        message = f"No text layer found in: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


# =============================================================================
# EXTRACTION ERRORS
# =============================================================================

class ExtractionError(InvoiceParsingError):
    """Base exception for structural extraction failures."""
    pass


class NoProductLinesError(ExtractionError):
    """Raised when not a single line matches a product grammar."""

    def __init__(self, line_count: int):
        message = "No product lines recognised in document"
        details = {"lines_scanned": line_count}
        super().__init__(message, details)


# =============================================================================
# CATALOG ERRORS
# =============================================================================

class CatalogError(InvoiceParsingError):
    """Base exception for master brand catalog problems."""
    pass


class InvalidCatalogRecordError(CatalogError):
    """Raised when a catalog record is missing a key field."""

    def __init__(self, record: dict, reason: str = None):
        message = "Invalid master brand record"
        details = {"record": record, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(InvoiceParsingError):
    """Raised when configuration or a configuration-like file is unusable."""

    def __init__(self, source: str, reason: str = None):
        message = f"Configuration error in: {source}"
        details = {"source": source, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# OUTPUT ERRORS
# =============================================================================

class OutputError(InvoiceParsingError):
    """Base exception for output handling errors."""
    pass


class ExcelExportError(OutputError):
    """Raised when Excel export fails."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Failed to export Excel file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


class DiagnosticsExportError(OutputError):
    """Raised when the JSON diagnostics trace cannot be written."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Failed to write diagnostics: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


__all__ = [
    'InvoiceParsingError',
    'InputError',
    'UnsupportedFileTypeError',
    'DocumentNotFoundError',
    'CorruptedFileError',
    'EmptyDocumentError',
    'ExtractionError',
    'NoProductLinesError',
    'CatalogError',
    'InvalidCatalogRecordError',
    'ConfigurationError',
    'OutputError',
    'ExcelExportError',
    'DiagnosticsExportError',
]
