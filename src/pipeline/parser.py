"""
ICDC Invoice Parser.

Runs the parsing stages over one document:

    1. Line classification
    2. Header and product line extraction
    3. Summary line decoding
    4. Quantity disambiguation (summary cross-check when available)
    5. Financial extraction and total cross-validation
    6. Summary validation
    7. Brand resolution against the catalog snapshot

The parser holds no per-document state: every call builds its own
ParseContext, so one InvoiceParser may be shared across threads.

Author: ML Engineering Team
"""

from typing import Any, Dict, Iterable, Optional, Union

from src.utils.logger import get_logger
from src.utils.exceptions import NoProductLinesError
from src.utils.parse_context import ParseContext
from src.input_handler.document import RawDocument
from src.classifier import LineClassifier, LineRole
from src.extractor import FormatExtractor, HeaderExtractor
from src.quantity import QuantityDisambiguationEngine
from src.financial import FinancialExtractor, SummaryLineParser, validate_summary
from src.brand_resolution import BrandCatalog, BrandResolver, MasterBrandRecord
from .result import ParseDiagnostics, ParseResult

# Initialize module logger
logger = get_logger(__name__)

CatalogSnapshot = Union[BrandCatalog, Iterable[Union[MasterBrandRecord, Dict[str, Any]]], None]


class InvoiceParser:
    """
    Parses extracted ICDC invoice text into a ParseResult.

    Each stage can be replaced by passing a configured instance; stages
    left as None are built from the configuration file.

    Example:
        >>> parser = InvoiceParser()
        >>> result = parser.parse(raw_text, catalog_rows)
        >>> [(i.line.brand_number, i.cases, i.bottles) for i in result.items][:2]
        [('5016', 100, 0), ('0110', 18, 0)]
    """

    def __init__(
        self,
        classifier: Optional[LineClassifier] = None,
        format_extractor: Optional[FormatExtractor] = None,
        header_extractor: Optional[HeaderExtractor] = None,
        quantity_engine: Optional[QuantityDisambiguationEngine] = None,
        summary_parser: Optional[SummaryLineParser] = None,
        financial_extractor: Optional[FinancialExtractor] = None,
        brand_resolver: Optional[BrandResolver] = None
    ) -> None:
        self.classifier = classifier or LineClassifier()
        self.format_extractor = format_extractor or FormatExtractor()
        self.header_extractor = header_extractor or HeaderExtractor()
        self.quantity_engine = quantity_engine or QuantityDisambiguationEngine()
        self.summary_parser = summary_parser or SummaryLineParser()
        self.financial_extractor = financial_extractor or FinancialExtractor()
        self.brand_resolver = brand_resolver or BrandResolver()

    def parse(
        self,
        raw_text: str,
        catalog_snapshot: CatalogSnapshot = None,
        page_count: Optional[int] = None,
        collect_trace: bool = False
    ) -> ParseResult:
        """
        Parse raw invoice text.

        Args:
            raw_text: Text already extracted from the PDF.
            catalog_snapshot: BrandCatalog, or records / dictionaries to
                build one from. None means an empty catalog.
            page_count: Page count reported by the text extractor.
            collect_trace: Keep per-stage diagnostics on the result.

        Returns:
            ParseResult; ``success`` is False only for a document with
            no product lines.
        """
        document = RawDocument.from_text(raw_text, page_count=page_count)
        return self.parse_document(document, catalog_snapshot, collect_trace=collect_trace)

    def parse_document(
        self,
        document: RawDocument,
        catalog_snapshot: CatalogSnapshot = None,
        collect_trace: bool = False
    ) -> ParseResult:
        """
        Parse a RawDocument (as returned by InputHandler.load).

        Args:
            document: Extracted document.
            catalog_snapshot: See ``parse``.
            collect_trace: Keep per-stage diagnostics on the result.

        Returns:
            ParseResult for the document.
        """
        context = ParseContext(collect_trace=collect_trace, source=document.source)
        catalog = as_catalog(catalog_snapshot)
        logger.info(f"Parsing {document!r} against {len(catalog)} catalog records")

        classified = self.classifier.classify(document)
        diagnostics = None
        if collect_trace:
            diagnostics = ParseDiagnostics(
                raw_text=document.text,
                classification=classified.to_diagnostics(),
                trace=context.trace
            )

        header = self.header_extractor.extract(classified, context)

        try:
            raw_lines = self.format_extractor.extract(classified, context)
            if not raw_lines:
                raise NoProductLinesError(len(classified.lines))
        except NoProductLinesError as e:
            logger.error(f"{document.source or 'document'} rejected: {e}")
            return ParseResult(
                success=False,
                invoice_number=header.invoice_number,
                invoice_date=header.invoice_date,
                warnings=list(context.warnings),
                error=e.message,
                page_count=document.page_count,
                source_file=document.source,
                diagnostics=diagnostics
            )

        summary = None
        for line in classified.by_role(LineRole.SUMMARY):
            summary = self.summary_parser.parse(line.fields.get('body', ''), context, line=line.number)
            if summary is not None:
                break

        items = self.quantity_engine.resolve(raw_lines, summary, context)

        financial = self.financial_extractor.extract(classified, context)
        financial, total_check = self.financial_extractor.cross_validate(financial, context)

        summary_validation = validate_summary(items, summary)
        if summary_validation is not None and not summary_validation.matched:
            context.warn(
                "summary",
                f"Line items {summary_validation.actual} do not match printed summary "
                f"{summary_validation.expected}"
            )

        items = self.brand_resolver.resolve_all(items, catalog, context)

        result = ParseResult(
            success=True,
            invoice_number=header.invoice_number,
            invoice_date=header.invoice_date,
            financial=financial,
            items=items,
            summary_validation=summary_validation,
            warnings=list(context.warnings),
            page_count=document.page_count,
            source_file=document.source,
            summary=summary,
            total_check=total_check,
            diagnostics=diagnostics
        )
        logger.info(f"Parsed {result}")
        return result


def as_catalog(catalog_snapshot: CatalogSnapshot) -> BrandCatalog:
    """Coerce a catalog snapshot argument to a BrandCatalog."""
    if catalog_snapshot is None:
        return BrandCatalog()
    if isinstance(catalog_snapshot, BrandCatalog):
        return catalog_snapshot
    return BrandCatalog.from_dicts(catalog_snapshot)


def parse_invoice(raw_text: str, catalog_snapshot: CatalogSnapshot = None) -> ParseResult:
    """
    Parse one invoice with the configured defaults.

    Args:
        raw_text: Text already extracted from the PDF.
        catalog_snapshot: Master brand records (or a BrandCatalog).

    Returns:
        ParseResult.

    Example:
        >>> result = parse_invoice(text, [{"id": 1, "brand_number": "5016", ...}])
        >>> result.success
        True
    """
    return InvoiceParser().parse(raw_text, catalog_snapshot)
