"""
Excel Exporter Module.

This module writes parse results to an Excel workbook using openpyxl.

Sheets:
    - Items: one row per resolved line item, with its brand match
    - Financial: one row per invoice with every monetary field
    - Line Classification: per-line roles (only for results parsed
      with diagnostics)

Author: ML Engineering Team
"""

from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from config import get_config
from src.utils.logger import get_logger
from src.utils.helpers import ensure_directory, safe_filename, to_serializable
from src.utils.exceptions import ExcelExportError
from src.pipeline.result import ParseResult

# Initialize module logger
logger = get_logger(__name__)


class ExcelExporter:
    """
    Exports parse results to Excel format.

    Attributes:
        output_dir: Directory for output files
        items_sheet_name: Title of the line item sheet

    Example:
        >>> exporter = ExcelExporter()
        >>> path = exporter.export(result)
        >>> print(f"Saved to: {path}")
    """

    # (header, item dict key)
    ITEM_COLUMNS = [
        ('Invoice Number', None),
        ('Item', 'item_id'),
        ('Serial', 'serial'),
        ('Brand Number', 'brand_number'),
        ('Product Name', 'product_name'),
        ('Category', 'product_category'),
        ('Pack Type', 'pack_type'),
        ('Pack Qty', 'pack_quantity'),
        ('Size (ml)', 'size_ml'),
        ('Size Code', 'size_code'),
        ('Quantity Token', 'quantity_token'),
        ('Cases', 'cases'),
        ('Bottles', 'bottles'),
        ('Total Units', 'total_units'),
        ('Resolution', 'resolution_method'),
        ('Resolution Conf.', 'resolution_confidence'),
        ('Brand Match', 'brand_method'),
        ('Master Brand Id', 'master_brand_id'),
        ('Brand Conf.', 'brand_confidence'),
        ('Needs Review', 'needs_review'),
        ('Source Line', 'source_line_number'),
    ]

    FINANCIAL_COLUMNS = [
        ('Invoice Number', 'invoice_number'),
        ('Invoice Date', 'invoice_date'),
        ('Source File', 'source_file'),
        ('Invoice Value', 'invoice_value'),
        ('MRP Rounding Off', 'mrp_rounding_off'),
        ('Net Invoice Value', 'net_invoice_value'),
        ('Retail Shop Excise Tax', 'retail_shop_excise_tax'),
        ('Retail Excise Turnover Tax', 'retail_excise_turnover_tax'),
        ('Special Excise Cess', 'special_excise_cess'),
        ('TCS', 'tcs'),
        ('Total Amount', 'total_amount'),
        ('Total Derived', 'total_amount_derived'),
        ('Summary Matched', 'summary_matched'),
        ('Warnings', 'warning_count'),
    ]

    CLASSIFICATION_COLUMNS = [
        ('Invoice Number', 'invoice_number'),
        ('Line', 'line'),
        ('Role', 'role'),
        ('Grammar', 'grammar'),
        ('Text', 'text'),
    ]

    HEADER_FILL = "4472C4"
    FINANCIAL_FILL = "548235"
    CLASSIFICATION_FILL = "C65911"

    def __init__(self, output_dir: Optional[Union[str, Path]] = None) -> None:
        """Initialize the Excel exporter with configuration."""
        self.output_dir = Path(output_dir or get_config("paths.output_dir", "outputs"))
        self.items_sheet_name = get_config("output.excel.items_sheet_name", "Items")
        self.filename_pattern = get_config("output.excel.filename_pattern", "icdc_{invoice}.xlsx")

        logger.debug(f"ExcelExporter initialized (output_dir: {self.output_dir})")

    def export(
        self,
        results: Union[ParseResult, Sequence[ParseResult]],
        filename: Optional[str] = None,
        output_dir: Optional[Union[str, Path]] = None
    ) -> str:
        """
        Export parse results to an Excel file.

        Args:
            results: Single result or list of results to export.
            filename: Output filename. If None, derived from the invoice
                number (or "batch" for several results).
            output_dir: Output directory. If None, uses configured dir.

        Returns:
            Path to the created Excel file.

        Raises:
            ExcelExportError: If there is nothing to export or the
                workbook cannot be written.
        """
        if isinstance(results, ParseResult):
            results = [results]
        results = list(results)

        if not results:
            raise ExcelExportError("No results", "No results to export")

        out_dir = ensure_directory(output_dir or self.output_dir)
        filepath = out_dir / (filename or self.default_filename(results))

        try:
            workbook = Workbook()
            self._create_items_sheet(workbook, results)
            self._create_financial_sheet(workbook, results)
            if any(result.diagnostics is not None for result in results):
                self._create_classification_sheet(workbook, results)
            workbook.save(filepath)
        except Exception as e:
            logger.error(f"Excel export failed: {e}")
            raise ExcelExportError(str(filepath), str(e))

        logger.info(f"Excel file saved: {filepath} ({len(results)} invoices)")
        return str(filepath)

    def default_filename(self, results: List[ParseResult]) -> str:
        if len(results) == 1 and results[0].invoice_number:
            invoice = results[0].invoice_number
        elif len(results) == 1 and results[0].source_file:
            invoice = Path(results[0].source_file).stem
        else:
            invoice = "batch"
        return safe_filename(self.filename_pattern.format(invoice=invoice))

    def _create_items_sheet(self, workbook: Workbook, results: List[ParseResult]) -> None:
        sheet = workbook.active
        sheet.title = self.items_sheet_name

        rows = []
        for result in results:
            for item in result.items:
                data = to_serializable(item.to_dict())
                match = data.get('brand_match') or {}
                data.update({
                    'brand_method': match.get('method'),
                    'master_brand_id': match.get('master_brand_id'),
                    'brand_confidence': match.get('confidence'),
                })
                rows.append([result.invoice_number or ''] + [
                    data.get(key) for _, key in self.ITEM_COLUMNS[1:]
                ])

        self._write_table(sheet, [name for name, _ in self.ITEM_COLUMNS], rows, self.HEADER_FILL)

    def _create_financial_sheet(self, workbook: Workbook, results: List[ParseResult]) -> None:
        sheet = workbook.create_sheet(title="Financial")

        rows = []
        for result in results:
            data = to_serializable(result.financial.to_dict())
            data.update({
                'invoice_number': result.invoice_number,
                'invoice_date': result.invoice_date,
                'source_file': result.source_file,
                'summary_matched': (
                    result.summary_validation.matched if result.summary_validation else None
                ),
                'warning_count': len(result.warnings),
            })
            rows.append([data.get(key) for _, key in self.FINANCIAL_COLUMNS])

        self._write_table(sheet, [name for name, _ in self.FINANCIAL_COLUMNS], rows, self.FINANCIAL_FILL)

    def _create_classification_sheet(self, workbook: Workbook, results: List[ParseResult]) -> None:
        sheet = workbook.create_sheet(title="Line Classification")

        rows = []
        for result in results:
            if result.diagnostics is None:
                continue
            for line in result.diagnostics.classification:
                data = dict(line, invoice_number=result.invoice_number)
                rows.append([data.get(key) for _, key in self.CLASSIFICATION_COLUMNS])

        self._write_table(
            sheet, [name for name, _ in self.CLASSIFICATION_COLUMNS], rows, self.CLASSIFICATION_FILL
        )

    @staticmethod
    def _write_table(sheet, headers: List[str], rows: List[List[Any]], fill_color: str) -> None:
        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color=fill_color, end_color=fill_color, fill_type="solid")
        header_alignment = Alignment(horizontal="center", vertical="center")
        thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        for col, header_name in enumerate(headers, 1):
            cell = sheet.cell(row=1, column=col, value=header_name)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = header_alignment
            cell.border = thin_border

        for row_num, row in enumerate(rows, 2):
            for col, value in enumerate(row, 1):
                cell = sheet.cell(row=row_num, column=col, value=value)
                cell.border = thin_border

        # Adjust column widths
        for col, header_name in enumerate(headers, 1):
            max_length = len(header_name)
            for row in rows:
                if row[col - 1] is not None:
                    max_length = max(max_length, len(str(row[col - 1])))
            sheet.column_dimensions[get_column_letter(col)].width = min(max_length + 2, 50)

        # Freeze header row
        sheet.freeze_panes = 'A2'

