"""
Main Output Handler Module.

This module provides the unified OutputHandler class that coordinates
the optional exports (Excel workbook and JSON diagnostics).

Author: ML Engineering Team
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from config import get_config
from src.utils.logger import get_logger
from src.utils.exceptions import OutputError
from src.pipeline.result import ParseResult
from .excel_exporter import ExcelExporter
from .diagnostics_exporter import DiagnosticsExporter

# Initialize module logger
logger = get_logger(__name__)


class OutputHandler:
    """
    Unified output handler for parse results.

    A failing export is logged and reported as a missing path; it never
    affects the parse results themselves.

    Attributes:
        excel_enabled: Whether Excel export is enabled
        diagnostics_enabled: Whether JSON diagnostics are written
        output_dir: Directory for all outputs

    Example:
        >>> handler = OutputHandler(excel_enabled=True, diagnostics_enabled=True)
        >>> info = handler.save(results)
        >>> info['excel_path']
        'outputs/icdc_batch.xlsx'
    """

    def __init__(
        self,
        excel_enabled: Optional[bool] = None,
        diagnostics_enabled: Optional[bool] = None,
        output_dir: Optional[Union[str, Path]] = None
    ) -> None:
        self.excel_enabled = excel_enabled if excel_enabled is not None else \
            get_config("output.excel.enabled", False)
        self.diagnostics_enabled = diagnostics_enabled if diagnostics_enabled is not None else \
            get_config("output.diagnostics.enabled", False)
        self.output_dir = Path(output_dir or get_config("paths.output_dir", "outputs"))

        # Initialize exporters (lazy loading)
        self._excel_exporter = None
        self._diagnostics_exporter = None

        logger.info(
            f"OutputHandler initialized "
            f"(excel={self.excel_enabled}, diagnostics={self.diagnostics_enabled})"
        )

    @property
    def excel_exporter(self) -> ExcelExporter:
        """Get or create the Excel exporter."""
        if self._excel_exporter is None:
            self._excel_exporter = ExcelExporter(self.output_dir)
        return self._excel_exporter

    @property
    def diagnostics_exporter(self) -> DiagnosticsExporter:
        """Get or create the diagnostics exporter."""
        if self._diagnostics_exporter is None:
            self._diagnostics_exporter = DiagnosticsExporter(self.output_dir / "diagnostics")
        return self._diagnostics_exporter

    def save(
        self,
        results: Union[ParseResult, Sequence[ParseResult]],
        excel_filename: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Save results to all enabled outputs.

        Args:
            results: Single result or list of results.
            excel_filename: Custom Excel filename (optional).

        Returns:
            Dictionary with output details:
            {
                'excel_path': 'outputs/icdc_batch.xlsx',
                'diagnostics_paths': ['outputs/diagnostics/ICDC0107...json']
            }
        """
        if isinstance(results, ParseResult):
            results = [results]
        results = list(results)

        output_info: Dict[str, Any] = {
            'excel_path': None,
            'diagnostics_paths': []
        }

        if self.excel_enabled and results:
            try:
                output_info['excel_path'] = self.excel_exporter.export(results, excel_filename)
            except OutputError as e:
                logger.error(f"Excel export failed: {e}")

        if self.diagnostics_enabled:
            output_info['diagnostics_paths'] = self.to_diagnostics(results)

        return output_info

    def to_diagnostics(self, results: Sequence[ParseResult]) -> List[str]:
        """
        Write one diagnostics file per result.

        Returns:
            Paths of the files that were written.
        """
        paths = []
        for result in results:
            try:
                paths.append(self.diagnostics_exporter.export(result))
            except OutputError as e:
                logger.error(f"Diagnostics export failed: {e}")
        return paths
