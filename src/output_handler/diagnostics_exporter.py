"""
Diagnostics Exporter Module.

Writes the debugging side-channel of a parse (raw text, per-line
classification, per-stage trace, warnings) next to the parse result as
a JSON document.

Author: ML Engineering Team
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from config import get_config
from src.utils.logger import get_logger
from src.utils.helpers import ensure_directory, safe_filename, to_serializable
from src.utils.exceptions import DiagnosticsExportError
from src.pipeline.result import ParseResult

# Initialize module logger
logger = get_logger(__name__)


class DiagnosticsExporter:
    """
    Exports one parse result with its diagnostics to JSON.

    Results parsed without ``collect_trace`` are still exported; their
    raw text, classification and trace entries are empty.

    Example:
        >>> result = InvoiceParser().parse(text, catalog, collect_trace=True)
        >>> DiagnosticsExporter().export(result, output_dir="outputs/diagnostics")
        'outputs/diagnostics/ICDC010706250123456.json'
    """

    def __init__(
        self,
        output_dir: Optional[Union[str, Path]] = None,
        indent: Optional[int] = None
    ) -> None:
        self.output_dir = Path(output_dir or get_config("paths.output_dir", "outputs"))
        self.indent = indent if indent is not None else get_config("output.diagnostics.indent", 2)

    def build(self, result: ParseResult) -> Dict[str, Any]:
        """
        Assemble the diagnostics document.

        Returns:
            JSON-ready dictionary.
        """
        diagnostics = result.diagnostics
        if diagnostics is None:
            logger.debug(f"{result.source_file or result.invoice_number}: no diagnostics collected")

        return to_serializable({
            'source_file': result.source_file,
            'invoice_number': result.invoice_number,
            'raw_text': diagnostics.raw_text if diagnostics else None,
            'classification': diagnostics.classification if diagnostics else [],
            'trace': diagnostics.trace if diagnostics else {},
            'warnings': list(result.warnings),
            'result': result.to_dict(),
        })

    def export(
        self,
        result: ParseResult,
        filename: Optional[str] = None,
        output_dir: Optional[Union[str, Path]] = None
    ) -> str:
        """
        Write the diagnostics document.

        Args:
            result: Parse result, ideally parsed with ``collect_trace``.
            filename: Output filename; defaults to "<invoice>.json".
            output_dir: Output directory; defaults to the configured one.

        Returns:
            Path to the written file.

        Raises:
            DiagnosticsExportError: If the file cannot be written.
        """
        out_dir = ensure_directory(output_dir or self.output_dir)
        if filename is None:
            stem = result.invoice_number or (
                Path(result.source_file).stem if result.source_file else "invoice"
            )
            filename = safe_filename(f"{stem}.json")
        filepath = out_dir / filename

        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(self.build(result), f, indent=self.indent, sort_keys=True, ensure_ascii=False)
        except OSError as e:
            logger.error(f"Diagnostics export failed: {e}")
            raise DiagnosticsExportError(str(filepath), str(e))

        logger.info(f"Diagnostics saved: {filepath}")
        return str(filepath)
