"""
Main Evaluator Module.

This module provides the Evaluator class that pairs parse results with
ground truth fixtures, computes metrics and writes reports.

Author: ML Engineering Team
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from config import get_config
from src.utils.logger import get_logger
from src.utils.helpers import ensure_directory
from src.pipeline.result import ParseResult
from .metrics import EvaluationResult, MetricsCalculator
from .ground_truth import GroundTruthLoader, normalize_record

# Initialize module logger
logger = get_logger(__name__)

ResultLike = Union[ParseResult, Dict[str, Any]]


class Evaluator:
    """
    Evaluates parse results against ground truth.

    Attributes:
        metrics_calculator: MetricsCalculator instance
        ground_truth: GroundTruthLoader instance, if loaded

    Example:
        >>> evaluator = Evaluator("data/ground_truth.json")
        >>> evaluation = evaluator.evaluate(results)
        >>> print(evaluation.print_report())
    """

    def __init__(self, ground_truth_path: Optional[Union[str, Path]] = None) -> None:
        self.metrics_calculator = MetricsCalculator()
        self.ground_truth: Optional[GroundTruthLoader] = None

        if ground_truth_path:
            self.load_ground_truth(ground_truth_path)

        logger.debug("Evaluator initialized")

    def load_ground_truth(self, path: Union[str, Path]) -> None:
        """Load ground truth data from file."""
        self.ground_truth = GroundTruthLoader(path)
        validation = self.ground_truth.validate()

        if validation['invalid_records'] > 0:
            logger.warning(f"Ground truth has {validation['invalid_records']} incomplete records")

    def evaluate(
        self,
        results: Sequence[ResultLike],
        ground_truth: Optional[List[Dict[str, Any]]] = None
    ) -> EvaluationResult:
        """
        Evaluate parse results.

        With explicit ``ground_truth`` the lists are paired by position;
        otherwise each result is paired with the loaded record of the
        same source file and results without one are skipped.

        Args:
            results: ParseResult objects or their dictionaries.
            ground_truth: Optional records, one per result.

        Returns:
            EvaluationResult with computed metrics.

        Raises:
            ValueError: If no ground truth is available.
        """
        predictions = [r.to_dict() if isinstance(r, ParseResult) else r for r in results]

        if ground_truth is not None:
            gt_data = [normalize_record(record) for record in ground_truth]
        else:
            if self.ground_truth is None:
                raise ValueError(
                    "No ground truth available. "
                    "Load ground truth or provide it as argument."
                )

            paired, gt_data = [], []
            for pred in predictions:
                record = self.ground_truth.get_by_filename(pred.get('source_file') or '')
                if record is None:
                    logger.warning(f"No ground truth for: {pred.get('source_file')}")
                    continue
                paired.append(pred)
                gt_data.append(record)
            predictions = paired

        evaluation = self.metrics_calculator.evaluate(predictions, gt_data)

        logger.info(
            f"Evaluation complete: {evaluation.quantity_accuracy * 100:.1f}% quantity accuracy "
            f"on {evaluation.total_samples} invoices"
        )
        return evaluation

    def generate_report(
        self,
        evaluation: EvaluationResult,
        output_path: Optional[Union[str, Path]] = None,
        format: str = 'txt'
    ) -> str:
        """
        Generate an evaluation report.

        Args:
            evaluation: Evaluation result to report.
            output_path: Path for report file. If None, returns string.
            format: Report format ('txt' or 'json').

        Returns:
            Report string or path to saved file.
        """
        if format == 'txt':
            report = evaluation.print_report()
        elif format == 'json':
            indent = get_config("output.diagnostics.indent", 2)
            report = json.dumps(evaluation.to_dict(), indent=indent, sort_keys=True)
        else:
            raise ValueError(f"Unsupported format: {format}")

        if output_path:
            ensure_directory(Path(output_path).parent)
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(report)
            logger.info(f"Report saved to: {output_path}")
            return str(output_path)

        return report
