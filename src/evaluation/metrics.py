"""
Metrics Calculator Module.

This module compares parsed line items with ground truth items.

Metrics Include:
    - Item recall (ground truth items found, by brand number and size)
    - Quantity accuracy (found items with the right cases and bottles)
    - Brand link rate (parsed items with a catalog match)
    - Summary agreement (invoices whose items match the printed summary)

Author: ML Engineering Team
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from src.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

ItemKey = Tuple[str, int]


@dataclass
class InvoiceMetrics:
    """
    Comparison of one invoice with its ground truth.

    Attributes:
        source_file: Invoice file name
        expected_items: Ground truth item count
        predicted_items: Parsed item count
        matched_items: Ground truth items found in the parse
        quantity_correct: Matched items with exact cases and bottles
        brand_linked: Parsed items with an exact or fuzzy brand match
        summary_matched: Summary validation outcome, None if no summary
        missing: Ground truth keys not found
        unexpected: Parsed keys not in the ground truth
        quantity_errors: (key, expected, predicted) for wrong quantities
    """
    source_file: Optional[str]
    expected_items: int = 0
    predicted_items: int = 0
    matched_items: int = 0
    quantity_correct: int = 0
    brand_linked: int = 0
    summary_matched: Optional[bool] = None
    missing: List[ItemKey] = field(default_factory=list)
    unexpected: List[ItemKey] = field(default_factory=list)
    quantity_errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def quantity_accuracy(self) -> float:
        return self.quantity_correct / self.expected_items if self.expected_items else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'source_file': self.source_file,
            'expected_items': self.expected_items,
            'predicted_items': self.predicted_items,
            'matched_items': self.matched_items,
            'quantity_correct': self.quantity_correct,
            'quantity_accuracy': self.quantity_accuracy,
            'brand_linked': self.brand_linked,
            'summary_matched': self.summary_matched,
            'missing': [list(key) for key in self.missing],
            'unexpected': [list(key) for key in self.unexpected],
            'quantity_errors': self.quantity_errors,
        }


@dataclass
class EvaluationResult:
    """
    Corpus-level evaluation results.

    Attributes:
        invoices: Per-invoice metrics in evaluation order
    """
    invoices: List[InvoiceMetrics] = field(default_factory=list)

    @property
    def total_samples(self) -> int:
        return len(self.invoices)

    @property
    def expected_items(self) -> int:
        return sum(m.expected_items for m in self.invoices)

    @property
    def predicted_items(self) -> int:
        return sum(m.predicted_items for m in self.invoices)

    @property
    def item_recall(self) -> float:
        expected = self.expected_items
        return sum(m.matched_items for m in self.invoices) / expected if expected else 0.0

    @property
    def quantity_accuracy(self) -> float:
        expected = self.expected_items
        return sum(m.quantity_correct for m in self.invoices) / expected if expected else 0.0

    @property
    def brand_link_rate(self) -> float:
        predicted = self.predicted_items
        return sum(m.brand_linked for m in self.invoices) / predicted if predicted else 0.0

    @property
    def summary_agreement(self) -> Optional[float]:
        """Share of invoices with a summary whose items matched it."""
        checked = [m.summary_matched for m in self.invoices if m.summary_matched is not None]
        if not checked:
            return None
        return sum(1 for matched in checked if matched) / len(checked)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_samples': self.total_samples,
            'expected_items': self.expected_items,
            'predicted_items': self.predicted_items,
            'item_recall': self.item_recall,
            'quantity_accuracy': self.quantity_accuracy,
            'brand_link_rate': self.brand_link_rate,
            'summary_agreement': self.summary_agreement,
            'invoices': [m.to_dict() for m in self.invoices],
        }

    def print_report(self) -> str:
        """Generate a formatted report string."""
        agreement = self.summary_agreement
        lines = [
            "=" * 60,
            "ICDC PARSER EVALUATION REPORT",
            "=" * 60,
            f"Invoices:          {self.total_samples}",
            f"Items expected:    {self.expected_items}",
            f"Items parsed:      {self.predicted_items}",
            "-" * 60,
            f"  Item Recall:       {self.item_recall * 100:.1f}%",
            f"  Quantity Accuracy: {self.quantity_accuracy * 100:.1f}%",
            f"  Brand Link Rate:   {self.brand_link_rate * 100:.1f}%",
            f"  Summary Agreement: "
            + (f"{agreement * 100:.1f}%" if agreement is not None else "n/a"),
            "-" * 60,
        ]

        for m in self.invoices:
            lines.append(
                f"  {m.source_file or '-'}: {m.quantity_correct}/{m.expected_items} quantities, "
                f"{len(m.missing)} missing, {len(m.unexpected)} unexpected"
            )

        lines.append("=" * 60)
        return "\n".join(lines)


class MetricsCalculator:
    """
    Compares parse result dictionaries with ground truth records.

    Items are paired by (brand number, size) in printed order, so an
    invoice listing the same brand and size twice pairs them one to one.

    Example:
        >>> calculator = MetricsCalculator()
        >>> metrics = calculator.compare(result.to_dict(), gt_record)
        >>> metrics.quantity_accuracy
        1.0
    """

    def compare(self, prediction: Dict[str, Any], ground_truth: Dict[str, Any]) -> InvoiceMetrics:
        """
        Compare one parse result with its ground truth.

        Args:
            prediction: ``ParseResult.to_dict()`` output.
            ground_truth: Normalized ground truth record.

        Returns:
            InvoiceMetrics for the invoice.
        """
        predicted_items = prediction.get('items', [])
        expected_items = ground_truth.get('items', [])
        validation = prediction.get('summary_validation')

        metrics = InvoiceMetrics(
            source_file=prediction.get('source_file') or ground_truth.get('source_file'),
            expected_items=len(expected_items),
            predicted_items=len(predicted_items),
            summary_matched=validation.get('matched') if validation else None,
        )

        pool: Dict[ItemKey, List[Dict[str, Any]]] = defaultdict(list)
        for item in predicted_items:
            pool[self._key(item)].append(item)

        for expected in expected_items:
            key = self._key(expected)
            if not pool.get(key):
                metrics.missing.append(key)
                continue

            predicted = pool[key].pop(0)
            metrics.matched_items += 1
            if (predicted.get('cases'), predicted.get('bottles')) == (expected['cases'], expected['bottles']):
                metrics.quantity_correct += 1
            else:
                metrics.quantity_errors.append({
                    'brand_number': key[0],
                    'size_ml': key[1],
                    'expected': [expected['cases'], expected['bottles']],
                    'predicted': [predicted.get('cases'), predicted.get('bottles')],
                    'token': predicted.get('quantity_token'),
                })

        for key, leftover in sorted(pool.items()):
            metrics.unexpected.extend([key] * len(leftover))

        for item in predicted_items:
            match = item.get('brand_match') or {}
            if match.get('method') in ('exact', 'fuzzy'):
                metrics.brand_linked += 1

        logger.debug(
            f"{metrics.source_file}: {metrics.quantity_correct}/{metrics.expected_items} quantities correct"
        )
        return metrics

    def evaluate(
        self,
        predictions: List[Dict[str, Any]],
        ground_truth: List[Dict[str, Any]]
    ) -> EvaluationResult:
        """
        Evaluate paired predictions and ground truth records.

        Raises:
            ValueError: If the two lists differ in length.
        """
        if len(predictions) != len(ground_truth):
            raise ValueError(
                f"Predictions ({len(predictions)}) and ground truth "
                f"({len(ground_truth)}) must have same length"
            )
        return EvaluationResult(
            invoices=[self.compare(pred, gt) for pred, gt in zip(predictions, ground_truth)]
        )

    @staticmethod
    def _key(item: Dict[str, Any]) -> ItemKey:
        return (str(item.get('brand_number')), int(item.get('size_ml') or 0))
