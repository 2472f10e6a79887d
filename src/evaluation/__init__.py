"""
Evaluation Module for the ICDC Invoice Parser.

This module measures parser quality on a corpus of checked invoices:
    - Item recall and quantity accuracy
    - Brand link rate
    - Summary agreement

Author: ML Engineering Team
"""

from .evaluator import Evaluator
from .metrics import MetricsCalculator, EvaluationResult, InvoiceMetrics
from .ground_truth import GroundTruthLoader

__all__ = ['Evaluator', 'MetricsCalculator', 'EvaluationResult', 'InvoiceMetrics', 'GroundTruthLoader']
