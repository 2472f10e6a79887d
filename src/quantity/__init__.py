"""
Quantity Disambiguation Module.

Recovers (cases, bottles) from concatenated digit tokens using physical
constraints, a canonical-split preference and the invoice's printed
summary totals.
"""

from .candidates import QuantityCandidate, enumerate_splits, rank_splits, preferred_split
from .solver import solve_bucket, SolveStatus, BucketSolution
from .models import ResolvedLineItem, ResolutionMethod
from .engine import QuantityDisambiguationEngine

__all__ = [
    'QuantityCandidate',
    'enumerate_splits',
    'rank_splits',
    'preferred_split',
    'solve_bucket',
    'SolveStatus',
    'BucketSolution',
    'ResolvedLineItem',
    'ResolutionMethod',
    'QuantityDisambiguationEngine'
]
