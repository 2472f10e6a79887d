"""
Summary-Constrained Split Solver.

Given the candidate readings of every line in one summary bucket and
the bucket's printed totals, find the assignment of one candidate per
line whose cases and bottles add up to the totals exactly.

The search is a dynamic program over partial sums. Each state keeps the
number of ways it can be reached (capped at 2, which is all uniqueness
needs) and a back-pointer, so a unique solution can be read back
without enumerating the cross product. Partial sums above the targets
are pruned; all candidate values are non-negative.

Author: ML Engineering Team
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from .candidates import QuantityCandidate

# (cases, bottles) partial sum
_State = Tuple[int, int]


class SolveStatus(Enum):
    UNIQUE = "unique"
    AMBIGUOUS = "ambiguous"
    NO_SOLUTION = "no_solution"


@dataclass(frozen=True)
class BucketSolution:
    """
    Outcome of a bucket solve.

    Attributes:
        status: Whether exactly one, several or no assignment matched.
        choices: For UNIQUE, the index of the chosen candidate per line.
    """
    status: SolveStatus
    choices: Optional[Tuple[int, ...]] = None


def solve_bucket(
    candidate_lists: Sequence[Sequence[QuantityCandidate]],
    target_cases: int,
    target_bottles: int
) -> BucketSolution:
    """
    Find the unique candidate assignment matching a bucket's totals.

    Args:
        candidate_lists: Candidates per line, in line order.
        target_cases: Printed cases total for the bucket.
        target_bottles: Printed bottles total for the bucket.

    Returns:
        BucketSolution; choices are only set when the solution is unique.

    Example:
        >>> lines = [rank_splits("1800", 12), rank_splits("120", 12)]
        >>> solve_bucket(lines, 192, 0).choices
        (0, 0)
    """
    # Per layer: state -> (ways capped at 2, parent state, candidate index)
    layers: List[Dict[_State, Tuple[int, Optional[_State], Optional[int]]]] = [
        {(0, 0): (1, None, None)}
    ]

    for candidates in candidate_lists:
        next_layer: Dict[_State, Tuple[int, Optional[_State], Optional[int]]] = {}
        for state, (ways, _, _) in layers[-1].items():
            for choice, candidate in enumerate(candidates):
                cases = state[0] + candidate.cases
                bottles = state[1] + candidate.bottles
                if cases > target_cases or bottles > target_bottles:
                    continue

                key = (cases, bottles)
                if key in next_layer:
                    seen_ways, parent, parent_choice = next_layer[key]
                    next_layer[key] = (min(2, seen_ways + ways), parent, parent_choice)
                else:
                    next_layer[key] = (min(2, ways), state, choice)

        if not next_layer:
            return BucketSolution(SolveStatus.NO_SOLUTION)
        layers.append(next_layer)

    final = layers[-1].get((target_cases, target_bottles))
    if final is None:
        return BucketSolution(SolveStatus.NO_SOLUTION)
    if final[0] > 1:
        return BucketSolution(SolveStatus.AMBIGUOUS)

    choices: List[int] = []
    state: Optional[_State] = (target_cases, target_bottles)
    for layer in reversed(layers[1:]):
        _, parent, choice = layer[state]
        choices.append(choice)
        state = parent
    choices.reverse()

    return BucketSolution(SolveStatus.UNIQUE, tuple(choices))
