"""
Quantity Split Candidates.

A concatenated cases/bottles token such as "1800" has no delimiter, so
every split point is a candidate reading. This module enumerates the
candidates, removes the physically impossible ones (a loose-bottle
count can never reach a full case) and ranks the rest by how close
their split point is to the conventional encoding.

Scoring:
    The conventional bottles suffix is ``canonical_bottle_digits`` long
    (2), so the preferred split point is ``k = L - 2``. Short tokens
    (``L <= 3``) and tokens ending in "00" prefer ``k = L - 1``: the
    final zero is read as "0 bottles" after a cases count that itself
    ends in zero. A candidate scores ``-|k - preferred|``; equal scores
    go to the larger ``k``.

Example:
    >>> [(c.cases, c.bottles) for c in rank_splits("1800", 12)]
    [(180, 0), (18, 0)]

Author: ML Engineering Team
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class QuantityCandidate:
    """
    One reading of a quantity token.

    Attributes:
        cases: Whole cases.
        bottles: Loose bottles, always below the pack quantity.
        split_index: Number of leading digits read as cases.
        score: Ranking score, higher is better (0 is the preferred split).
    """
    cases: int
    bottles: int
    split_index: int
    score: int

    def total_units(self, pack_quantity: int) -> int:
        return self.cases * pack_quantity + self.bottles

    def as_tuple(self) -> Tuple[int, int]:
        return (self.cases, self.bottles)


def preferred_split(token: str, canonical_bottle_digits: int = 2) -> int:
    """
    Split point the scoring is centred on.

    Args:
        token: Quantity digits.
        canonical_bottle_digits: Conventional length of the bottles suffix.

    Returns:
        Preferred number of leading digits read as cases.
    """
    length = len(token)
    trailing_zeros = "0" * canonical_bottle_digits
    if length <= canonical_bottle_digits + 1:
        return length - 1
    if token.endswith(trailing_zeros):
        return length - 1
    return length - canonical_bottle_digits


def enumerate_splits(
    token: str,
    pack_quantity: int,
    canonical_bottle_digits: int = 2
) -> List[QuantityCandidate]:
    """
    Enumerate every physically possible reading of a quantity token.

    Every split point ``k`` in ``[1, L-1]`` gives
    ``(cases = int(token[:k]), bottles = int(token[k:]))``; readings with
    ``bottles >= pack_quantity`` are discarded. Different split points
    that give the same pair (leading zeros) are reported once, under
    their best score. A one-digit token has no split point and is read
    as whole cases.

    Args:
        token: Quantity digits.
        pack_quantity: Bottles per case.
        canonical_bottle_digits: Conventional length of the bottles suffix.

    Returns:
        Surviving candidates, in split-point order.
    """
    if not token or not token.isdigit() or pack_quantity < 1:
        return []

    if len(token) == 1:
        return [QuantityCandidate(cases=int(token), bottles=0, split_index=1, score=0)]

    preferred = preferred_split(token, canonical_bottle_digits)
    best: Dict[Tuple[int, int], QuantityCandidate] = {}

    for k in range(1, len(token)):
        cases = int(token[:k])
        bottles = int(token[k:])
        if cases < 0 or bottles >= pack_quantity:
            continue

        candidate = QuantityCandidate(
            cases=cases,
            bottles=bottles,
            split_index=k,
            score=-abs(k - preferred)
        )
        existing = best.get(candidate.as_tuple())
        if existing is None or _rank_key(candidate) < _rank_key(existing):
            best[candidate.as_tuple()] = candidate

    return sorted(best.values(), key=lambda c: c.split_index)


def rank_splits(
    token: str,
    pack_quantity: int,
    canonical_bottle_digits: int = 2
) -> List[QuantityCandidate]:
    """
    Candidates ordered best first.

    Args:
        token: Quantity digits.
        pack_quantity: Bottles per case.
        canonical_bottle_digits: Conventional length of the bottles suffix.

    Returns:
        Candidates sorted by descending score, then descending split point.
    """
    candidates = enumerate_splits(token, pack_quantity, canonical_bottle_digits)
    return sorted(candidates, key=_rank_key)


def _rank_key(candidate: QuantityCandidate) -> Tuple[int, int]:
    return (-candidate.score, -candidate.split_index)
