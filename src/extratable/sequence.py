"""Sequence alignment for table rows and headers using an LCS algorithm.

The same routine aligns header sequences (column reconciliation) and row
value tuples (row reconciliation). Matching is driven by a predicate rather
than by hashing, so callers can treat some entries as wildcards.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from extratable.types import AlignedPair

T = TypeVar("T")
U = TypeVar("U")


def lcs_lengths(
    expected: Sequence[T],
    actual: Sequence[U],
    match: Callable[[T, U], bool],
) -> list[list[int]]:
    """Build the suffix table of longest common subsequence lengths.

    ``lengths[i][j]`` is the LCS length of ``expected[i:]`` and
    ``actual[j:]``.
    """
    n, m = len(expected), len(actual)
    lengths = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n - 1, -1, -1):
        row = lengths[i]
        below = lengths[i + 1]
        for j in range(m - 1, -1, -1):
            if match(expected[i], actual[j]):
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])
    return lengths


def align_sequences(
    expected: Sequence[Any],
    actual: Sequence[Any],
    match: Callable[[Any, Any], bool] = operator.eq,
) -> list[AlignedPair]:
    """Align two sequences along their longest common subsequence.

    Returns a list of AlignedPair in output order where:
    - (i, None) means expected[i] was removed
    - (None, j) means actual[j] was inserted
    - (i, j) means expected[i] matches actual[j]

    Between two matched pairs every removal is emitted before every
    insertion, so each divergence reads as "minus lines, then plus lines".

    Args:
        expected: The reference sequence
        actual: The sequence compared against it
        match: Predicate deciding whether two entries are the same

    Returns:
        Ordered alignment covering every index of both sequences once
    """
    lengths = lcs_lengths(expected, actual, match)

    result: list[AlignedPair] = []
    removed: list[AlignedPair] = []
    inserted: list[AlignedPair] = []

    def flush() -> None:
        result.extend(removed)
        result.extend(inserted)
        removed.clear()
        inserted.clear()

    i, j = 0, 0
    while i < len(expected) and j < len(actual):
        if match(expected[i], actual[j]):
            flush()
            result.append(AlignedPair(i, j))
            i += 1
            j += 1
        elif lengths[i + 1][j] >= lengths[i][j + 1]:
            removed.append(AlignedPair(i, None))
            i += 1
        else:
            inserted.append(AlignedPair(None, j))
            j += 1

    removed.extend(AlignedPair(k, None) for k in range(i, len(expected)))
    inserted.extend(AlignedPair(None, k) for k in range(j, len(actual)))
    flush()

    return result
