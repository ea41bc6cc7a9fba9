"""Bounded edit distance and the fuzzy confidence derived from it."""

from __future__ import annotations

DEFAULT_MAX_DISTANCE = 10
# Share of the query length that may be edited before a match scores zero.
TYPO_BUDGET_RATIO = 0.3
MIN_TYPO_BUDGET = 2


def bounded_edit_distance(a: str, b: str, max_distance: int = DEFAULT_MAX_DISTANCE) -> int:
    """Levenshtein distance between ``a`` and ``b``, capped at ``max_distance + 1``.

    Only two rows of ``min(len(a), len(b)) + 1`` cells are kept. The scan
    stops as soon as a whole row exceeds the bound, so the exact distance is
    never computed past it.
    """
    if a == b:
        return 0
    over = max_distance + 1
    if abs(len(a) - len(b)) > max_distance:
        return over

    shorter, longer = (a, b) if len(a) < len(b) else (b, a)
    previous = list(range(len(shorter) + 1))
    for i, long_char in enumerate(longer, start=1):
        current = [i]
        row_min = i
        for j, short_char in enumerate(shorter, start=1):
            cost = 0 if long_char == short_char else 1
            value = min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost)
            current.append(value)
            if value < row_min:
                row_min = value
        if row_min > max_distance:
            return over
        previous = current

    distance = previous[-1]
    return distance if distance <= max_distance else over


def typo_budget(query: str) -> int:
    return max(MIN_TYPO_BUDGET, int(len(query) * TYPO_BUDGET_RATIO))


def fuzzy_score(query: str, target: str) -> float:
    """Similarity in ``[0, 1]``: 1.0 for containment, then 0.1 less per edit.

    Zero once the distance exceeds ``max(2, floor(0.3 * len(query)))``.
    """
    if query in target:
        return 1.0
    budget = typo_budget(query)
    distance = bounded_edit_distance(query, target, budget)
    if distance > budget:
        return 0.0
    return max(0.0, (8 - distance) / 10)
