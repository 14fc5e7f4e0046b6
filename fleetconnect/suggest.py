"""Near-match suggestions for names that could not be found."""

from __future__ import annotations

from collections.abc import Iterable

MAX_SUGGESTION_DISTANCE = 3


def levenshtein_distance(first: str, second: str) -> int:
    """Case-insensitive edit distance between two strings.

    Insertions, deletions and substitutions each cost 1.
    """
    first = first.lower()
    second = second.lower()
    costs = list(range(len(second) + 1))
    for i in range(1, len(first) + 1):
        previous_diagonal = costs[0]
        costs[0] = i
        for j in range(1, len(second) + 1):
            substitution = previous_diagonal + (
                0 if first[i - 1] == second[j - 1] else 1
            )
            previous_diagonal = costs[j]
            costs[j] = min(costs[j] + 1, costs[j - 1] + 1, substitution)
    return costs[len(second)]


def similar_strings(target: str, candidates: Iterable[str]) -> list[str]:
    """Return the candidates within edit distance of *target*, sorted."""
    return sorted(
        {
            candidate
            for candidate in candidates
            if levenshtein_distance(candidate, target)
            <= MAX_SUGGESTION_DISTANCE
        }
    )
