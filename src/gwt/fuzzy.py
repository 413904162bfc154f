"""Fuzzy subsequence matching for branch and worktree search."""

from typing import List, Sequence

WORD_BOUNDARY_BONUS = 10
EXACT_MATCH_BONUS = 100
PREFIX_MATCH_BONUS = 50
LENGTH_PENALTY = 0.1

_SEPARATORS = ("/", "-")


def fuzzy_match(query: str, target: str) -> bool:
    """
    Check whether query is a case-insensitive subsequence of target.

    An empty query matches everything.
    """
    if not query:
        return True

    remaining = iter(target.lower())
    return all(char in remaining for char in query.lower())


def match_score(query: str, target: str) -> float:
    """
    Score how well query matches target. Higher is better.

    Returns -1 when query does not match target and 0 for an empty query.
    Matches against long targets can also score below zero, so use
    fuzzy_match to decide whether there is a match.
    """
    if not fuzzy_match(query, target):
        return -1
    if not query:
        return 0

    query_lower = query.lower()
    target_lower = target.lower()

    score: float = 0
    query_index = 0
    consecutive = 0

    for target_index, char in enumerate(target_lower):
        if query_index == len(query_lower):
            break
        if char != query_lower[query_index]:
            consecutive = 0
            continue

        consecutive += 1
        score += 1 + consecutive
        if target_index == 0 or target_lower[target_index - 1] in _SEPARATORS:
            score += WORD_BOUNDARY_BONUS
        query_index += 1

    if target_lower == query_lower:
        score += EXACT_MATCH_BONUS
    if target_lower.startswith(query_lower):
        score += PREFIX_MATCH_BONUS

    # Shorter targets rank higher
    score -= (len(target) - len(query)) * LENGTH_PENALTY
    return score


def fuzzy_search(query: str, items: Sequence[str]) -> List[str]:
    """
    Filter items by fuzzy match and sort them by descending score.

    Ties keep their original order. An empty query returns all items unchanged.

    Example:
        >>> fuzzy_search("feat", ["main", "feature/add-user", "hotfix/urgent"])
        ['feature/add-user']
    """
    if not query:
        return list(items)

    # Long targets can score below zero and still match
    matches = [(match_score(query, item), item) for item in items if fuzzy_match(query, item)]
    matches.sort(key=lambda pair: pair[0], reverse=True)
    return [item for _, item in matches]
