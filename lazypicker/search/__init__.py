"""Fuzzy ranking used by the picker engine."""

from .fuzzy import (
    Candidate,
    FuzzyMatcher,
    FuzzyMatchResult,
    best_score,
    fold_case,
    match_positions,
    merge_ranked,
    rank,
    score_key,
    sort_results,
)

__all__ = [
    "Candidate",
    "FuzzyMatcher",
    "FuzzyMatchResult",
    "best_score",
    "fold_case",
    "match_positions",
    "merge_ranked",
    "rank",
    "score_key",
    "sort_results",
]
