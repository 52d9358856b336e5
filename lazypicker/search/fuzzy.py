"""Case-insensitive substring/subsequence ranking for picker candidates.

Scores are integers where higher ranks earlier. A substring hit always beats
a subsequence hit; ties keep input order so results are deterministic.
"""

from __future__ import annotations

import heapq
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

SUBSTRING_BASE_SCORE = 1000
SUBSTRING_POSITION_BONUS = 100
SUBSTRING_LENGTH_CAP = 50
SUBSEQUENCE_CHAR_SCORE = 2
SUBSEQUENCE_RUN_BONUS = 1


@dataclass(frozen=True)
class FuzzyMatchResult(Generic[T]):
    """One ranked item and its best score across searchable keys."""

    item: T
    score: int


@dataclass(frozen=True)
class Candidate(Generic[T]):
    """Domain item plus the text keys it can be searched by."""

    item: T
    keys: tuple[str, ...]

    @classmethod
    def from_item(cls, item: T, key_extractor: Callable[[T], Iterable[str]]) -> Candidate[T]:
        return cls(item=item, keys=tuple(key for key in key_extractor(item) if key))


def fold_case(text: str) -> str:
    """Lower-case ``text`` one character at a time, keeping its length.

    Characters whose lower case form is longer than one character are kept
    as they are, so indices into the result are indices into ``text``.
    """
    folded: list[str] = []
    for ch in text:
        lowered = ch.lower()
        folded.append(lowered if len(lowered) == 1 else ch)
    return "".join(folded)


def score_key(key: str, query: str) -> int | None:
    """Score one key against an already folded, non-empty query.

    Returns ``None`` when ``query`` is neither a substring nor a subsequence.
    """
    key_folded = fold_case(key)
    idx = key_folded.find(query)
    if idx >= 0:
        return (
            SUBSTRING_BASE_SCORE
            + SUBSTRING_POSITION_BONUS
            - idx
            - min(len(key_folded), SUBSTRING_LENGTH_CAP)
        )

    score = 0
    run = 0
    qi = 0
    for ch in key_folded:
        if qi >= len(query):
            break
        if ch == query[qi]:
            qi += 1
            run += 1
            score += SUBSEQUENCE_CHAR_SCORE
            if run > 1:
                score += SUBSEQUENCE_RUN_BONUS
        else:
            run = 0
    if qi < len(query):
        return None
    return score


def best_score(keys: Iterable[str], query: str) -> int | None:
    """Return the maximum key score, or ``None`` when no key matches."""
    best: int | None = None
    for key in keys:
        if not key:
            continue
        score = score_key(key, query)
        if score is not None and (best is None or score > best):
            best = score
    return best


def rank(
    items: Iterable[T],
    key_extractor: Callable[[T], Iterable[str]],
    query: str,
) -> Iterator[FuzzyMatchResult[T]]:
    """Lazily yield matching items in input order with their scores.

    An empty (or whitespace-only) query passes every item through with score 0.
    Callers sort with :func:`sort_results` when they need rank order.
    """
    needle = fold_case((query or "").strip())
    if not needle:
        for item in items:
            yield FuzzyMatchResult(item, 0)
        return

    for item in items:
        candidate = Candidate.from_item(item, key_extractor)
        score = best_score(candidate.keys, needle)
        if score is not None:
            yield FuzzyMatchResult(candidate.item, score)


def sort_results(results: Iterable[FuzzyMatchResult[T]]) -> list[FuzzyMatchResult[T]]:
    """Sort by descending score; ``sorted`` is stable so ties keep input order."""
    return sorted(results, key=lambda result: -result.score)


def merge_ranked(
    existing: Iterable[FuzzyMatchResult[T]],
    new: Iterable[FuzzyMatchResult[T]],
) -> list[FuzzyMatchResult[T]]:
    """Merge two rank-ordered lists, keeping ``existing`` first on equal scores."""
    return list(heapq.merge(existing, new, key=lambda result: -result.score))


def match_positions(key: str, query: str) -> list[int]:
    """Return indices in ``key`` that the query matched, for highlighting."""
    needle = fold_case((query or "").strip())
    if not needle:
        return []
    key_folded = fold_case(key)
    idx = key_folded.find(needle)
    if idx >= 0:
        return list(range(idx, idx + len(needle)))

    positions: list[int] = []
    qi = 0
    for pos, ch in enumerate(key_folded):
        if qi >= len(needle):
            break
        if ch == needle[qi]:
            positions.append(pos)
            qi += 1
    return positions if qi == len(needle) else []


class FuzzyMatcher:
    """Object facade over :func:`rank` so engines can take an injectable matcher."""

    def rank(
        self,
        items: Iterable[T],
        key_extractor: Callable[[T], Iterable[str]],
        query: str,
    ) -> Iterator[FuzzyMatchResult[T]]:
        return rank(items, key_extractor, query)
