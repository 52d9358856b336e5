"""Tests for fuzzy scoring and ranking.

Covers substring vs subsequence precedence, length-preserving case folding,
the neutral empty query, stable tie ordering, and merging of ranked pages.
"""

from __future__ import annotations

import unittest

from lazypicker.search.fuzzy import (
    Candidate,
    FuzzyMatcher,
    FuzzyMatchResult,
    fold_case,
    match_positions,
    merge_ranked,
    rank,
    score_key,
    sort_results,
)


def _identity_keys(item: str) -> tuple[str, ...]:
    return (item,)


class ScoreKeyTests(unittest.TestCase):
    def test_substring_score_rewards_early_and_short_matches(self) -> None:
        self.assertEqual(score_key("mystorage", "stor"), 1000 + 100 - 2 - 9)
        self.assertGreater(score_key("storage", "stor"), score_key("mystorage", "stor"))
        self.assertGreater(score_key("stor", "stor"), score_key("storage-account", "stor"))

    def test_substring_length_penalty_is_capped(self) -> None:
        long_key = "ab" + "x" * 200
        self.assertEqual(score_key(long_key, "ab"), 1000 + 100 - 0 - 50)

    def test_subsequence_counts_chars_and_run_bonus(self) -> None:
        # s,t matched as a run (2 + 2 + 1), then r after a gap (2), g as a run (2 + 1).
        self.assertEqual(score_key("st-rg", "strg"), 10)
        self.assertEqual(score_key("s-t-r-g", "strg"), 8)

    def test_subsequence_must_consume_whole_query(self) -> None:
        self.assertIsNone(score_key("strgacct", "stor"))
        self.assertIsNone(score_key("abc", "abcd"))

    def test_case_insensitive(self) -> None:
        self.assertIsNotNone(score_key("MyStorage", "storage"))

    def test_non_ascii_keys_use_their_own_length_and_positions(self) -> None:
        self.assertEqual(score_key("ÄPFEL", "äpf"), 1000 + 100 - 0 - 5)
        self.assertEqual(score_key("Straße", "straße"), 1000 + 100 - 0 - 6)
        self.assertIsNone(score_key("Straße", "strasse"))

    def test_fold_case_keeps_length(self) -> None:
        self.assertEqual(fold_case("İstanbul"), "İstanbul")
        self.assertEqual(fold_case("ÄPFEL"), "äpfel")


class RankTests(unittest.TestCase):
    def test_empty_query_passes_all_items_through_with_zero_score(self) -> None:
        items = ["b", "a", "c", "a"]

        results = list(rank(items, _identity_keys, ""))

        self.assertEqual([result.item for result in results], items)
        self.assertTrue(all(result.score == 0 for result in results))

    def test_whitespace_query_is_neutral(self) -> None:
        results = list(rank(["x", "y"], _identity_keys, "   "))
        self.assertEqual(len(results), 2)

    def test_substring_beats_subsequence(self) -> None:
        items = ["strgacct", "mystorage", "s-t-r-g-a-c-c-t"]

        ranked = sort_results(rank(items, _identity_keys, "stor"))

        self.assertEqual(ranked[0].item, "mystorage")

    def test_subsequence_candidates_rank_below_substring_hits(self) -> None:
        items = ["s-t-o-r", "xstor"]

        ranked = sort_results(rank(items, _identity_keys, "stor"))

        self.assertEqual([result.item for result in ranked], ["xstor", "s-t-o-r"])

    def test_items_matching_no_key_are_excluded(self) -> None:
        ranked = list(rank(["alpha", "beta"], _identity_keys, "zz"))
        self.assertEqual(ranked, [])

    def test_best_key_wins_and_empty_keys_are_skipped(self) -> None:
        accounts = [("acct1", "", "rg-storage"), ("storage", "", "")]

        ranked = sort_results(rank(accounts, lambda item: item, "storage"))

        self.assertEqual(ranked[0].item, ("storage", "", ""))
        self.assertEqual(len(ranked), 2)

    def test_equal_scores_keep_input_order(self) -> None:
        items = ["xab", "yab", "zab"]

        ranked = sort_results(rank(items, _identity_keys, "ab"))

        self.assertEqual([result.item for result in ranked], items)

    def test_rank_is_lazy(self) -> None:
        seen: list[str] = []

        def keys(item: str) -> tuple[str, ...]:
            seen.append(item)
            return (item,)

        results = rank(["a", "b", "c"], keys, "a")
        self.assertEqual(seen, [])
        next(results)
        self.assertEqual(seen, ["a"])

    def test_matcher_facade_delegates_to_rank(self) -> None:
        results = list(FuzzyMatcher().rank(["MyStorage"], _identity_keys, "storage"))
        self.assertEqual(len(results), 1)


class MergeAndHighlightTests(unittest.TestCase):
    def test_merge_ranked_keeps_existing_first_on_ties(self) -> None:
        existing = [FuzzyMatchResult("old-a", 10), FuzzyMatchResult("old-b", 5)]
        new = [FuzzyMatchResult("new-a", 10), FuzzyMatchResult("new-b", 7)]

        merged = merge_ranked(existing, new)

        self.assertEqual([result.item for result in merged], ["old-a", "new-a", "new-b", "old-b"])

    def test_match_positions_for_substring_and_subsequence(self) -> None:
        self.assertEqual(match_positions("MyStorage", "stor"), [2, 3, 4, 5])
        self.assertEqual(match_positions("s-t-r", "str"), [0, 2, 4])
        self.assertEqual(match_positions("abc", "zz"), [])
        self.assertEqual(match_positions("abc", ""), [])

    def test_match_positions_index_into_the_original_key(self) -> None:
        self.assertEqual(match_positions("ßx", "x"), [1])
        self.assertEqual(match_positions("ÄPFEL", "pf"), [1, 2])
        self.assertEqual(list(rank(["Straße"], _identity_keys, "strasse")), [])

    def test_candidate_from_item_drops_empty_keys(self) -> None:
        candidate = Candidate.from_item(("name", "", "group"), lambda item: item)
        self.assertEqual(candidate.keys, ("name", "group"))


if __name__ == "__main__":
    unittest.main()
