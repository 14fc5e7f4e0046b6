"""Tests for fleetconnect.suggest."""

from __future__ import annotations

from fleetconnect.suggest import levenshtein_distance, similar_strings


class TestLevenshteinDistance:
    def test_identical(self) -> None:
        assert levenshtein_distance("backend", "backend") == 0

    def test_empty(self) -> None:
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("abc", "") == 3

    def test_substitution_insertion_deletion(self) -> None:
        assert levenshtein_distance("kitten", "sitting") == 3

    def test_transposition_costs_two(self) -> None:
        assert levenshtein_distance("publishing-api", "publsihing-api") == 2

    def test_case_insensitive(self) -> None:
        assert levenshtein_distance("Backend", "BACKEND") == 0


class TestSimilarStrings:
    def test_finds_near_matches(self) -> None:
        result = similar_strings(
            "publishing-api",
            {"publishing-api-2", "publsihing-api", "frontend"},
        )
        assert "publsihing-api" in result
        assert "publishing-api-2" in result
        assert "frontend" not in result

    def test_threshold_is_three(self) -> None:
        assert similar_strings("abcdef", ["abc"]) == ["abc"]
        assert similar_strings("abcdefg", ["abc"]) == []

    def test_sorted_and_deduplicated(self) -> None:
        candidates = ["backends", "backend", "backend"]
        assert similar_strings("backend", candidates) == [
            "backend",
            "backends",
        ]

    def test_no_candidates(self) -> None:
        assert similar_strings("backend", []) == []
