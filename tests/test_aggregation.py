"""Tests for vote aggregation."""

import pytest

from planning_poker.services.aggregation import (
    NO_VOTES,
    NOT_AVAILABLE,
    VoteStatistics,
    consensus,
    statistics,
    summarize,
)


def test_consensus_empty_is_no_votes() -> None:
    assert consensus([]) == NO_VOTES


@pytest.mark.parametrize(
    ("votes", "expected"),
    [
        (["5"] * 5, "Strong"),
        (["5", "5", "5", "5", "8"], "Moderate"),
        (["5", "8"], "Weak"),
        (["1", "2", "3"], "Weak"),
    ],
)
def test_consensus_thresholds(votes: list[str], expected: str) -> None:
    assert consensus(votes) == expected


def test_statistics_skips_unknown_votes() -> None:
    assert statistics(["1", "3", "3", "?"], "fibonacci") == VoteStatistics(
        average="2.3", median="3", mode="3"
    )


def test_statistics_all_unknown_is_not_available() -> None:
    result = statistics(["?", "?"], "fibonacci")
    assert result.average == NOT_AVAILABLE
    assert result.median == NOT_AVAILABLE
    assert result.mode == NOT_AVAILABLE


def test_statistics_even_count_median_is_mean_of_middle() -> None:
    result = statistics(["5", "8"], "fibonacci")
    assert result.average == "6.5"
    assert result.median == "6.5"
    assert result.mode == "5"


def test_statistics_even_count_median_keeps_decimal() -> None:
    assert statistics(["3", "5"], "standard").median == "4.0"


def test_statistics_maps_tshirt_sizes() -> None:
    result = statistics(["S", "M", "M", "XL"], "tshirt")
    assert result.average == "4.0"
    assert result.median == "3.0"
    assert result.mode == "3"


def test_statistics_ignores_unknown_tshirt_sizes() -> None:
    result = statistics(["XXXL", "L"], "tshirt")
    assert result.average == "5.0"
    assert result.median == "5"


def test_summarize_combines_consensus_and_statistics() -> None:
    assert summarize(["5", "8"], "fibonacci") == {
        "consensus": "Weak",
        "average": "6.5",
        "median": "6.5",
        "mode": "5",
    }
