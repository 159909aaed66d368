"""Vote aggregation shown with revealed results."""

from collections.abc import Iterable
from dataclasses import dataclass

from planning_poker.domain.voting import TSHIRT_VALUES, UNKNOWN_VOTE, VotingSystem

NO_VOTES = "No votes"
NOT_AVAILABLE = "N/A"
STRONG_RATIO = 0.2
MODERATE_RATIO = 0.4


@dataclass(frozen=True)
class VoteStatistics:
    """Display-ready descriptive statistics."""

    average: str
    median: str
    mode: str


def consensus(votes: Iterable[str]) -> str:
    """Classify agreement by the ratio of distinct values to votes."""
    values = list(votes)
    if not values:
        return NO_VOTES
    ratio = len(set(values)) / len(values)
    if ratio <= STRONG_RATIO:
        return "Strong"
    if ratio <= MODERATE_RATIO:
        return "Moderate"
    return "Weak"


def statistics(votes: Iterable[str], voting_system: str) -> VoteStatistics:
    """Return average, median and mode of the numeric votes."""
    numbers = _numeric_votes(votes, voting_system)
    if not numbers:
        return VoteStatistics(
            average=NOT_AVAILABLE, median=NOT_AVAILABLE, mode=NOT_AVAILABLE
        )

    average = f"{sum(numbers) / len(numbers):.1f}"

    ordered = sorted(numbers)
    middle = len(ordered) // 2
    if len(ordered) % 2 == 0:
        median = f"{(ordered[middle - 1] + ordered[middle]) / 2:.1f}"
    else:
        median = _format_number(ordered[middle])

    counts: dict[float, int] = {}
    for number in numbers:
        counts[number] = counts.get(number, 0) + 1
    mode = max(counts, key=lambda number: counts[number])

    return VoteStatistics(average=average, median=median, mode=_format_number(mode))


def summarize(votes: Iterable[str], voting_system: str) -> dict[str, str]:
    """Return consensus and statistics as one payload."""
    values = list(votes)
    stats = statistics(values, voting_system)
    return {
        "consensus": consensus(values),
        "average": stats.average,
        "median": stats.median,
        "mode": stats.mode,
    }


def _numeric_votes(votes: Iterable[str], voting_system: str) -> list[float]:
    numbers = []
    for vote in votes:
        if vote == UNKNOWN_VOTE:
            continue
        if voting_system == VotingSystem.TSHIRT.value:
            size = TSHIRT_VALUES.get(vote)
            if size is not None:
                numbers.append(float(size))
            continue
        try:
            numbers.append(float(vote))
        except ValueError:
            continue
    return numbers


def _format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return str(value)
