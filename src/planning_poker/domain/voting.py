"""Card scales for the supported voting systems."""

from enum import Enum

UNKNOWN_VOTE = "?"


class VotingSystem(str, Enum):
    """Enumerated voting systems a session can use."""

    FIBONACCI = "fibonacci"
    TSHIRT = "tshirt"
    STANDARD = "standard"


CARD_VALUES: dict[VotingSystem, tuple[str, ...]] = {
    VotingSystem.FIBONACCI: ("0", "1", "2", "3", "5", "8", "13", "21", UNKNOWN_VOTE),
    VotingSystem.TSHIRT: ("XS", "S", "M", "L", "XL", "XXL", UNKNOWN_VOTE),
    VotingSystem.STANDARD: (
        "0",
        "1",
        "2",
        "3",
        "4",
        "5",
        "6",
        "7",
        "8",
        "9",
        "10",
        UNKNOWN_VOTE,
    ),
}

TSHIRT_VALUES: dict[str, int] = {
    "XS": 1,
    "S": 2,
    "M": 3,
    "L": 5,
    "XL": 8,
    "XXL": 13,
}


def card_values(voting_system: str) -> tuple[str, ...]:
    """Return the card scale for a voting system, defaulting to fibonacci."""
    try:
        return CARD_VALUES[VotingSystem(voting_system)]
    except ValueError:
        return CARD_VALUES[VotingSystem.FIBONACCI]


def is_valid_card(voting_system: str, value: str) -> bool:
    """Return true when the value belongs to the system's scale."""
    return value in card_values(voting_system)
