"""Errors reported back to planning poker clients."""


class PlanningPokerError(Exception):
    """A rejected client action with a human-readable message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
