"""
Exceptions raised by the tabulator.
"""


class TabulationError(RuntimeError):
    """Base class for every error raised while preparing or running a tabulation."""


class EmptyCandidateSetError(TabulationError):
    """Tabulation requested with zero candidates."""


class MalformedCandidateError(TabulationError):
    """Candidate ids or display names are not unique."""


class MalformedBallotError(TabulationError):
    """A ballot references an unknown candidate or its rankings are not in ascending rank order."""

    def __init__(self, vote_id, message: str) -> None:
        self.vote_id = vote_id
        super().__init__(f"ballot {vote_id}: {message}")


class FlowConservationError(TabulationError):
    """A flow graph vertex does not hold the sum of the edge weights flowing into it."""
