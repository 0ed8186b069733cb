"""
Instant-runoff tabulation with round by round vote transfer graphs for Sankey charts.
"""

__version__ = "0.1.0"

from rcv_sankey.ballots import Ballot, BallotArena, Candidate, Ranking, filter_viable, validate_election
from rcv_sankey.errors import (
    EmptyCandidateSetError,
    FlowConservationError,
    MalformedBallotError,
    MalformedCandidateError,
    TabulationError,
)
from rcv_sankey.graph import FlowEdge, FlowGraph, node_label
from rcv_sankey.rcv.base import InstantRunoff, TabulationResult, tabulate
from rcv_sankey.results import base_name, label_round, winner_name, winner_node

__all__ = [
    "Ballot",
    "BallotArena",
    "Candidate",
    "Ranking",
    "filter_viable",
    "validate_election",
    "EmptyCandidateSetError",
    "FlowConservationError",
    "MalformedBallotError",
    "MalformedCandidateError",
    "TabulationError",
    "FlowEdge",
    "FlowGraph",
    "node_label",
    "InstantRunoff",
    "TabulationResult",
    "tabulate",
    "base_name",
    "label_round",
    "winner_name",
    "winner_node",
]
