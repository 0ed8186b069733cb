"""
Contains the Candidate, Ranking and Ballot records and the BallotArena class.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

import dataclasses

from rcv_sankey.errors import EmptyCandidateSetError, MalformedBallotError, MalformedCandidateError


@dataclasses.dataclass(frozen=True)
class Candidate:
    """A candidate standing in the election. Read only for the duration of a tabulation."""

    id: int
    name: str


@dataclasses.dataclass(frozen=True)
class Ranking:
    """One preference on a ballot. `rank` is 1-based."""

    candidate_id: int
    rank: int


@dataclasses.dataclass(frozen=True)
class Ballot:
    """One voter's preferences. `rankings` must already be ordered by ascending rank."""

    vote_id: int
    rankings: Tuple[Ranking, ...] = ()

    def __post_init__(self) -> None:
        # accept any sequence, store as tuple so the ballot stays hashable
        object.__setattr__(self, "rankings", tuple(self.rankings))

    @classmethod
    def from_candidate_ids(cls, vote_id: int, candidate_ids: Iterable[int]) -> Ballot:
        """Build a ballot from candidate ids listed in order of preference, ranks are assigned 1..n.

        :param vote_id: unique ballot id
        :type vote_id: int
        :param candidate_ids: candidate ids, most preferred first
        :type candidate_ids: Iterable[int]
        :rtype: Ballot
        """
        return cls(vote_id, tuple(Ranking(cid, rank) for rank, cid in enumerate(candidate_ids, start=1)))

    @property
    def candidate_ids(self) -> List[int]:
        return [r.candidate_id for r in self.rankings]

    def is_blank(self) -> bool:
        return not self.rankings


class BallotArena:
    """Holds the ballots of one tabulation together with a cursor per ballot.

    Ballots are never removed or reordered. Each cursor indexes the first ranking of its ballot
    not yet known to be eliminated and only ever moves forward.
    """

    def __init__(self, ballots: Sequence[Ballot]) -> None:
        self._ballots = list(ballots)
        self._cursors = [0] * len(self._ballots)

    def __len__(self) -> int:
        return len(self._ballots)

    def __iter__(self):
        return iter(self._ballots)

    @property
    def ballots(self) -> List[Ballot]:
        return list(self._ballots)

    def cursor(self, idx: int) -> int:
        return self._cursors[idx]

    def current_preference(self, idx: int, eliminated: Set[int]) -> Optional[int]:
        """Advance the cursor of ballot `idx` past eliminated candidates and return the
        candidate id found at the cursor, or None if the ballot is exhausted.

        :param idx: position of the ballot in the arena
        :type idx: int
        :param eliminated: ids of eliminated candidates
        :type eliminated: Set[int]
        :rtype: Optional[int]
        """
        rankings = self._ballots[idx].rankings
        cursor = self._cursors[idx]
        while cursor < len(rankings) and rankings[cursor].candidate_id in eliminated:
            cursor += 1
        self._cursors[idx] = cursor
        if cursor < len(rankings):
            return rankings[cursor].candidate_id
        return None

    def next_preference(self, idx: int, eliminated: Set[int]) -> Optional[int]:
        """Step the cursor off the current ranking and on to the next ranking whose candidate
        is not eliminated. Used when the candidate at the cursor has just been eliminated.

        :return: transfer target candidate id, or None if the ballot exhausts
        :rtype: Optional[int]
        """
        if self._cursors[idx] < len(self._ballots[idx].rankings):
            self._cursors[idx] += 1
        return self.current_preference(idx, eliminated)

    def first_preferences(self) -> Dict[int, int]:
        """Count rank 1 (first listed) preferences per candidate id, ignoring cursors."""
        counts: Dict[int, int] = {}
        for ballot in self._ballots:
            if ballot.rankings:
                cid = ballot.rankings[0].candidate_id
                counts[cid] = counts.get(cid, 0) + 1
        return counts


def validate_candidates(candidates: Iterable[Candidate]) -> List[Candidate]:
    """Check candidate ids and display names are unique and return candidates sorted by id.

    :raises EmptyCandidateSetError: no candidates given
    :raises MalformedCandidateError: duplicate ids or display names
    :rtype: List[Candidate]
    """
    candidate_list = list(candidates)
    if not candidate_list:
        raise EmptyCandidateSetError("tabulation requires at least one candidate")

    seen_ids = set()
    seen_names = set()
    for candidate in candidate_list:
        if candidate.id in seen_ids:
            raise MalformedCandidateError(f"duplicate candidate id: {candidate.id}")
        if candidate.name in seen_names:
            raise MalformedCandidateError(f"duplicate candidate name: {candidate.name!r}")
        seen_ids.add(candidate.id)
        seen_names.add(candidate.name)

    return sorted(candidate_list, key=lambda c: c.id)


def validate_ballots(ballots: Iterable[Ballot], candidate_ids: Set[int]) -> None:
    """Fail fast on ballots the tabulator cannot count correctly.

    :raises MalformedBallotError: duplicate vote id, unknown candidate id,
        rank that is not a positive integer or rankings not strictly ascending by rank
    """
    seen_vote_ids = set()
    for ballot in ballots:
        if ballot.vote_id in seen_vote_ids:
            raise MalformedBallotError(ballot.vote_id, "duplicate vote id")
        seen_vote_ids.add(ballot.vote_id)

        last_rank = 0
        for ranking in ballot.rankings:
            if ranking.candidate_id not in candidate_ids:
                raise MalformedBallotError(ballot.vote_id, f"unknown candidate id {ranking.candidate_id}")
            if isinstance(ranking.rank, bool) or not isinstance(ranking.rank, int) or ranking.rank < 1:
                raise MalformedBallotError(ballot.vote_id, f"invalid rank {ranking.rank!r}")
            if ranking.rank <= last_rank:
                raise MalformedBallotError(
                    ballot.vote_id,
                    f"rankings not in ascending rank order (rank {ranking.rank} follows rank {last_rank})",
                )
            last_rank = ranking.rank


def validate_election(candidates: Iterable[Candidate], ballots: Iterable[Ballot]) -> List[Candidate]:
    """Validate candidates and ballots together, returning candidates sorted by id."""
    ordered = validate_candidates(candidates)
    validate_ballots(ballots, {c.id for c in ordered})
    return ordered


def filter_viable(candidates: Iterable[Candidate], ballots: Iterable[Ballot]) -> Tuple[List[Candidate], List[Ballot]]:
    """Drop ballots without rankings, then candidates that no remaining ballot ranks.

    :return: viable candidates (input order kept) and non blank ballots
    :rtype: Tuple[List[Candidate], List[Ballot]]
    """
    kept_ballots = [b for b in ballots if not b.is_blank()]
    ranked_ids = {r.candidate_id for b in kept_ballots for r in b.rankings}
    return [c for c in candidates if c.id in ranked_ids], kept_ballots
