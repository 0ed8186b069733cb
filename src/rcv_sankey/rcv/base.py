"""
Contains the InstantRunoff class and the tabulate function.
Defines the class and adds in methods from rcv/stats.py and rcv/tables.py files.
"""
from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import collections
import dataclasses
import logging

from rcv_sankey.ballots import Ballot, BallotArena, Candidate, filter_viable, validate_election
from rcv_sankey.errors import EmptyCandidateSetError, FlowConservationError
from rcv_sankey.graph import FlowEdge, FlowGraph
from rcv_sankey.package_types import RoundTally, VertexKey
from rcv_sankey.rcv.stats import IRV_stats
from rcv_sankey.rcv.tables import IRV_tables
from rcv_sankey.util import EXHAUST

logger = logging.getLogger(__name__)

# how the loser of a round was picked
DECIDED_BY_PLURALITY = "plurality"
DECIDED_BY_TIEBREAK_SCORE = "tiebreak_score"
DECIDED_BY_CANDIDATE_ID = "candidate_id"


class InstantRunoff(IRV_stats, IRV_tables):
    """
    Single winner instant-runoff tabulation that also builds the round by round vote transfer graph.

    - Each round the active candidate with the fewest votes is eliminated.
    - Ties on votes are broken by the lower Borda score, then by the lower candidate id.
    - Ballots of the eliminated candidate move to their next non-eliminated preference or exhaust.
    - Rounds continue until one candidate remains.
    """

    def __init__(
        self,
        candidates: Iterable[Candidate],
        ballots: Sequence[Ballot],
        validate: bool = True,
        viable_only: bool = False,
        name: str = "",
        notes: str = "",
    ) -> None:
        """
        Constructor. Tabulates the election immediately, the object is read only afterwards.

        :param candidates: candidates standing in the election, in any order
        :type candidates: Iterable[Candidate]
        :param ballots: ballots whose rankings are already sorted by ascending rank
        :type ballots: Sequence[Ballot]
        :param validate: check candidates and ballots before tabulating, defaults to True.
            When False an empty candidate set is still rejected, other malformed input silently corrupts results.
        :type validate: bool, optional
        :param viable_only: drop blank ballots and candidates no ballot ranks before tabulating, defaults to False
        :type viable_only: bool, optional
        :param name: contest name used in output file names and tables, defaults to ""
        :type name: str, optional
        :param notes: free text carried into round by round output, defaults to ""
        :type notes: str, optional
        :raises EmptyCandidateSetError: no candidates given, or none left after `viable_only` filtering
        :raises MalformedCandidateError: candidate ids or names are not unique (when validating)
        :raises MalformedBallotError: ballot references unknown candidate or is not sorted by rank (when validating)
        """

        # CONTEST INPUTS
        ballots = list(ballots)
        if validate:
            self._candidates = validate_election(candidates, ballots)
        else:
            self._candidates = sorted(candidates, key=lambda c: c.id)
            if not self._candidates:
                # nothing to tabulate, an empty candidate set is always fatal
                validate_election(self._candidates, ballots)

        if viable_only:
            self._candidates, ballots = filter_viable(self._candidates, ballots)
            if not self._candidates:
                raise EmptyCandidateSetError("no candidate is ranked on any ballot")

        self._name = name
        self._notes = notes
        self._candidate_by_id = {c.id: c for c in self._candidates}
        self._total_candidates = len(self._candidates)
        self._arena = BallotArena(ballots)
        self._borda_scores = self._calc_borda_scores()

        # INIT STATE INFO

        # tabulation-level
        self._active: List[int] = [c.id for c in self._candidates]
        self._eliminated = set()
        self._elimination_order: List[int] = []
        self._rounds: List[Dict] = []
        self._graph = FlowGraph()

        # round-level
        self._round_num = 0
        self._round_loser: Optional[int] = None
        self._current_preferences: List[Optional[int]] = []

        # RUN
        self._tabulate()

    def _tabulate(self) -> None:
        """
        Run the elimination rounds, then record the terminal round of the sole survivor.
        """

        while len(self._active) > 1:
            self._round_num += 1

            #############################################
            # CLEAR LAST ROUND VALUES
            self._round_loser = None

            #############################################
            # COUNT ROUND RESULTS
            self._tally_active_ballots()
            self._record_round_vertices()

            #############################################
            # IDENTIFY ROUND LOSER
            self._calc_tiebreak_scores()
            self._set_round_loser()

            #############################################
            # UPDATE active candidate list using round loser
            self._update_candidates()

            #############################################
            # CALC ROUND TRANSFER
            self._calc_round_transfer()
            self._add_round_edges()

        # final round, only the winner remains
        self._round_num += 1
        self._tally_active_ballots()
        self._record_round_vertices()

        winner = self._candidate_by_id[self._active[0]]
        logger.info(
            "%s wins in round %d with %d votes",
            winner.name,
            self._round_num,
            self._rounds[-1]["tally"][winner.id],
        )

    def _tally_active_ballots(self) -> None:
        """
        Find each ballot's current preference and count them per active candidate.
        """
        tally = {cid: 0 for cid in self._active}
        exhausted = 0
        self._current_preferences = []
        for idx in range(len(self._arena)):
            preference = self._arena.current_preference(idx, self._eliminated)
            self._current_preferences.append(preference)
            if preference is None:
                exhausted += 1
            else:
                tally[preference] += 1

        self._rounds.append(
            {
                "round": self._round_num,
                "tally": tally,
                "exhausted": exhausted,
                "tiebreak_scores": {},
                "loser": None,
                "decided_by": None,
                "transfers": {},
            }
        )
        logger.debug("round %d tally: %s (%d exhausted)", self._round_num, self._named(tally), exhausted)

    def _record_round_vertices(self) -> None:
        tally = self._rounds[-1]["tally"]
        for cid in self._active:
            self._graph.add_vertex(self._candidate_by_id[cid].name, self._round_num, tally[cid])

        if self._round_num == 1:
            first_preferences = self._arena.first_preferences()
            for cid in self._active:
                if tally[cid] != first_preferences.get(cid, 0):
                    raise FlowConservationError(
                        f"round 1 counts {tally[cid]} votes for {self._candidate_by_id[cid].name}"
                        f" but {first_preferences.get(cid, 0)} ballots rank it first"
                    )
        self._graph.check_conservation(self._round_num)

    def _calc_borda_scores(self) -> Dict[int, int]:
        """
        Borda style score over the full rankings of all ballots.
        A ranking is worth (number of candidates - rank + 1), non positive weights are skipped.
        The score of a candidate does not depend on which other candidates are still active.
        """
        scores = {c.id: 0 for c in self._candidates}
        for ballot in self._arena:
            for ranking in ballot.rankings:
                weight = self._total_candidates - ranking.rank + 1
                if ranking.candidate_id in scores and weight > 0:
                    scores[ranking.candidate_id] += weight
        return scores

    def _calc_tiebreak_scores(self) -> None:
        self._rounds[-1]["tiebreak_scores"] = {cid: self._borda_scores[cid] for cid in self._active}

    def _standing_key(self, cid: int) -> Tuple[int, int, int]:
        round_info = self._rounds[-1]
        return round_info["tally"][cid], round_info["tiebreak_scores"][cid], cid

    def _set_round_loser(self) -> None:
        """
        Sort active candidates by (votes, tiebreak score, id) ascending. The first one loses the round.
        """
        self._active.sort(key=self._standing_key)
        self._round_loser = self._active[0]

        loser_votes, loser_score, _ = self._standing_key(self._round_loser)
        runner_up_votes, runner_up_score, _ = self._standing_key(self._active[1])
        if loser_votes != runner_up_votes:
            decided_by = DECIDED_BY_PLURALITY
        elif loser_score != runner_up_score:
            decided_by = DECIDED_BY_TIEBREAK_SCORE
        else:
            decided_by = DECIDED_BY_CANDIDATE_ID

        self._rounds[-1]["loser"] = self._round_loser
        self._rounds[-1]["decided_by"] = decided_by
        logger.info(
            "round %d: eliminating %s with %d votes (decided by %s)",
            self._round_num,
            self._candidate_by_id[self._round_loser].name,
            loser_votes,
            decided_by,
        )

    def _update_candidates(self) -> None:
        self._active.remove(self._round_loser)
        self._eliminated.add(self._round_loser)
        self._elimination_order.append(self._round_loser)

    def _calc_round_transfer(self) -> None:
        """
        Move every ballot sitting on the round loser to its next non-eliminated preference.
        Transfers are keyed by recipient candidate id, plus EXHAUST for ballots with none left.
        """
        transfers = collections.Counter()
        for idx, preference in enumerate(self._current_preferences):
            if preference != self._round_loser:
                continue
            target = self._arena.next_preference(idx, self._eliminated)
            transfers[EXHAUST if target is None else target] += 1
        self._rounds[-1]["transfers"] = dict(transfers)

    def _add_round_edges(self) -> None:
        """
        Wire this round's vertices to the next round: transferred votes from the loser,
        kept votes from every remaining candidate to itself.
        """
        round_info = self._rounds[-1]
        loser_key = self._vertex_key(self._round_loser, self._round_num)
        for cid in self._active:
            next_key = self._vertex_key(cid, self._round_num + 1)
            transferred = round_info["transfers"].get(cid, 0)
            if transferred > 0:
                self._graph.add_edge(loser_key, next_key, transferred)
            self._graph.add_edge(self._vertex_key(cid, self._round_num), next_key, round_info["tally"][cid])

    def _vertex_key(self, cid: int, round_num: int) -> VertexKey:
        return self._candidate_by_id[cid].name, round_num

    def _named(self, tally: Dict) -> Dict:
        return {self._candidate_by_id[k].name if k in self._candidate_by_id else k: v for k, v in tally.items()}

    def _round_info(self, round_num: int) -> Dict:
        if round_num < 1 or round_num > len(self._rounds):
            raise ValueError(f"round {round_num} does not exist, contest has {len(self._rounds)} rounds")
        return self._rounds[round_num - 1]

    ####################
    # ACCESSORS

    @property
    def name(self) -> str:
        return self._name

    @property
    def notes(self) -> str:
        return self._notes

    def get_candidates(self) -> List[Candidate]:
        """Candidates sorted by id."""
        return list(self._candidates)

    def get_candidate(self, cid: int) -> Candidate:
        return self._candidate_by_id[cid]

    def get_ballots(self) -> List[Ballot]:
        return self._arena.ballots

    def n_rounds(self) -> int:
        """Number of rounds, including the final round where only the winner remains."""
        return len(self._rounds)

    def winner(self) -> Candidate:
        return self._candidate_by_id[self._active[0]]

    def get_elimination_order(self) -> List[int]:
        """Candidate ids in the order they were eliminated."""
        return list(self._elimination_order)

    def get_round_tally_dict(self, round_num: int) -> RoundTally:
        """Votes per candidate id still active in the round."""
        return dict(self._round_info(round_num)["tally"])

    def get_round_tally_tuple(
        self, round_num: int, only_round_active_candidates: bool = True, desc_sort: bool = False
    ) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
        """Return (candidate ids, tallies) for the round.

        :param round_num: round number
        :type round_num: int
        :param only_round_active_candidates: leave out candidates eliminated before this round, defaults to True.
            Otherwise they are included with a tally of 0.
        :type only_round_active_candidates: bool, optional
        :param desc_sort: sort by descending tally (ties by id), defaults to False which sorts by id
        :type desc_sort: bool, optional
        :rtype: Tuple[Tuple[int, ...], Tuple[int, ...]]
        """
        tally = self.get_round_tally_dict(round_num)
        if not only_round_active_candidates:
            for candidate in self._candidates:
                tally.setdefault(candidate.id, 0)

        if desc_sort:
            items = sorted(tally.items(), key=lambda x: (-x[1], x[0]))
        else:
            items = sorted(tally.items())

        if not items:
            return (), ()
        cids, tallies = zip(*items)
        return cids, tallies

    def get_round_exhausted(self, round_num: int) -> int:
        """Ballots with no active preference left in the round, blank ballots included."""
        return self._round_info(round_num)["exhausted"]

    def get_round_transfer_dict(self, round_num: int) -> Dict[Union[int, str], int]:
        """Vote transfers out of the round: recipients positive, the loser negative, EXHAUST for exhausted ballots.
        Empty for the final round.
        """
        round_info = self._round_info(round_num)
        if round_info["loser"] is None:
            return {}
        transfers = dict(round_info["transfers"])
        transfers[round_info["loser"]] = -1 * round_info["tally"][round_info["loser"]]
        return transfers

    def get_round_loser(self, round_num: int) -> Optional[int]:
        return self._round_info(round_num)["loser"]

    def get_round_decided_by(self, round_num: int) -> Optional[str]:
        return self._round_info(round_num)["decided_by"]

    def get_tiebreak_scores(self, round_num: int) -> Dict[int, int]:
        """Borda tiebreak scores of the active candidates, empty for the final round."""
        return dict(self._round_info(round_num)["tiebreak_scores"])

    def get_candidate_outcomes(self) -> List[Dict]:
        """
        One dict per candidate, sorted by id, with keys "id", "name", "round_eliminated" and "round_elected".
        """
        eliminated_round = {r["loser"]: r["round"] for r in self._rounds if r["loser"] is not None}
        winner_id = self._active[0]
        return [
            {
                "id": c.id,
                "name": c.name,
                "round_eliminated": eliminated_round.get(c.id),
                "round_elected": self.n_rounds() if c.id == winner_id else None,
            }
            for c in self._candidates
        ]

    def get_flow_graph(self) -> FlowGraph:
        return self._graph

    def get_flow_edges(self, min_weight: Optional[int] = None) -> List[FlowEdge]:
        return self._graph.to_edges(min_weight=min_weight)


@dataclasses.dataclass(frozen=True)
class TabulationResult:
    edges: List[FlowEdge]
    winner: Optional[Candidate]
    eliminated: List[int]
    rounds: List[RoundTally]

    def to_dict(self) -> Dict:
        return {
            "edges": [edge.to_dict() for edge in self.edges],
            "winner": self.winner.name if self.winner is not None else None,
        }


def tabulate(
    candidates: Iterable[Candidate],
    ballots: Sequence[Ballot],
    validate: bool = True,
    viable_only: bool = False,
) -> TabulationResult:
    """Run an instant-runoff tabulation and return the Sankey edge list with the elected candidate.

    With a single candidate no rounds are contested, the edge list is empty and that candidate wins.

    :param candidates: candidates standing in the election
    :type candidates: Iterable[Candidate]
    :param ballots: ballots with rankings sorted by ascending rank
    :type ballots: Sequence[Ballot]
    :param validate: reject malformed input with an error, defaults to True
    :type validate: bool, optional
    :param viable_only: tabulate only candidates ranked on at least one ballot, ignoring blank ballots.
        If no candidate is ranked at all the result is empty and has no winner. Defaults to False
    :type viable_only: bool, optional
    :rtype: TabulationResult
    """
    candidates = list(candidates)
    ballots = list(ballots)

    if viable_only and candidates and not filter_viable(candidates, ballots)[0]:
        if validate:
            validate_election(candidates, ballots)
        return TabulationResult(edges=[], winner=None, eliminated=[], rounds=[])

    contest = InstantRunoff(candidates, ballots, validate=validate, viable_only=viable_only)
    return TabulationResult(
        edges=contest.get_flow_edges(),
        winner=contest.winner(),
        eliminated=contest.get_elimination_order(),
        rounds=[contest.get_round_tally_dict(i) for i in range(1, contest.n_rounds() + 1)],
    )
