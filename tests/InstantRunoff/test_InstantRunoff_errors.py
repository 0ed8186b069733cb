import pytest

from rcv_sankey.ballots import Ballot, Candidate, Ranking
from rcv_sankey.errors import (
    EmptyCandidateSetError,
    MalformedBallotError,
    MalformedCandidateError,
    TabulationError,
)
from rcv_sankey.rcv.base import InstantRunoff, tabulate

ABC = [Candidate(1, "A"), Candidate(2, "B"), Candidate(3, "C")]

params = [
    (EmptyCandidateSetError, [], [Ballot(1, (Ranking(1, 1),))]),
    (EmptyCandidateSetError, [], []),
    (MalformedCandidateError, [Candidate(1, "A"), Candidate(1, "B")], []),
    (MalformedCandidateError, [Candidate(1, "A"), Candidate(2, "A")], []),
    (MalformedBallotError, ABC, [Ballot(1, (Ranking(9, 1),))]),
    (MalformedBallotError, ABC, [Ballot(1, (Ranking(1, 2), Ranking(2, 1)))]),
    (MalformedBallotError, ABC, [Ballot(1, (Ranking(1, 1), Ranking(2, 1)))]),
    (MalformedBallotError, ABC, [Ballot(1, (Ranking(1, 0),))]),
    (MalformedBallotError, ABC, [Ballot(1, (Ranking(1, 1.0),))]),
    (MalformedBallotError, ABC, [Ballot(1, (Ranking(1, True),))]),
    (MalformedBallotError, ABC, [Ballot(1, (Ranking(1, 1),)), Ballot(1, (Ranking(2, 1),))]),
]


@pytest.mark.parametrize("error_type, candidates, ballots", params)
def test_constructor_errors(error_type, candidates, ballots):

    with pytest.raises(error_type):
        InstantRunoff(candidates, ballots)


@pytest.mark.parametrize("error_type, candidates, ballots", params)
def test_tabulate_errors(error_type, candidates, ballots):

    with pytest.raises(error_type):
        tabulate(candidates, ballots)


@pytest.mark.parametrize("error_type, candidates, ballots", params)
def test_errors_share_base_class(error_type, candidates, ballots):

    with pytest.raises(TabulationError):
        tabulate(candidates, ballots)


def test_empty_candidates_rejected_without_validation():

    with pytest.raises(EmptyCandidateSetError):
        tabulate([], [Ballot(1, (Ranking(1, 1),))], validate=False)


def test_malformed_ballot_error_names_the_ballot():

    with pytest.raises(MalformedBallotError) as excinfo:
        tabulate(ABC, [Ballot(1, (Ranking(1, 1),)), Ballot(42, (Ranking(3, 2), Ranking(1, 1)))])

    assert excinfo.value.vote_id == 42
    assert "ballot 42" in str(excinfo.value)


def test_tabulation_errors_are_runtime_errors():
    assert issubclass(TabulationError, RuntimeError)


def test_bad_round_number():
    rcv = InstantRunoff(ABC, [Ballot(1, (Ranking(1, 1),))])

    with pytest.raises(ValueError):
        rcv.get_round_tally_dict(0)

    with pytest.raises(ValueError):
        rcv.get_round_tally_dict(rcv.n_rounds() + 1)


def test_viable_only_needs_a_ranked_candidate():

    with pytest.raises(EmptyCandidateSetError):
        InstantRunoff(ABC, [Ballot(1), Ballot(2)], viable_only=True)

    # input is still validated before the empty result is returned
    with pytest.raises(MalformedBallotError):
        tabulate(ABC, [Ballot(1), Ballot(1)], viable_only=True)
