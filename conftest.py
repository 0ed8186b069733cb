
import pytest

from rcv_sankey.ballots import Ballot, Candidate


def _make_ballots(rankings_list, start_id=1):
    """Ballots from candidate id lists, most preferred first, with vote ids counting from start_id."""
    return [Ballot.from_candidate_ids(vote_id, ids) for vote_id, ids in enumerate(rankings_list, start=start_id)]


@pytest.fixture
def abc_candidates():
    return [Candidate(1, "A"), Candidate(2, "B"), Candidate(3, "C")]


@pytest.fixture
def scenario_ballots():
    # two A>B>C, two B>C>A, one C>A>B
    return _make_ballots([[1, 2, 3], [1, 2, 3], [2, 3, 1], [2, 3, 1], [3, 1, 2]])


@pytest.fixture
def election_files(tmp_path):
    """Candidates csv and long format rankings csv for the A/B/C scenario, rows deliberately unsorted."""
    candidates_path = tmp_path / "candidates.csv"
    candidates_path.write_text("id,name\n1,A\n2,B\n3,C\n")

    rows = [
        (5, 2, 3), (1, 1, 1), (3, 3, 2), (1, 3, 3), (2, 1, 1), (4, 2, 1),
        (5, 3, 1), (3, 2, 1), (2, 2, 2), (1, 2, 2), (4, 3, 2), (3, 1, 3),
        (2, 3, 3), (4, 1, 3), (5, 1, 2),
    ]
    rankings_path = tmp_path / "rankings.csv"
    rankings_path.write_text(
        "vote_id,candidate_id,rank\n" + "".join(f"{v},{c},{r}\n" for v, c, r in rows)
    )
    return candidates_path, rankings_path
