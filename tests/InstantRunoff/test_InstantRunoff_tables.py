import pytest

import pandas as pd

import rcv_sankey.util as util
from rcv_sankey.ballots import Ballot, Candidate
from rcv_sankey.rcv.base import InstantRunoff
from rcv_sankey.write_out import write_stats

ABC = [Candidate(1, "A"), Candidate(2, "B"), Candidate(3, "C")]


def _ballots(rankings_list):
    return [Ballot.from_candidate_ids(vote_id, ids) for vote_id, ids in enumerate(rankings_list, start=1)]


params = [
    (
        {
            "input": {
                "candidates": ABC,
                "ballots": _ballots([[1, 2, 3], [1, 2, 3], [2, 3, 1], [2, 3, 1], [3, 1, 2]]),
            },
            "expected": {
                "table": pd.DataFrame(
                    {
                        "candidate": ["A", "B", "C", "exhaust", "colsum"],
                        "r1_count": [2, 2, 1, 0, 5],
                        "r1_active_percent": [40, 40, 20, util.NAN, 100],
                        "r1_transfer": [1, 0, -1, 0, 0],
                        "r2_count": [3, 2, 0, 0, 5],
                        "r2_active_percent": [60, 40, 0, util.NAN, 100],
                        "r2_transfer": [2, -2, 0, 0, 0],
                        "r3_count": [5, 0, 0, 0, 5],
                        "r3_active_percent": [100, 0, 0, util.NAN, 100],
                        "r3_transfer": [util.NAN, util.NAN, util.NAN, util.NAN, util.NAN],
                    }
                ),
            },
        }
    ),
    (
        {
            "input": {
                "candidates": ABC,
                "ballots": _ballots([[1, 2], [1, 2], [2], [2], [2], [3], []]),
            },
            "expected": {
                "table": pd.DataFrame(
                    {
                        "candidate": ["B", "A", "C", "exhaust", "colsum"],
                        "r1_count": [3, 2, 1, 1, 7],
                        "r1_active_percent": [50, 33.333, 16.667, util.NAN, 100],
                        "r1_transfer": [0, 0, -1, 1, 0],
                        "r2_count": [3, 2, 0, 2, 7],
                        "r2_active_percent": [60, 40, 0, util.NAN, 100],
                        "r2_transfer": [2, -2, 0, 0, 0],
                        "r3_count": [5, 0, 0, 2, 7],
                        "r3_active_percent": [100, 0, 0, util.NAN, 100],
                        "r3_transfer": [util.NAN, util.NAN, util.NAN, util.NAN, util.NAN],
                    }
                ),
            },
        }
    ),
]


@pytest.mark.parametrize("param", params)
def test_round_by_round(param):
    rcv = InstantRunoff(**param["input"])

    table_df = rcv.get_round_by_round_table()
    expected_df = param["expected"]["table"]

    assert table_df.columns.tolist() == expected_df.columns.tolist()
    assert table_df.fillna("NA").to_dict("records") == expected_df.fillna("NA").to_dict("records")


def test_round_by_round_dict(abc_candidates, scenario_ballots):
    rcv = InstantRunoff(abc_candidates, scenario_ballots, name="scenario", notes="three candidates")

    assert rcv.get_round_by_round_dict() == {
        "config": {"contest": "scenario", "notes": "three candidates", "threshold": 0},
        "results": [
            {
                "round": 1,
                "tally": {"A": "2", "B": "2", "C": "1"},
                "tallyResults": [{"eliminated": "C", "transfers": {"A": "1"}}],
            },
            {
                "round": 2,
                "tally": {"A": "3", "B": "2"},
                "tallyResults": [{"eliminated": "B", "transfers": {"A": "2"}}],
            },
            {
                "round": 3,
                "tally": {"A": "5"},
                "tallyResults": [{"elected": "A", "transfers": {}}],
            },
        ],
    }


def test_round_by_round_dict_exhausted():
    rcv = InstantRunoff(ABC, _ballots([[1, 2], [1, 2], [2], [2], [2], [3]]))
    results = rcv.get_round_by_round_dict()["results"]

    assert results[0]["tallyResults"] == [{"eliminated": "C", "transfers": {"exhausted": "1"}}]
    assert results[1]["tallyResults"] == [{"eliminated": "A", "transfers": {"B": "2"}}]


def test_flow_edge_table(abc_candidates, scenario_ballots):
    rcv = InstantRunoff(abc_candidates, scenario_ballots)
    table_df = rcv.get_flow_edge_table()

    assert table_df.columns.tolist() == ["source", "target", "weight"]
    assert table_df.to_dict("records") == [
        {"source": "C (1) ", "target": "A (3)  ", "weight": 1},
        {"source": "A (2) ", "target": "A (3)  ", "weight": 2},
        {"source": "B (2) ", "target": "B (2)  ", "weight": 2},
        {"source": "B (2)  ", "target": "A (5)   ", "weight": 2},
        {"source": "A (3)  ", "target": "A (5)   ", "weight": 3},
    ]


def test_flow_edge_table_single_candidate():
    rcv = InstantRunoff([Candidate(1, "Solo")], _ballots([[1]]))
    table_df = rcv.get_flow_edge_table()

    assert table_df.columns.tolist() == ["source", "target", "weight"]
    assert table_df.empty


params = [
    (
        {
            "input": {
                "candidates": ABC,
                "ballots": _ballots([[1, 2, 3], [1, 2, 3], [2, 3, 1], [2, 3, 1], [3, 1, 2]]),
            },
            "expected": {
                "n_candidates": 3,
                "n_ballots": 5,
                "undervote": 0,
                "number_of_rounds": 3,
                "winner": "A",
                "first_round_winner_vote": 2,
                "final_round_winner_vote": 5,
                "first_round_winner_percent": 40,
                "final_round_winner_percent": 100,
                "first_round_winner_place": 1,
                "come_from_behind": False,
                "first_round_active_votes": 5,
                "final_round_active_votes": 5,
                "total_exhausted": 0,
                "tiebreak_eliminations": 0,
            },
        }
    ),
    (
        {
            "input": {
                "candidates": ABC,
                "ballots": _ballots([[1], [2], [3, 2], []]),
            },
            "expected": {
                "n_candidates": 3,
                "n_ballots": 4,
                "undervote": 1,
                "number_of_rounds": 3,
                "winner": "B",
                "first_round_winner_vote": 1,
                "final_round_winner_vote": 2,
                "first_round_winner_percent": 33.333,
                "final_round_winner_percent": 100,
                "first_round_winner_place": 2,
                "come_from_behind": True,
                "first_round_active_votes": 3,
                "final_round_active_votes": 2,
                "total_exhausted": 1,
                "tiebreak_eliminations": 2,
            },
        }
    ),
]


@pytest.mark.parametrize("param", params)
def test_stats(param):
    rcv = InstantRunoff(**param["input"], name="stats contest")
    stats_df = rcv.get_stats()

    assert len(stats_df) == 1
    assert stats_df["contest"].item() == "stats contest"
    for stat, expected in param["expected"].items():
        assert stats_df[stat].item() == expected, stat


def test_write_stats(tmp_path, abc_candidates, scenario_ballots):
    rcv = InstantRunoff(abc_candidates, scenario_ballots, name="scenario")
    outfile_path = write_stats(rcv, tmp_path)

    assert outfile_path == tmp_path / "stats" / "scenario.csv"
    stats_df = pd.read_csv(outfile_path)
    assert stats_df[["contest", "n_candidates", "n_ballots", "winner"]].to_dict("records") == [
        {"contest": "scenario", "n_candidates": 3, "n_ballots": 5, "winner": "A"}
    ]


def test_stats_after_viable_filtering():
    candidates = ABC + [Candidate(4, "D")]
    rcv = InstantRunoff(candidates, _ballots([[1, 2], [2], []]), viable_only=True)
    stats_df = rcv.get_stats()

    assert stats_df["n_candidates"].item() == 2
    assert stats_df["undervote"].item() == 0
    assert stats_df["winner"].item() == "B"
