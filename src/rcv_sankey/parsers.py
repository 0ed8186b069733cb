"""
Contains election input parser functions.

Every parser returns a ParsedElection dictionary with "candidates" (list of Candidate)
and "ballots" (list of Ballot, rankings sorted by ascending rank). When a split field
is requested, "candidate_groups" and "ballot_groups" map candidate ids and vote ids to
their value in that field, see :func:`split_election`.
"""

from typing import Dict, List, Optional

import json
import pathlib

import pandas as pd

from rcv_sankey.ballots import Ballot, Candidate, Ranking
from rcv_sankey.package_types import ParsedElection, ParserDict, Path

CANDIDATE_COLUMNS = ["id", "name"]
RANKING_COLUMNS = ["vote_id", "candidate_id", "rank"]


def add_parser(new_parser_dict: ParserDict) -> None:
    """Add custom parser functions to the module parser dictionary.

    :param new_parser_dict: A dictionary containing parser functions, with their names as keys.
    :type new_parser_dict: Dict
    """
    parser_dict.update(new_parser_dict)


def get_parser_dict() -> ParserDict:
    """Returns the module parser dictionary. Including both package parsers and
    custom parsers added with :func:`add_parser`.

    :return: A dictionary of parser functions. Keys are parser name strings.
    :rtype: Dict
    """
    return parser_dict


def _check_columns(df: pd.DataFrame, required: List[str], path: pathlib.Path) -> None:
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise RuntimeError(f"{path} is missing required column(s): {', '.join(missing)}")


def _plain(value):
    # numpy scalars -> python scalars so group values compare and serialize cleanly
    return value.item() if hasattr(value, "item") else value


def read_candidates_csv(candidates_path: Path, split_field: Optional[str] = None) -> ParsedElection:
    """Reads candidates stored in csv format, one candidate per row with "id" and "name" columns.

    :param candidates_path: path to the candidates csv file
    :type candidates_path: Union[str, pathlib.Path]
    :param split_field: optional column partitioning candidates into independent elections, defaults to None
    :type split_field: Optional[str], optional
    :raises RuntimeError: required columns missing
    :return: dictionary with "candidates" and, if `split_field` is given, "candidate_groups"
    :rtype: Dict
    """
    candidates_path = pathlib.Path(candidates_path)
    df = pd.read_csv(candidates_path, encoding="utf8")

    required = CANDIDATE_COLUMNS + ([split_field] if split_field else [])
    _check_columns(df, required, candidates_path)

    df["name"] = df["name"].astype(str).str.strip()
    candidates = [Candidate(int(cid), name) for cid, name in zip(df["id"], df["name"])]

    parsed = {"candidates": candidates}
    if split_field:
        parsed["candidate_groups"] = {int(cid): _plain(val) for cid, val in zip(df["id"], df[split_field])}
    return parsed


def read_rankings_csv(rankings_path: Path, split_field: Optional[str] = None) -> ParsedElection:
    """Reads ballot rankings stored in long csv format, one ranking per row with
    "vote_id", "candidate_id" and "rank" columns.

    Rows are grouped into one ballot per vote_id and ordered by (vote_id, rank), so the
    returned ballots always satisfy the ascending rank order the tabulator relies on.

    :param rankings_path: path to the rankings csv file
    :type rankings_path: Union[str, pathlib.Path]
    :param split_field: optional column partitioning ballots into independent elections, defaults to None
    :type split_field: Optional[str], optional
    :raises RuntimeError: required columns missing, or a ballot has rows in more than one split group
    :return: dictionary with "ballots" and, if `split_field` is given, "ballot_groups"
    :rtype: Dict
    """
    rankings_path = pathlib.Path(rankings_path)
    df = pd.read_csv(rankings_path, encoding="utf8")

    required = RANKING_COLUMNS + ([split_field] if split_field else [])
    _check_columns(df, required, rankings_path)

    df = df.sort_values(["vote_id", "rank"], kind="mergesort")

    ballots = []
    ballot_groups = {}
    for vote_id, vote_df in df.groupby("vote_id", sort=True):
        rankings = tuple(Ranking(int(cid), int(rank)) for cid, rank in zip(vote_df["candidate_id"], vote_df["rank"]))
        ballots.append(Ballot(int(vote_id), rankings))

        if split_field:
            values = vote_df[split_field].unique()
            if len(values) != 1:
                raise RuntimeError(f"{rankings_path}: vote {vote_id} has rows in more than one {split_field} group")
            ballot_groups[int(vote_id)] = _plain(values[0])

    parsed = {"ballots": ballots}
    if split_field:
        parsed["ballot_groups"] = ballot_groups
    return parsed


def csv_pair(candidates_path: Path, rankings_path: Path, split_field: Optional[str] = None) -> ParsedElection:
    """Reads an election from a candidates csv and a long format rankings csv.
    See :func:`read_candidates_csv` and :func:`read_rankings_csv`.

    :rtype: Dict
    """
    parsed = read_candidates_csv(candidates_path, split_field=split_field)
    parsed.update(read_rankings_csv(rankings_path, split_field=split_field))
    return parsed


def election_json(election_path: Path, split_field: Optional[str] = None) -> ParsedElection:
    """Reads an election stored as json::

        {"candidates": [{"id": 1, "name": "A"}, ...],
         "ballots": [{"id": 10, "rankings": [{"candidateId": 1, "rank": 1}, ...]}, ...]}

    The nominations/votes naming ("nominations", "gameName", "votes", "nominationId")
    is accepted as well. Rankings are sorted by rank on read.

    :param election_path: path to the json file
    :type election_path: Union[str, pathlib.Path]
    :param split_field: optional key partitioning candidates and ballots into independent elections, defaults to None
    :type split_field: Optional[str], optional
    :raises RuntimeError: candidates or ballots missing, or an entry lacks a required key
    :rtype: Dict
    """
    election_path = pathlib.Path(election_path)
    with open(election_path, encoding="utf8") as election_file:
        data = json.load(election_file)

    candidate_entries = data.get("candidates", data.get("nominations"))
    ballot_entries = data.get("ballots", data.get("votes"))
    if candidate_entries is None or ballot_entries is None:
        raise RuntimeError(f"{election_path} must contain candidate and ballot lists")

    try:
        candidates = [Candidate(int(c["id"]), str(c.get("name", c.get("gameName"))).strip()) for c in candidate_entries]
        ballots = []
        for b in ballot_entries:
            rankings = sorted(
                (Ranking(int(r.get("candidateId", r.get("nominationId"))), int(r["rank"])) for r in b.get("rankings", [])),
                key=lambda r: r.rank,
            )
            ballots.append(Ballot(int(b["id"]), tuple(rankings)))
    except (KeyError, TypeError, ValueError) as e:
        raise RuntimeError(f"{election_path}: malformed entry ({e!r})") from e

    parsed = {"candidates": candidates, "ballots": ballots}
    if split_field:
        try:
            parsed["candidate_groups"] = {int(c["id"]): c[split_field] for c in candidate_entries}
            parsed["ballot_groups"] = {int(b["id"]): b[split_field] for b in ballot_entries}
        except KeyError as e:
            raise RuntimeError(f"{election_path}: split field {split_field!r} missing from an entry") from e
    return parsed


def split_election(parsed: ParsedElection) -> Dict[object, ParsedElection]:
    """Partition a parsed election into independent elections, one per split group value.

    Candidates and ballots are assigned using "candidate_groups" and "ballot_groups".
    A parsed election without groups is returned whole under the key None.

    :rtype: Dict[object, Dict]
    """
    candidate_groups = parsed.get("candidate_groups")
    ballot_groups = parsed.get("ballot_groups")
    if candidate_groups is None or ballot_groups is None:
        return {None: {"candidates": parsed["candidates"], "ballots": parsed["ballots"]}}

    values = []
    for value in list(candidate_groups.values()) + list(ballot_groups.values()):
        if value not in values:
            values.append(value)

    return {
        value: {
            "candidates": [c for c in parsed["candidates"] if candidate_groups.get(c.id) == value],
            "ballots": [b for b in parsed["ballots"] if ballot_groups.get(b.vote_id) == value],
        }
        for value in values
    }


parser_dict = {
    "csv_pair": csv_pair,
    "election_json": election_json,
}
