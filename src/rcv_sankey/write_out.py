"""
Writers for tabulation output. Each takes a finished InstantRunoff object and a directory,
and writes one file named after the contest.
"""
from typing import Union

import json
import pathlib

import rcv_sankey.util as util


def _save_path(rcv_obj, save_dir: Union[str, pathlib.Path], subdir: str, suffix: str) -> pathlib.Path:
    save_path = pathlib.Path(save_dir) / subdir
    util.verifyDir(save_path)
    return save_path / f"{util.safe_file_stub(rcv_obj.name)}{suffix}"


def write_flow_edges_json(rcv_obj, save_dir: Union[str, pathlib.Path]) -> pathlib.Path:
    """Write the flow edge list in the chart renderer format, plus the winner name, to
    '{save_dir}/flow_edges/{contest}.json'.

    :param rcv_obj: InstantRunoff object
    :param save_dir: Directory path to write to.
    :type save_dir: Union[str, pathlib.Path]
    :return: path of the written file
    :rtype: pathlib.Path
    """
    outfile_path = _save_path(rcv_obj, save_dir, "flow_edges", ".json")
    json_dict = {
        "contest": rcv_obj.name,
        "winner": rcv_obj.winner().name,
        "edges": [edge.to_dict() for edge in rcv_obj.get_flow_edges()],
    }
    with open(outfile_path, "w", encoding="utf8") as outfile:
        json.dump(json_dict, outfile, indent=2, ensure_ascii=False)
    return outfile_path


def write_flow_edges_csv(rcv_obj, save_dir: Union[str, pathlib.Path]) -> pathlib.Path:
    """Write the flow edge table to '{save_dir}/flow_edges/{contest}.csv'."""
    outfile_path = _save_path(rcv_obj, save_dir, "flow_edges", ".csv")
    rcv_obj.get_flow_edge_table().to_csv(outfile_path, index=False)
    return outfile_path


def write_round_by_round_table(rcv_obj, save_dir: Union[str, pathlib.Path]) -> pathlib.Path:
    """Write the round by round table to '{save_dir}/round_by_round_table/{contest}.csv'."""
    outfile_path = _save_path(rcv_obj, save_dir, "round_by_round_table", ".csv")
    rcv_obj.get_round_by_round_table().to_csv(outfile_path, index=False)
    return outfile_path


def write_round_by_round_json(rcv_obj, save_dir: Union[str, pathlib.Path]) -> pathlib.Path:
    """Write the RCVIS style round by round dictionary to '{save_dir}/round_by_round_json/{contest}.json'."""
    outfile_path = _save_path(rcv_obj, save_dir, "round_by_round_json", ".json")
    with open(outfile_path, "w", encoding="utf8") as outfile:
        json.dump(rcv_obj.get_round_by_round_dict(), outfile, ensure_ascii=False)
    return outfile_path


def write_stats(rcv_obj, save_dir: Union[str, pathlib.Path]) -> pathlib.Path:
    """Write the one row statistics table to '{save_dir}/stats/{contest}.csv'."""
    outfile_path = _save_path(rcv_obj, save_dir, "stats", ".csv")
    rcv_obj.get_stats().to_csv(outfile_path, index=False)
    return outfile_path
