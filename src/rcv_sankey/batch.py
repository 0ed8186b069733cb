"""
Run a set of contests listed in a contest set directory and write their results.

A contest set directory holds two files:

- contest_set.csv, one row per contest (see contest_set_settings.json for columns and defaults)
- run_config.json, output switches shared by all contests (see run_config_settings.json)
"""

from typing import Dict, List, Optional, Tuple

import copy
import datetime
import json
import os
import pathlib
import shutil

import pandas as pd
import tqdm

import rcv_sankey
import rcv_sankey.util as util
import rcv_sankey.write_out as write_out
from rcv_sankey.parsers import get_parser_dict, split_election
from rcv_sankey.rcv.base import InstantRunoff

SETTINGS_DIR = pathlib.Path(__file__).parent


# typecast functions
def _cast_str(s):
    """
    If string-in-string '"0006"', return '0006'
    If 'None', return None
    else, return str() result
    """
    s = str(s)
    if len(s) >= 2 and ((s[0] == '"' and s[-1] == '"') or (s[0] == "'" and s[-1] == "'")):
        return s[1:-1]
    elif s == "None":
        return None
    else:
        return s


def _cast_bool(s):
    if isinstance(s, bool):
        return s
    if str(s).strip().title() not in ("True", "False"):
        raise RuntimeError(f'invalid boolean value ({s}). Must be "true" or "false".')
    return str(s).strip().title() == "True"


def _cast_func(s):
    parser_dict = get_parser_dict()
    if s not in parser_dict:
        raise RuntimeError(f"unknown parser function: {s}. Available parsers: {', '.join(parser_dict)}")
    return parser_dict[s]


cast_dict = {
    "str": _cast_str,
    "bool": _cast_bool,
    "func": _cast_func,
}


def _read_settings(fname: str) -> Dict:
    settings_fpath = SETTINGS_DIR / fname
    if os.path.isfile(settings_fpath) is False:
        raise RuntimeError(f"(developer error) Looking for {fname}. Not a valid file path: {settings_fpath}")
    with open(settings_fpath) as settings_file:
        return json.load(settings_file)


def read_contest_set(contest_set_path, override_input_root_dir=None) -> Tuple[List[Dict], Dict]:
    """Read contest_set.csv and run_config.json, filling in defaults for anything missing.

    :param contest_set_path: directory containing contest_set.csv and run_config.json
    :param override_input_root_dir: resolve contest input paths against this directory
        instead of the "input_path_root" option, defaults to None
    :raises RuntimeError: missing files or invalid values
    :return: list of contest dicts ready for :func:`crunch_contest`, and the run config
    :rtype: Tuple[List[Dict], Dict]
    """
    contest_set_path = pathlib.Path(contest_set_path)

    contest_set_settings = _read_settings("contest_set_settings.json")
    run_config_settings = _read_settings("run_config_settings.json")

    # read run_config.json
    run_config_fpath = contest_set_path / "run_config.json"
    if os.path.isfile(run_config_fpath) is False:
        raise RuntimeError(f"not a valid file path: {run_config_fpath}")

    with open(run_config_fpath) as run_config_file:
        run_config = json.load(run_config_file)

    # add in defaults for missing options and cast the rest
    for field, setting in run_config_settings.items():
        run_config[field] = cast_dict[setting["type"]](run_config.get(field, setting["default"]))

    input_root = pathlib.Path(override_input_root_dir or run_config["input_path_root"])
    if not input_root.is_absolute():
        input_root = contest_set_path / input_root

    # read contest_set.csv
    contest_set_fpath = contest_set_path / "contest_set.csv"
    if os.path.isfile(contest_set_fpath) is False:
        raise RuntimeError(f"not a valid file path: {contest_set_fpath}")

    contest_set_df = pd.read_csv(contest_set_fpath, dtype=object)

    # add in default values for missing columns
    for setting in contest_set_settings:
        if setting not in contest_set_df.columns:
            contest_set_df[setting] = contest_set_settings[setting]["default"]

    # fill in na values with defaults and cast column
    for col in contest_set_df:

        if col not in contest_set_settings:
            print(f'info -- "{col}" is an unrecognized column in contest_set.csv, it will be ignored.')
        else:
            contest_set_df[col] = contest_set_df[col].fillna(contest_set_settings[col]["default"])
            contest_set_df[col] = [
                cast_dict[contest_set_settings[col]["type"]](i) for i in contest_set_df[col].tolist()
            ]

    # convert df to listOdicts, one dict per row
    contests = contest_set_df.to_dict("records")

    valid_contests = []
    for idx, contest in enumerate(contests, start=1):

        if not contest["name"]:
            contest["name"] = f"contest{idx}"

        if contest["ignore_contest"]:
            print(f'ignoring contest: {contest["name"]}')
            continue

        copy_contest = {k: contest[k] for k in ("name", "parser_func", "notes")}

        # parser arguments are the non empty path columns, resolved against the input root
        parser_args = {}
        for path_col in ("candidates_path", "rankings_path", "election_path"):
            if contest[path_col]:
                parser_args[path_col] = input_root / contest[path_col]
        if contest["split_field"]:
            parser_args["split_field"] = contest["split_field"]
        copy_contest["parser_args"] = parser_args

        valid_contests.append(copy_contest)

    # store file locations
    run_config["contest_set_file_path"] = contest_set_fpath
    run_config["run_config_file_path"] = run_config_fpath

    return valid_contests, run_config


class _CrunchSteps:
    """Runs the steps of one contest in order, recording failures instead of raising.

    A failed step skips the steps that depend on it.
    """

    def __init__(self, contest: Dict, run_config: Dict, results_dir: pathlib.Path, pbar_desc: str) -> None:
        self.contest = contest
        self.run_config = run_config
        self.results_dir = results_dir
        self.pbar_desc = pbar_desc
        self.error_log_writers = []
        self.n_errors = 0
        self.rcv_objects: List[InstantRunoff] = []

    def update_error_log_writers(self, writers_list):
        self.error_log_writers = writers_list if isinstance(writers_list, list) else [writers_list]

    def _run_step(self, step_name: str, f, *args):
        try:
            return True, f(*args)
        except Exception as e:
            for writer in self.error_log_writers:
                writer.write([self.contest["name"], step_name, repr(e)])
            self.n_errors += 1
            return False, None

    def _writers(self):
        writers = []
        if self.run_config["flow_edges"]:
            writers.append(("flow_edges", write_out.write_flow_edges_json))
        if self.run_config["flow_edges_csv"]:
            writers.append(("flow_edges_csv", write_out.write_flow_edges_csv))
        if self.run_config["round_by_round_table"]:
            writers.append(("round_by_round_table", write_out.write_round_by_round_table))
        if self.run_config["round_by_round_json"]:
            writers.append(("round_by_round_json", write_out.write_round_by_round_json))
        if self.run_config["stats"]:
            writers.append(("stats", write_out.write_stats))
        return writers

    def run_steps(self) -> None:

        pbar = tqdm.tqdm(total=2, bar_format="{l_bar}{bar}|{postfix}", colour="GREEN")
        pbar.set_description(self.pbar_desc)

        pbar.set_postfix_str("parse")
        ok, parsed = self._run_step("parse", self._parse)
        pbar.update(1)
        if not ok:
            pbar.set_postfix_str("failed")
            pbar.close()
            return

        pbar.set_postfix_str("split")
        ok, elections = self._run_step("split", split_election, parsed)
        pbar.update(1)
        if not ok:
            pbar.set_postfix_str("failed")
            pbar.close()
            return

        writers = self._writers()
        pbar.total += len(elections) * (1 + len(writers))
        pbar.refresh()

        for split_value, election in elections.items():

            contest_name = self.contest["name"]
            if split_value is not None:
                contest_name = f'{contest_name}_{self.contest["parser_args"]["split_field"]}_{split_value}'

            pbar.set_postfix_str(f"tabulate {contest_name}")
            ok, rcv_obj = self._run_step(
                f"tabulate {contest_name}",
                self._tabulate,
                election,
                contest_name,
            )
            pbar.update(1)
            if not ok:
                pbar.update(len(writers))
                continue
            self.rcv_objects.append(rcv_obj)

            for step_name, writer in writers:
                pbar.set_postfix_str(f"{step_name} {contest_name}")
                self._run_step(f"{step_name} {contest_name}", writer, rcv_obj, self.results_dir)
                pbar.update(1)

        pbar.set_postfix_str("complete")
        pbar.close()

    def _parse(self):
        return self.contest["parser_func"](**self.contest["parser_args"])

    def _tabulate(self, election: Dict, contest_name: str) -> InstantRunoff:
        return InstantRunoff(
            election["candidates"],
            election["ballots"],
            validate=self.run_config["validate"],
            viable_only=self.run_config["viable_only"],
            name=contest_name,
            notes=self.contest["notes"],
        )


def _write_input_dir(results_dir, run_config, start_time, end_time):

    # copy input files
    result_log_dir = results_dir / "inputs"
    util.verifyDir(result_log_dir)

    with open(result_log_dir / "pkg_info.txt", "w") as pkg_info:
        pkg_info.write(f"version: {rcv_sankey.__version__}\n")
        pkg_info.write(f'start_time: {start_time.strftime("%Y-%m-%d %H:%M:%S")}\n')
        pkg_info.write(f'end_time: {end_time.strftime("%Y-%m-%d %H:%M:%S")}')

    shutil.copy2(run_config["run_config_file_path"], result_log_dir / "run_config.json")
    shutil.copy2(run_config["contest_set_file_path"], result_log_dir / "contest_set.csv")


def crunch_contest_set(contest_set, run_config, path_to_output, fresh_output=False) -> List[InstantRunoff]:
    """Tabulate every contest and write the outputs enabled in `run_config` under '{path_to_output}/results'.

    Errors are collected per contest in results/error_log.csv (renamed error_log_EMPTY.csv if none occurred).

    :return: the tabulated contests, in contest set order
    :rtype: List[InstantRunoff]
    """

    start_time = datetime.datetime.now()

    ##################
    # OUTPUT PATHS
    path_to_output = pathlib.Path(path_to_output)

    results_dir = path_to_output / "results"
    if fresh_output and results_dir.exists():
        print("deleting existing results directory...")
        shutil.rmtree(results_dir)
    util.verifyDir(results_dir)

    # init logger
    header_list = ["contest", "step", "message"]
    error_log_path = results_dir / "error_log.csv"
    error_logger = util.CSVLogger(error_log_path, header_list)

    empty_error_log_path = error_log_path.parent / (error_log_path.stem + "_EMPTY.csv")
    if empty_error_log_path.exists():
        os.remove(empty_error_log_path)

    n_errors = 0
    rcv_objects = []

    #########################
    # LOOP THROUGH CONTESTS

    for idx, contest in enumerate(contest_set):

        pbar_desc = f'{idx+1} of {len(contest_set)} contests: {contest["name"]}'
        if n_errors:
            pbar_desc = f"[{n_errors} ERRORS SO FAR] " + pbar_desc

        steps = _CrunchSteps(contest, run_config, results_dir, pbar_desc)
        steps.update_error_log_writers([error_logger])
        steps.run_steps()

        n_errors += steps.n_errors
        rcv_objects += steps.rcv_objects

    if n_errors:
        print(f"[{n_errors} TOTAL ERRORS]")

    # close logs
    error_logger.close()
    if not error_logger.lines_added:
        os.rename(error_log_path, empty_error_log_path)

    # WRITE OUT AGGREGATED STATS FOR CONTESTS
    if run_config["stats"] and rcv_objects:
        pd.concat([obj.get_stats() for obj in rcv_objects], ignore_index=True).to_csv(
            results_dir / "stats.csv", index=False
        )

    end_time = datetime.datetime.now()

    _write_input_dir(results_dir, run_config, start_time, end_time)

    duration = end_time - start_time
    print(f"runtime duration: {str(duration)}")
    print("DONE!")

    return rcv_objects


def analyze_election_set(contest_set_path: str, output_path: Optional[str] = None, fresh_output=False) -> List[InstantRunoff]:
    """
    Analyze a set of elections.

    :param contest_set_path: Directory containing two files: contest_set.csv, which lists elections to analyze and their inputs, and run_config.json, which contains the settings specifying which outputs to write.
    :type contest_set_path: str
    :param output_path: Directory where output will be written to, defaults to `contest_set_path`.
    :type output_path: str
    :param fresh_output: If True, a results folder already present in `output_path` is deleted, defaults to False
    :type fresh_output: bool, optional
    """

    # read in contest set info
    contest_set, run_config = read_contest_set(contest_set_path)

    # analyze contests
    return crunch_contest_set(contest_set, run_config, output_path or contest_set_path, fresh_output=fresh_output)
