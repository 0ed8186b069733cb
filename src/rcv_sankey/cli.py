"""
Command line app, installed as the rcv-sankey console script and run by `python -m rcv_sankey`.
"""
import argparse
import json
import logging
import os
import sys

import rcv_sankey.batch as batch
from rcv_sankey.errors import TabulationError
from rcv_sankey.parsers import csv_pair, election_json
from rcv_sankey.rcv.base import tabulate

logger = logging.getLogger(__name__)


def _build_parser():

    p = argparse.ArgumentParser(
        prog="rcv-sankey",
        description="Tabulate ranked choice (instant-runoff) elections into Sankey flow edges.",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="show round by round log messages")
    p.add_argument("-q", "--quiet", action="store_true", help="only show warnings and errors")

    subparsers = p.add_subparsers(dest="command", required=True)

    tab = subparsers.add_parser("tabulate", help="tabulate one election and print its flow edges as json")
    tab.add_argument("candidates_path", nargs="?", help="candidates csv with id and name columns")
    tab.add_argument("rankings_path", nargs="?", help="long format rankings csv with vote_id, candidate_id and rank columns")
    tab.add_argument("--json", dest="election_path", help="read the election from a single json file instead")
    tab.add_argument("-o", "--output", help="write the result to this file instead of standard output")
    tab.add_argument("--no-validate", action="store_true", help="skip input validation")
    tab.add_argument(
        "--viable-only",
        action="store_true",
        help="drop blank ballots and candidates no ballot ranks before tabulating",
    )

    bat = subparsers.add_parser("batch", help="analyze a contest set directory")
    bat.add_argument("contest_set_path", help="Path to directory containing contest_set.csv and run_config.json.")
    bat.add_argument("--output", help="Directory to write results to, defaults to contest_set_path.")
    bat.add_argument("--fresh", action="store_true", help="Delete existing results/ directory before writing")

    return p


def _tabulate_command(args) -> int:

    if args.election_path:
        parsed = election_json(args.election_path)
    elif args.candidates_path and args.rankings_path:
        parsed = csv_pair(args.candidates_path, args.rankings_path)
    else:
        raise RuntimeError("tabulate needs either CANDIDATES_PATH and RANKINGS_PATH or --json ELECTION_PATH")

    result = tabulate(
        parsed["candidates"], parsed["ballots"], validate=not args.no_validate, viable_only=args.viable_only
    )
    output = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)

    if args.output:
        with open(args.output, "w", encoding="utf8") as outfile:
            outfile.write(output + "\n")
    else:
        print(output)
    return 0


def _batch_command(args) -> int:

    contest_set_path = args.contest_set_path
    if not os.path.isabs(contest_set_path):
        contest_set_path = os.path.join(os.getcwd(), contest_set_path)

    if not os.path.isdir(contest_set_path):
        raise RuntimeError(f"invalid path [contest_set_path]: {contest_set_path}")

    batch.analyze_election_set(contest_set_path, args.output or contest_set_path, fresh_output=args.fresh)
    return 0


def main(argv=None):

    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=(logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)),
        format="%(levelname)-10s %(message)s",
    )

    commands = {"tabulate": _tabulate_command, "batch": _batch_command}
    try:
        return commands[args.command](args)
    except TabulationError as e:
        logger.error("tabulation failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
