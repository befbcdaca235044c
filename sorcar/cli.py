#!/usr/bin/env python3
"""
CLI entrypoint for the sorcar invariant learner.

Usage:
    sorcar [options] <file_stem>

Reads <file_stem>.attributes/.data/.horn/.intervals/.status and writes
<file_stem>.json and <file_stem>.R.

Returns:
    0: conjunctions learned and written
    1: INFEASIBLE (no conjunction is consistent with the examples)
    3: Error (bad input, I/O failure, solver exhausted, ...)
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import ALGORITHMS, SorcarConfig
from .driver import run_round
from .errors import InfeasibleError, SorcarError

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool, log_file: Optional[str] = None) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s [%(levelname)s] %(message)s',
    )
    if log_file:
        handler = logging.FileHandler(log_file, mode="a")
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s'))
        root = logging.getLogger()
        root.addHandler(handler)
        if root.level > logging.INFO:
            root.setLevel(logging.INFO)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sorcar",
        description="Sorcar: Horndini/Sorcar conjunctive invariant learner (one round)",
    )
    parser.add_argument("file_stem", type=str, help="Stem of the round's input files")
    parser.add_argument(
        "-a", "--algorithm",
        choices=ALGORITHMS,
        default=None,
        help="Learning algorithm (default: sorcar, or the config file's choice)",
    )
    parser.add_argument(
        "-f", "--horndini-first-round",
        action="store_true",
        default=None,
        help="Run Horndini in the first round",
    )
    parser.add_argument(
        "-t", "--alternate",
        action="store_true",
        default=None,
        help="Alternate Horndini and Sorcar between rounds",
    )
    parser.add_argument(
        "-r", "--reset-r",
        action="store_true",
        default=None,
        help="Reset the set R in each round",
    )
    parser.add_argument(
        "--no-check",
        action="store_true",
        help="Skip the consistency post-condition after each algorithm",
    )
    parser.add_argument(
        "--solver-timeout",
        type=int,
        default=None,
        metavar="MS",
        help="z3 timeout per cardinality bound for sorcar-minimal",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Config file (default: .sorcar.yml next to the file stem)",
    )
    parser.add_argument("--log-file", type=str, default=None, help="Append log records to this file")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.config is not None:
            config = SorcarConfig.from_file(args.config)
        else:
            config = SorcarConfig.load(Path(args.file_stem).resolve().parent)

        config = config.with_overrides(
            algorithm=args.algorithm,
            horndini_first_round=args.horndini_first_round,
            alternate=args.alternate,
            reset_r=args.reset_r,
            check_consistency=False if args.no_check else None,
            solver_timeout_ms=args.solver_timeout,
            log_file=args.log_file,
        )
    except (SorcarError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 3

    try:
        _configure_logging(args.verbose, config.log_file)
    except OSError as e:
        print(f"Error: cannot open log file {config.log_file}: {e}", file=sys.stderr)
        return 3

    try:
        result = run_round(args.file_stem, config)
    except InfeasibleError as e:
        print(f"INFEASIBLE: {e}", file=sys.stderr)
        return 1
    except SorcarError as e:
        logger.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 3

    print(result.summary())
    return 0


if __name__ == "__main__":
    sys.exit(main())
