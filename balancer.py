#!/usr/bin/env python3
"""Split a track listing into evenly filled sides (or boxes).

Reads ``DURATION TITLE`` lines from the input file, balances the tracks
over sides of a given length (``-d``) or over a fixed number of boxes
(``-b``) and prints the recommended sides.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from config import CFG, VERSION
from io_files import write_sides
from progress import enable_console_log, reset as progress_reset, set_done, start_timer
from render import render_album, render_header
from solver.orchestrator import solve_orchestrator
from tracks import coerce_duration, load_tracks


def _seconds_arg(text: str) -> int:
    seconds = coerce_duration(text)
    if seconds is None:
        raise argparse.ArgumentTypeError(f"bad time value: {text!r}")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="balancer", description=__doc__)
    parser.add_argument("-i", "--input", help="Track listing, one 'DURATION TITLE' per line.")
    parser.add_argument("-d", "--duration", help="Side length as seconds or [[hh:]mm:]ss.")
    parser.add_argument("-b", "--boxes", type=int, help="Number of boxes to spread the tracks over.")
    parser.add_argument("-e", "--even", action="store_true", help="Round the side count up to an even number.")
    parser.add_argument(
        "-t", "--timeout", type=_seconds_arg, default=CFG.TIMEOUT,
        help="Search time limit as seconds or [[hh:]mm:]ss, 0 for none (default: %(default)s).",
    )
    strategy = parser.add_mutually_exclusive_group()
    strategy.add_argument("-s", "--shuffle", action="store_true", help="Cyclic longest-first heuristic.")
    strategy.add_argument("-f", "--force", action="store_true", help="Exhaustive backtracking search.")
    strategy.add_argument("--cp-sat", action="store_true", help="OR-Tools CP-SAT model.")
    parser.add_argument("-p", "--plain", action="store_true", help="Print durations as plain seconds.")
    parser.add_argument("-c", "--csv", action="store_true", help="Print CSV rows instead of a listing.")
    parser.add_argument("-a", "--delimiter", default=CFG.DELIMITER, help="CSV delimiter (default: %(default)r).")
    parser.add_argument("-o", "--output", help="Also write the result to this file.")
    parser.add_argument("-x", "--debug", action="store_true", help="Stream the search log to stderr.")
    parser.add_argument("-v", "--version", action="version", version=f"Version {VERSION} of Balancer")
    return parser


def _mode(args: argparse.Namespace) -> str:
    if args.shuffle:
        return "shuffle"
    if args.force:
        return "force"
    if args.cp_sat:
        return "cp_sat"
    return "split"


def _check(args: argparse.Namespace) -> Optional[str]:
    if not args.input:
        return "Input file must be specified"
    if not os.path.isfile(args.input):
        return f"Input file {args.input} does not exist"
    if bool(args.duration) == (args.boxes is not None):
        return "Either duration or sides (boxes) must be specified, but not both"
    if args.duration and not coerce_duration(args.duration):
        return f"Bad duration: {args.duration}"
    if args.boxes is not None and args.boxes <= 0:
        return "Number of boxes must be positive"
    return None


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    problem = _check(args)
    if problem:
        print(problem, file=sys.stderr)
        return 1
    if args.even and args.boxes is not None:
        print("The even flag is ignored when boxes are specified", file=sys.stderr)

    if args.debug:
        enable_console_log(logging.DEBUG)

    try:
        tracks = load_tracks(args.input)
    except (OSError, ValueError) as e:
        print(e, file=sys.stderr)
        return 1

    progress_reset()
    start_timer()
    ok, album, strategy, reason, meta = solve_orchestrator(
        tracks,
        duration=args.duration,
        boxes=args.boxes,
        even=args.even,
        mode=_mode(args),
        timeout=args.timeout,
    )
    set_done(ok, reason=reason)
    if not ok:
        print(reason, file=sys.stderr)
        return 1

    text = render_album(album, plain=args.plain, csv=args.csv, delimiter=args.delimiter)
    if not args.csv:
        sys.stdout.write(render_header(boxes=args.boxes is not None))
    sys.stdout.write(text)
    if meta.get("timed_out"):
        print(f"Time limit reached; best of the {strategy} search so far.", file=sys.stderr)
    if args.output:
        write_sides(text, os.getcwd(), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
