"""Command line helpers for running the vision screening tests."""
from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path

from .config import ScreeningConfig
from .protocols import TestType, get_protocol
from .results import ResultsStore
from .simulate import run_simulated_eye
from .staircase import Eye

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

TEST_CHOICES = ["acuity", "contrast"] + [test_type.value for test_type in TestType]


def non_negative_int(value: str) -> int:
    """``argparse`` type for level counts."""

    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be zero or more, got {number}")
    return number


def build_arg_parser() -> argparse.ArgumentParser:
    """Create an argument parser exposing minimal runtime options."""

    parser = argparse.ArgumentParser(
        description=(
            "Run a staircase vision screening test (tumbling E acuity or "
            "contrast sensitivity) for one or both eyes."
        )
    )
    parser.add_argument(
        "--test",
        choices=TEST_CHOICES,
        default="acuity",
        help="Which test to run (default: %(default)s).",
    )
    parser.add_argument(
        "--eyes",
        nargs="+",
        choices=[eye.value for eye in Eye],
        default=list(ScreeningConfig().eyes),
        help="Eyes to test, in order (default: %(default)s).",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=Path("data"),
        help="Folder where CSV/JSON outputs will be saved (default: %(default)s).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for stimulus selection (default: random).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Use a small window instead of full screen.",
    )
    parser.add_argument(
        "--serial-port",
        type=str,
        default=None,
        help=(
            "Serial COM port of a numeric response pad (e.g., COM1). "
            "Requires pyserial; if omitted only the keyboard is used."
        ),
    )
    parser.add_argument(
        "--serial-baud",
        type=int,
        default=9600,
        help="Baud rate for the serial response pad (default: %(default)s).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help=(
            "Run simulated observers instead of launching PsychoPy, print the "
            "per-eye results and classification, and exit."
        ),
    )
    parser.add_argument(
        "--left-threshold",
        type=non_negative_int,
        default=8,
        help="Dry-run only: number of levels the simulated left eye can see (default: %(default)s).",
    )
    parser.add_argument(
        "--right-threshold",
        type=non_negative_int,
        default=8,
        help="Dry-run only: number of levels the simulated right eye can see (default: %(default)s).",
    )
    parser.add_argument(
        "--guess",
        action="store_true",
        help="Dry-run only: guess at random beyond the threshold instead of always missing.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse command line options and execute the screening."""

    parser = build_arg_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)

    config = ScreeningConfig(
        test_name=args.test,
        eyes=tuple(args.eyes),
        results_directory=str(args.data_dir),
        seed=args.seed,
        debug_mode=args.debug,
        serial_port=args.serial_port,
        serial_baud=args.serial_baud,
    )
    if args.dry_run:
        thresholds = {Eye.LEFT: args.left_threshold, Eye.RIGHT: args.right_threshold}
        perform_dry_run(config, thresholds, guess=args.guess)
        return

    from .experiment import VisionScreeningExperiment

    experiment = VisionScreeningExperiment(config)
    experiment.run()


def perform_dry_run(
    config: ScreeningConfig,
    thresholds: dict[Eye, int],
    guess: bool = False,
) -> ResultsStore:
    """Simulate every configured eye, print a summary and return the store."""

    protocol = get_protocol(config.test_name)
    rng = random.Random(config.seed)
    store = ResultsStore()

    print(
        f"Dry-run: {protocol.title} ({protocol.level_table.level_count()} levels, "
        f"{protocol.staircase.trials_per_level} trials/level, "
        f"{protocol.staircase.min_correct_to_pass} to pass)."
    )
    for eye_name in config.eyes:
        eye = Eye(eye_name)
        result = run_simulated_eye(protocol, eye, thresholds[eye], rng=rng, guess=guess)
        store.record(result)
        print(f"[{eye.value:>5}] score={result.score} | levels={result.levels_passed}/{result.max_level}")
        print(f"        trials={len(result.trial_history)} | status={result.status.value}")

    summary = store.summary(protocol.test_type)
    for eye, severity in sorted(summary.severities.items(), key=lambda item: item[0].value):
        print(f"  {eye.value:<6}: {severity.value}")
    print(f"  asymmetry: {'yes' if summary.asymmetry else 'no'}")
    print(f"  status   : {summary.status}")
    for text in summary.recommendation_texts():
        print(f"  - {text}")
    print("Dry-run complete.")
    return store


__all__ = ["build_arg_parser", "main", "non_negative_int", "perform_dry_run"]


if __name__ == "__main__":  # pragma: no cover - module level CLI hook
    main(sys.argv[1:])
