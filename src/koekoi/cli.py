"""CLI entrypoint for koekoi: subcommand dispatcher."""

import argparse
import logging
import sys
import warnings
from pathlib import Path


def _add_language_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--language", default="Japanese",
                        help="Language name, locale or code, e.g. Japanese, ko-KR, es "
                             "(default: Japanese)")


def _add_drill_args(parser: argparse.ArgumentParser) -> None:
    """Add arguments for the drill subcommand."""
    parser.add_argument("phrases", type=Path,
                        help="JSON file with a list of phrases")
    parser.add_argument("recordings", nargs="+",
                        help="Recorded attempts, one audio file per attempt")
    _add_language_arg(parser)
    parser.add_argument("--whisper-model", default="base",
                        choices=["tiny", "base", "small", "medium"],
                        help="Whisper model size (default: base)")
    parser.add_argument("--shuffle", action=argparse.BooleanOptionalAction, default=False,
                        help="Shuffle the phrase order (default: disabled)")
    parser.add_argument("--seed", type=int, default=None,
                        help="RNG seed for reproducible shuffling")
    parser.add_argument("--settle-delay", type=float, default=50,
                        help="Pause before each recognizer session, ms (default: 50)")
    parser.add_argument("--reset-delay", type=float, default=1500,
                        help="How long a recognizer error is held before retrying, ms "
                             "(default: 1500)")
    parser.add_argument("--output", type=Path, default=None,
                        help="Write a JSON report to this path")
    parser.add_argument("--no-cache", action="store_true", default=False,
                        help="Disable the transcription cache")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments with subcommands."""
    parser = argparse.ArgumentParser(
        prog="koekoi",
        description="Spoken phrase drills with live attempt matching",
    )
    parser.add_argument("-v", "--verbose", action="store_true", default=False,
                        help="Debug logging and all dependency warnings")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    drill_parser = subparsers.add_parser(
        "drill",
        help="Check recorded attempts against a phrase list",
        description="Run recorded attempts through a drill session",
    )
    _add_drill_args(drill_parser)

    normalize_parser = subparsers.add_parser(
        "normalize",
        help="Print the normalized form of a text",
    )
    _add_language_arg(normalize_parser)
    normalize_parser.add_argument("text")

    check_parser = subparsers.add_parser(
        "check",
        help="Classify a hypothesis against an expected phrase",
    )
    _add_language_arg(check_parser)
    check_parser.add_argument("expected")
    check_parser.add_argument("hypothesis")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    return args


def _run_drill(args: argparse.Namespace) -> None:
    """Run the drill pipeline."""
    from koekoi.drill import run_drill

    if not args.phrases.exists():
        print(f"Error: file not found: {args.phrases}", file=sys.stderr)
        sys.exit(1)

    recordings = [Path(f) for f in args.recordings]
    for p in recordings:
        if not p.exists():
            print(f"Error: file not found: {p}", file=sys.stderr)
            sys.exit(1)

    try:
        report = run_drill(
            phrases_path=args.phrases,
            recordings=recordings,
            language=args.language,
            whisper_model=args.whisper_model,
            shuffle=args.shuffle,
            seed=args.seed,
            settle_delay_ms=args.settle_delay,
            reset_delay_ms=args.reset_delay,
            output=args.output,
            use_cache=not args.no_cache,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    for outcome in report.outcomes:
        d = outcome.to_dict()
        print(f"[{d['index'] + 1}] {d['spoken']}: {d['verdict']} "
              f"(heard {d['heard']!r}, {outcome.recording.name})")
    summary = report.to_dict()
    print(f"Correct: {summary['correct']}  Incorrect: {summary['incorrect']}  "
          f"Errors: {summary['errors']}")


def _run_normalize(args: argparse.Namespace) -> None:
    from koekoi.drill.normalize import normalize

    print(normalize(args.language, args.text))


def _run_check(args: argparse.Namespace) -> None:
    from koekoi.drill.matcher import classify
    from koekoi.drill.normalize import normalize

    expected = normalize(args.language, args.expected)
    hypothesis = normalize(args.language, args.hypothesis)
    print(f"Expected:   {expected}")
    print(f"Hypothesis: {hypothesis}")
    print(f"Match:      {classify(expected, hypothesis).value}")


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint."""
    args = parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(name)s %(levelname)s: %(message)s")

    if not args.verbose:
        # Silence noisy third-party warnings
        warnings.filterwarnings("ignore", message="FP16 is not supported on CPU")

    if args.command == "drill":
        _run_drill(args)
    elif args.command == "normalize":
        _run_normalize(args)
    elif args.command == "check":
        _run_check(args)


if __name__ == "__main__":
    main()
