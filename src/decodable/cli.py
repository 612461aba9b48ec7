"""CLI entrypoint for decodable: subcommand dispatcher."""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv


def _split_graphemes(value: str | None) -> list[str]:
    if not value:
        return []
    return [g.strip() for g in value.split(",") if g.strip()]


def _add_shared_args(parser: argparse.ArgumentParser) -> None:
    """Add arguments shared by every subcommand."""
    parser.add_argument("-v", "--verbose", action="store_true", default=False,
                        help="Debug logging, including HTTP client chatter (default: quiet)")


def _add_validate_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("text", help="Text to validate")
    parser.add_argument("--taught", default=None,
                        help="Comma-separated taught graphemes, e.g. 's,a,t,p,sh'")
    parser.add_argument("--target", default=None,
                        help="Comma-separated target graphemes for coverage")
    parser.add_argument("--phase", type=int, default=None,
                        help="Use every GPC up to this phase as taught (when --taught is omitted)")
    parser.add_argument("--threshold", type=float, default=0.85,
                        help="Acceptance threshold (default: 0.85)")
    parser.add_argument("--json", action="store_true", default=False,
                        help="Print the full report as JSON")


def _add_assess_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--expected", required=True,
                        help="Page text the child was reading")
    parser.add_argument("--spoken", type=Path, required=True,
                        help="JSON list of {word, confidence, timestampMs} records")
    parser.add_argument("--reading-time-ms", type=int, required=True,
                        help="Time spent reading, in milliseconds")
    parser.add_argument("--json", action="store_true", default=False,
                        help="Print the full assessment as JSON")


def _add_generate_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--fingerprint", type=Path, required=True,
                        help="Learner phonics fingerprint (JSON)")
    parser.add_argument("--backend", default="gemini", choices=["gemini", "replay"],
                        help="Text-generation backend (default: gemini)")
    parser.add_argument("--replay", type=Path, default=None,
                        help="Draft JSON file for the replay backend")
    parser.add_argument("--max-attempts", type=int, default=3,
                        help="Maximum generation attempts (default: 3)")
    parser.add_argument("--threshold", type=float, default=0.85,
                        help="Decodability threshold (default: 0.85)")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Per-attempt timeout in seconds (default: none)")
    parser.add_argument("--seed", type=int, default=None,
                        help="RNG seed for a reproducible story ID")
    parser.add_argument("--output", type=Path, default=None,
                        help="Write the story JSON here instead of stdout")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments with subcommands."""
    parser = argparse.ArgumentParser(
        prog="decodable",
        description="Phonics-constrained decodable storybooks and read-aloud assessment",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    decompose_parser = subparsers.add_parser(
        "decompose",
        help="Show the grapheme-phoneme correspondences of words",
    )
    decompose_parser.add_argument("words", nargs="+", help="Words to decompose")
    _add_shared_args(decompose_parser)

    validate_parser = subparsers.add_parser(
        "validate",
        help="Score a text's decodability against taught GPCs",
    )
    _add_validate_args(validate_parser)
    _add_shared_args(validate_parser)

    assess_parser = subparsers.add_parser(
        "assess",
        help="Assess a transcribed read-aloud attempt",
    )
    _add_assess_args(assess_parser)
    _add_shared_args(assess_parser)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate a decodable story for a learner",
        description="Generate, validate and regenerate a story until it is decodable",
    )
    _add_generate_args(generate_parser)
    _add_shared_args(generate_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "validate" and args.taught is None and args.phase is None:
        parser.error("validate needs --taught or --phase")
    if args.command == "generate" and args.backend == "replay" and args.replay is None:
        parser.error("--backend replay needs --replay FILE")

    return args


def _run_decompose(args: argparse.Namespace) -> int:
    from decodable.decompose import WordDecomposer

    decomposer = WordDecomposer()
    for word in args.words:
        parts = ", ".join(f"{g.grapheme} {g.phoneme}" for g in decomposer.decompose(word))
        print(f"{word}: {parts}")
    return 0


def _run_validate(args: argparse.Namespace) -> int:
    from decodable.inventory import DEFAULT_INVENTORY
    from decodable.validate import DecodabilityValidator

    if args.taught is not None:
        taught = _split_graphemes(args.taught)
    else:
        taught = [g.grapheme for g in DEFAULT_INVENTORY.gpcs_for_phase(args.phase)]

    report = DecodabilityValidator().validate_story(
        args.text, taught, _split_graphemes(args.target), args.threshold,
    )

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        verdict = "PASS" if report.passes_threshold else "FAIL"
        print(f"{verdict}: {report.decodability_score:.1%} decodable "
              f"({report.decodable_words}/{report.total_words} words, "
              f"threshold {report.threshold:.0%})")
        print(f"Unique-word score: {report.unique_decodability_score:.1%}")
        print(f"Target coverage: {report.target_gpc_coverage:.1%}")
        if report.undecodable_words:
            print(f"Undecodable: {', '.join(report.undecodable_words)}")
    return 0 if report.passes_threshold else 2


def _run_assess(args: argparse.Namespace) -> int:
    from decodable.readaloud import assess, spoken_words_from_json

    if not args.spoken.exists():
        print(f"Error: file not found: {args.spoken}", file=sys.stderr)
        return 1

    records = json.loads(args.spoken.read_text(encoding="utf-8"))
    result = assess(args.expected, spoken_words_from_json(records), args.reading_time_ms)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(f"Accuracy: {result.accuracy:.1%}")
        print(f"WCPM: {result.wcpm}")
        for w in result.words:
            if not w.correct:
                print(f"  {w.error_type}: expected {w.expected!r}, heard {w.spoken!r}")
        if result.gpc_reinforcement:
            print("Reinforce:")
            for r in result.gpc_reinforcement:
                print(f"  {r.gpc}: {r.error_count}/{r.total_occurrences}")
    return 0


def _run_generate(args: argparse.Namespace) -> int:
    from decodable.errors import CollaboratorFailure, DecodabilityExhausted
    from decodable.story import fingerprint_from_dict, generate_story
    from decodable.story.config import RegenerationConfig
    from decodable.story.generators import get_generator

    if not args.fingerprint.exists():
        print(f"Error: file not found: {args.fingerprint}", file=sys.stderr)
        return 1

    try:
        fingerprint = fingerprint_from_dict(
            json.loads(args.fingerprint.read_text(encoding="utf-8"))
        )
    except ValueError as e:
        print(f"Error: invalid fingerprint {args.fingerprint}: {e}", file=sys.stderr)
        return 1
    config = RegenerationConfig(
        decodability_threshold=args.threshold,
        max_regeneration_attempts=args.max_attempts,
        attempt_timeout_s=args.timeout,
    )

    if args.backend == "replay":
        generator = get_generator("replay", path=args.replay)
    else:
        generator = get_generator("gemini")

    outcome = generate_story(fingerprint, generator, config=config, seed=args.seed)

    if isinstance(outcome, (DecodabilityExhausted, CollaboratorFailure)):
        print(json.dumps(outcome.to_dict(), indent=2, ensure_ascii=False), file=sys.stderr)
        return 2 if isinstance(outcome, DecodabilityExhausted) else 1

    text = json.dumps(outcome.to_dict(), indent=2, ensure_ascii=False)
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text + "\n", encoding="utf-8")
        print(f"Story {outcome.id}: {outcome.title!r} "
              f"({len(outcome.pages)} pages, {outcome.attempts} attempt(s))")
        print(f"Output: {args.output}")
    else:
        print(text)
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint."""
    args = parse_args(argv)

    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(name)s %(levelname)s: %(message)s",
    )

    if not args.verbose:
        logging.getLogger("httpx").setLevel(logging.ERROR)
        logging.getLogger("google_genai").setLevel(logging.ERROR)

    if args.command == "decompose":
        code = _run_decompose(args)
    elif args.command == "validate":
        code = _run_validate(args)
    elif args.command == "assess":
        code = _run_assess(args)
    else:
        code = _run_generate(args)

    sys.exit(code)


if __name__ == "__main__":
    main()
