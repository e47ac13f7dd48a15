from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from silent_partners.app import deduplicate_file, merge_files, stream_into_file
from silent_partners.common import configure_logging, level_for_verbosity

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build and maintain Silent Partners graphs")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log output (repeatable)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    dedupe = subparsers.add_parser("dedupe", help="Collapse duplicate entities in a graph file")
    dedupe.add_argument("graph", type=Path, help="Graph JSON document")
    dedupe.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Write the result here instead of overwriting the input",
    )

    merge = subparsers.add_parser("merge", help="Merge one graph file into another")
    merge.add_argument("base", type=Path, help="Graph JSON document to merge into")
    merge.add_argument("incoming", type=Path, help="Graph JSON document to merge from")
    merge.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Write the result here instead of overwriting the base document",
    )

    stream = subparsers.add_parser(
        "stream",
        help="Stream pipeline results into a graph file",
    )
    stream.add_argument("graph", type=Path, help="Graph JSON document (created if missing)")
    source = stream.add_mutually_exclusive_group(required=True)
    source.add_argument("--text", type=str, help="Text to extract entities from")
    source.add_argument(
        "--text-file",
        type=Path,
        help="File whose contents are sent for extraction",
    )
    source.add_argument(
        "--research",
        nargs=2,
        metavar=("ENTITY1", "ENTITY2"),
        help="Research connections between two entities",
    )

    return parser.parse_args(list(argv))


def _read_text(args: argparse.Namespace) -> str | None:
    if args.text is not None:
        text = args.text
    elif args.text_file is not None:
        try:
            text = args.text_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise ValueError(f"Cannot read {args.text_file}: {exc}") from exc
    else:
        return None
    if not text.strip():
        raise ValueError("Extraction text must not be empty")
    return text


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        verbosity = -1 if parsed_args.quiet else parsed_args.verbose
        configure_logging(level=level_for_verbosity(verbosity))
        text = _read_text(parsed_args) if parsed_args.command == "stream" else None
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "dedupe":
            deduplicate_file(parsed_args.graph, output=parsed_args.output)
        elif parsed_args.command == "merge":
            merge_files(parsed_args.base, parsed_args.incoming, output=parsed_args.output)
        elif parsed_args.command == "stream":
            research = tuple(parsed_args.research) if parsed_args.research else None
            result = stream_into_file(parsed_args.graph, text=text, research=research)
            log.info(
                "Stream finished: entities=%s (+%s merged), relationships=%s, dropped=%s",
                result.entities_added,
                result.entities_merged,
                result.relationships_added,
                result.relationships_dropped,
            )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
