"""Main CLI entry point for blobdiff."""

import argparse
import dataclasses
import logging
import sys
from typing import Iterable, List, Optional, Sequence

from . import __version__
from .batch import resolve_blob, run_batch
from .config import DiffOptions
from .engine import DiffEngine
from .errors import EXIT_FATAL, EXIT_USAGE, BlobDiffError, UsageError
from .logging_utils import configure_logging
from .normalize import normalize_pair
from .settings import get_default_repo
from .vcs import GitRepository

logger = logging.getLogger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with the usage exit status."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = _ArgumentParser(
        prog="blobdiff",
        usage="%(prog)s [options] <blob> <blob>\n       %(prog)s [options] --stdin",
        description="Show changes between two blobs, or between pairs of blobs read from stdin",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  blobdiff HEAD~1:README.md HEAD:README.md
  blobdiff -R --name-status 3b18e51 a1c3f07
  printf 'v1.0:setup.py v2.0:setup.py\\n' | blobdiff --stdin --relative=src/
        """,
    )

    parser.add_argument(
        "objects",
        nargs="*",
        metavar="blob",
        help="Blob names (object ids, <tree-ish>:<path>, :<path>)",
    )
    parser.add_argument(
        "--stdin",
        action="store_true",
        help="Read blob pairs from stdin, one space-separated pair per line",
    )
    parser.add_argument(
        "-C",
        "--repo",
        help="Repository path (default: $BLOBDIFF_REPO or the current directory)",
    )

    # Pair options
    parser.add_argument(
        "-R",
        dest="reverse",
        action="store_true",
        help="Swap the two sides of every pair",
    )
    parser.add_argument(
        "--relative",
        nargs="?",
        const="",
        default=None,
        metavar="PREFIX",
        help="Only show pairs whose paths both start with PREFIX (default: current subdirectory)",
    )

    # Output options
    formats = parser.add_mutually_exclusive_group()
    for flags, value, help_text in (
        (("-p", "--patch"), "patch", "Generate a patch (default)"),
        (("--raw",), "raw", "Generate the raw format"),
        (("--name-only",), "name-only", "Show only the path of each changed pair"),
        (("--name-status",), "name-status", "Show the path and status of each changed pair"),
        (("--stat",), "stat", "Generate a diffstat"),
        (("-s", "--no-patch"), "no-patch", "Suppress all output"),
    ):
        formats.add_argument(
            *flags,
            dest="output_format",
            action="store_const",
            const=value,
            help=help_text,
        )
    parser.set_defaults(output_format="patch")

    parser.add_argument(
        "-U",
        "--unified",
        type=int,
        default=3,
        help="Number of context lines in patches (default: 3)",
    )
    parser.add_argument(
        "--abbrev",
        type=int,
        default=7,
        help="Object id digits on patch index lines (default: 7)",
    )
    parser.add_argument(
        "--full-index",
        action="store_true",
        help="Show full object ids on patch index lines",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Log level (default: $LOG_LEVEL or WARNING)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def validate_args(args: argparse.Namespace) -> None:
    """Validate command line arguments."""
    if args.unified < 0:
        raise ValueError("--unified cannot be negative")
    if not (4 <= args.abbrev <= 40):
        raise ValueError("--abbrev must be between 4 and 40")


def create_options(args: argparse.Namespace) -> DiffOptions:
    """Create options from command line arguments."""
    return DiffOptions(
        reverse=args.reverse,
        prefix=args.relative or None,
        output_format=args.output_format,
        context_lines=args.unified,
        abbrev=args.abbrev,
        full_index=args.full_index,
        repo_path=args.repo or get_default_repo(),
    )


def check_usage(names: Sequence[str], read_stdin: bool) -> None:
    """Reject combinations of object names and --stdin that select no mode."""
    if read_stdin and names:
        raise UsageError("--stdin cannot be combined with blob arguments")
    if not read_stdin and len(names) != 2:
        raise UsageError("exactly two blobs are required without --stdin")


def dispatch(
    names: Sequence[str],
    read_stdin: bool,
    resolver,
    options: DiffOptions,
    engine,
    stdin: Optional[Iterable[str]] = None,
) -> int:
    """Run single-pair or batch mode and return the diff result code."""
    check_usage(names, read_stdin)

    if read_stdin:
        run_batch(stdin if stdin is not None else sys.stdin, resolver, options, engine)
    else:
        old_ref = resolve_blob(resolver, names[0])
        new_ref = resolve_blob(resolver, names[1])
        normalize_pair(old_ref, new_ref, options, engine)

    return engine.result_code()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        configure_logging(args.log_level, default="WARNING")
        validate_args(args)
        check_usage(args.objects, args.stdin)

        options = create_options(args)
        repo = GitRepository(options)
        repo.validate_git_version()

        if args.relative == "":
            options = dataclasses.replace(options, prefix=repo.current_prefix())

        sys.stdout.flush()
        engine = DiffEngine(repo, options, sys.stdout.buffer)
        return dispatch(args.objects, args.stdin, repo, options, engine)

    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(f"error: {e.message}", file=sys.stderr)
        return e.exit_code

    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE

    except BlobDiffError as e:
        logger.debug("Fatal error", extra={"code": e.code, "details": e.details})
        print(f"fatal: {e.message}", file=sys.stderr)
        return e.exit_code

    except Exception as e:
        logger.exception("Unexpected error")
        print(f"fatal: internal error: {e}", file=sys.stderr)
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
