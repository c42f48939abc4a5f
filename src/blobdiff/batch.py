"""Batch mode: diff one blob pair per input line."""

import logging
from typing import Iterable, Tuple

from .config import DiffOptions
from .errors import BatchFormatError, NotABlobError
from .models import ContentRef
from .normalize import normalize_pair

logger = logging.getLogger(__name__)


def split_pair(line: str, line_number: int) -> Tuple[str, str]:
    """Split a line on single spaces into exactly two object names."""
    tokens = line.split(" ")
    if len(tokens) != 2:
        raise BatchFormatError(line, line_number, len(tokens))
    return tokens[0], tokens[1]


def resolve_blob(resolver, name: str) -> ContentRef:
    """Resolve ``name`` and require it to be a blob."""
    ref = resolver.resolve(name)
    if not ref.is_blob:
        raise NotABlobError(name, ref.object_type)
    return ref


def run_batch(
    lines: Iterable[str],
    resolver,
    options: DiffOptions,
    engine,
) -> int:
    """Diff every pair in ``lines`` in order and return how many lines were read.

    Stops at the first malformed line or unresolvable name; pairs already
    processed have been flushed by then.
    """
    processed = 0
    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.rstrip("\n")
        if line.endswith("\r"):
            line = line[:-1]

        old_name, new_name = split_pair(line, line_number)
        old_ref = resolve_blob(resolver, old_name)
        new_ref = resolve_blob(resolver, new_name)

        normalize_pair(old_ref, new_ref, options, engine)
        processed += 1

    logger.info("Batch finished", extra={"lines": processed})
    return processed
