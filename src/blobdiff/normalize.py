"""Pair normalization: decide whether two blobs are worth diffing."""

import logging
from typing import Optional

from .config import DiffOptions
from .models import ContentRef, DiffPairRequest, FileSide

logger = logging.getLogger(__name__)


def normalize_pair(
    old_ref: ContentRef,
    new_ref: ContentRef,
    options: DiffOptions,
    engine,
) -> Optional[DiffPairRequest]:
    """Build the request for a pair, queue it and flush it.

    Returns the request handed to the engine, or None when the pair was
    skipped because both sides are the same object or a path falls outside
    ``options.prefix``.
    """
    request = DiffPairRequest(old=FileSide.from_ref(old_ref), new=FileSide.from_ref(new_ref))

    # Compared before reversal
    if (
        request.old.exists
        and request.new.exists
        and request.old.oid == request.new.oid
        and request.old.mode == request.new.mode
    ):
        logger.debug(
            "Skipping identical pair",
            extra={"old": old_ref.name, "new": new_ref.name},
        )
        return None

    if options.reverse:
        request = request.swapped()

    if options.prefix and not (
        request.old.path.startswith(options.prefix)
        and request.new.path.startswith(options.prefix)
    ):
        logger.debug(
            "Skipping pair outside prefix",
            extra={"prefix": options.prefix, "old_path": request.old.path, "new_path": request.new.path},
        )
        return None

    engine.queue(request)
    engine.compute_and_flush()
    return request
