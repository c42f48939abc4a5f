"""Diff computation and rendering for queued blob pairs."""

import difflib
import logging
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Tuple

from .config import DiffOptions
from .models import NULL_OID, DiffPairRequest, FileSide

logger = logging.getLogger(__name__)

# git inspects the first 8000 bytes for a NUL when guessing binary content
_BINARY_CHECK_SIZE = 8000
_STAT_GRAPH_WIDTH = 50
_NO_NEWLINE_MARKER = b"\\ No newline at end of file\n"


@dataclass
class PairContent:
    """Loaded contents of both sides of a request."""

    old: bytes
    new: bytes

    @property
    def is_binary(self) -> bool:
        return (
            b"\0" in self.old[:_BINARY_CHECK_SIZE]
            or b"\0" in self.new[:_BINARY_CHECK_SIZE]
        )


class DiffEngine:
    """Computes and renders one queued pair at a time.

    The engine keeps the output stream and options for the whole invocation,
    and remembers whether any flushed pair differed. Output is written as
    bytes so blob contents reach the stream unchanged.
    """

    def __init__(self, repo, options: DiffOptions, stream: BinaryIO):
        """Initialize with a blob reader, the invocation options and a binary output stream."""
        self.repo = repo
        self.options = options
        self.stream = stream
        self.has_differences = False
        self.flushed_pairs = 0
        self._queued: Optional[DiffPairRequest] = None

    def queue(self, request: DiffPairRequest) -> None:
        """Queue a pair for the next flush."""
        if self._queued is not None:
            raise RuntimeError("a diff pair is already queued")
        self._queued = request

    def compute_and_flush(self) -> bool:
        """Render the queued pair and clear the queue.

        Returns True when the pair differed.
        """
        request = self._queued
        self._queued = None
        if request is None:
            return False

        old, new = request.old, request.new
        if old.exists == new.exists and old.oid == new.oid and old.mode == new.mode:
            logger.debug("Queued pair is unchanged", extra={"path": new.path})
            return False

        self.has_differences = True
        content = PairContent(
            old=self.repo.read_blob(old.oid),
            new=self.repo.read_blob(new.oid),
        )

        renderer = _RENDERERS[self.options.output_format]
        data = renderer(self, request, content)
        if data:
            self.stream.write(data)
            self.stream.flush()

        self.flushed_pairs += 1
        logger.debug(
            "Flushed pair",
            extra={"old_path": old.path, "new_path": new.path, "status": request.status},
        )
        return True

    def result_code(self) -> int:
        """Return 1 when any flushed pair differed, otherwise 0."""
        return 1 if self.has_differences else 0

    def _display_path(self, path: str) -> str:
        prefix = self.options.prefix
        if prefix and path.startswith(prefix):
            return path[len(prefix):]
        return path

    def _abbrev(self, side: FileSide) -> str:
        oid = side.oid or NULL_OID
        return oid[: self.options.index_abbrev]

    def render_patch(self, request: DiffPairRequest, content: PairContent) -> bytes:
        old, new = request.old, request.new
        old_name = "a/" + self._display_path(old.path)
        new_name = "b/" + self._display_path(new.path)

        lines = [f"diff --git {old_name} {new_name}\n"]
        if not old.exists:
            lines.append(f"new file mode {new.mode:06o}\n")
        elif not new.exists:
            lines.append(f"deleted file mode {old.mode:06o}\n")
        elif old.mode != new.mode:
            lines.append(f"old mode {old.mode:06o}\n")
            lines.append(f"new mode {new.mode:06o}\n")

        if old.oid == new.oid:
            # Mode-only change
            return _encode("".join(lines))

        index = f"index {self._abbrev(old)}..{self._abbrev(new)}"
        if old.exists and new.exists and old.mode == new.mode:
            index += f" {old.mode:06o}"
        lines.append(index + "\n")

        from_name = old_name if old.exists else "/dev/null"
        to_name = new_name if new.exists else "/dev/null"

        if content.is_binary:
            lines.append(f"Binary files {from_name} and {to_name} differ\n")
            return _encode("".join(lines))

        hunks = _unified_hunks(content, self.options.context_lines)
        if hunks:
            lines.append(f"--- {from_name}\n")
            lines.append(f"+++ {to_name}\n")
        return _encode("".join(lines)) + b"".join(hunks)

    def render_raw(self, request: DiffPairRequest, content: PairContent) -> bytes:
        old, new = request.old, request.new
        old_mode = old.mode if old.exists else 0
        new_mode = new.mode if new.exists else 0
        return _encode(
            f":{old_mode:06o} {new_mode:06o} "
            f"{old.oid or NULL_OID} {new.oid or NULL_OID} "
            f"{request.status}\t{self._display_path(new.path)}\n"
        )

    def render_name_only(self, request: DiffPairRequest, content: PairContent) -> bytes:
        return _encode(self._display_path(request.new.path) + "\n")

    def render_name_status(self, request: DiffPairRequest, content: PairContent) -> bytes:
        return _encode(f"{request.status}\t{self._display_path(request.new.path)}\n")

    def render_stat(self, request: DiffPairRequest, content: PairContent) -> bytes:
        old_path = self._display_path(request.old.path)
        new_path = self._display_path(request.new.path)
        name = new_path if old_path == new_path else f"{old_path} => {new_path}"

        if content.is_binary:
            return _encode(
                f" {name} | Bin {len(content.old)} -> {len(content.new)} bytes\n"
                " 1 file changed, 0 insertions(+), 0 deletions(-)\n"
            )

        added, deleted = _count_changes(content)
        total = added + deleted
        plus, minus = added, deleted
        if total > _STAT_GRAPH_WIDTH:
            plus = max(1, added * _STAT_GRAPH_WIDTH // total) if added else 0
            minus = max(1, deleted * _STAT_GRAPH_WIDTH // total) if deleted else 0

        summary = " 1 file changed"
        if added or not deleted:
            summary += f", {added} insertion{'' if added == 1 else 's'}(+)"
        if deleted or not added:
            summary += f", {deleted} deletion{'' if deleted == 1 else 's'}(-)"
        return _encode(f" {name} | {total} {'+' * plus}{'-' * minus}\n{summary}\n")

    def render_nothing(self, request: DiffPairRequest, content: PairContent) -> bytes:
        return b""


_RENDERERS = {
    "patch": DiffEngine.render_patch,
    "raw": DiffEngine.render_raw,
    "name-only": DiffEngine.render_name_only,
    "name-status": DiffEngine.render_name_status,
    "stat": DiffEngine.render_stat,
    "no-patch": DiffEngine.render_nothing,
}


def _encode(text: str) -> bytes:
    # Paths come from argv or git output and may carry undecodable bytes
    return text.encode("utf-8", errors="surrogateescape")


def _split_lines(data: bytes) -> List[bytes]:
    """Split on LF only, keeping terminators; other control bytes stay in the line."""
    lines = [line + b"\n" for line in data.split(b"\n")]
    lines[-1] = lines[-1][:-1]
    if not lines[-1]:
        lines.pop()
    return lines


def _unified_hunks(content: PairContent, context_lines: int) -> List[bytes]:
    """Return the hunk lines of a unified diff, header lines excluded."""
    diff = difflib.diff_bytes(
        difflib.unified_diff,
        _split_lines(content.old),
        _split_lines(content.new),
        n=context_lines,
        lineterm=b"",
    )

    hunks: List[bytes] = []
    for line in diff:
        if line.startswith((b"---", b"+++")) and not hunks:
            continue
        if line.startswith(b"@@"):
            hunks.append(line + b"\n")
        elif line.endswith(b"\n"):
            hunks.append(line)
        else:
            hunks.append(line + b"\n")
            hunks.append(_NO_NEWLINE_MARKER)
    return hunks


def _count_changes(content: PairContent) -> Tuple[int, int]:
    added = deleted = 0
    for line in _unified_hunks(content, 0):
        if line.startswith(b"@@") or line == _NO_NEWLINE_MARKER:
            continue
        if line.startswith(b"+"):
            added += 1
        elif line.startswith(b"-"):
            deleted += 1
    return added, deleted
