"""Service layer for the blobdiff API."""

import io
import logging
from typing import Any, Dict, List, Optional

from ...batch import run_batch
from ...config import DiffOptions
from ...engine import DiffEngine
from ...errors import BlobDiffError
from ...serialize import create_error_envelope, create_success_envelope
from ...vcs import GitRepository

logger = logging.getLogger(__name__)


class BlobDiffService:
    """Runs batch blob diffs on behalf of HTTP requests."""

    def process_request(
        self,
        repo_path: str,
        lines: List[str],
        reverse: bool = False,
        prefix: Optional[str] = None,
        output_format: str = "patch",
        context_lines: int = 3,
    ) -> Dict[str, Any]:
        """Diff every pair in ``lines`` and return the response envelope.

        The first malformed or unresolvable line aborts the request; the
        error envelope then reports how much output was already produced.
        """
        logger.info(
            "Processing diff-blob request",
            extra={"repo": repo_path, "pairs": len(lines)},
        )

        options = DiffOptions(
            reverse=reverse,
            prefix=prefix or None,
            output_format=output_format,
            context_lines=context_lines,
            repo_path=repo_path,
        )
        output = io.BytesIO()
        repo = GitRepository(options)
        engine = DiffEngine(repo, options, output)

        try:
            repo.validate_git_version()
            processed = run_batch(lines, repo, options, engine)

        except BlobDiffError as exc:
            logger.warning(
                "Known blobdiff error",
                extra={"repo": repo_path, "code": exc.code},
            )
            details = dict(exc.details)
            details["exit_code"] = exc.exit_code
            details["partial_output"] = _decode(output.getvalue())
            return create_error_envelope(exc.code, exc.message, details)

        payload = {
            "output": _decode(output.getvalue()),
            "has_differences": engine.has_differences,
            "exit_code": engine.result_code(),
            "pairs": processed,
            "changed_pairs": engine.flushed_pairs,
            "options": options.to_dict(),
        }
        logger.info(
            "Diff-blob request succeeded",
            extra={"repo": repo_path, "pairs": processed, "changed": engine.flushed_pairs},
        )
        return create_success_envelope(payload)


def _decode(output: bytes) -> str:
    # JSON carries text; undecodable blob bytes are shown as U+FFFD
    return output.decode("utf-8", errors="replace")
