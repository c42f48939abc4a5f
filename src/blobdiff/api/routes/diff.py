"""Diff routes for blobdiff API."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from ..models import BlobDiffRequest
from ..services import BlobDiffService

router = APIRouter(tags=["diff"])

logger = logging.getLogger(__name__)

diff_service = BlobDiffService()


@router.post("/diff-blob")
def diff_blobs(request: BlobDiffRequest) -> Dict[str, Any]:
    """Diff a list of blob pairs in order."""
    logger.info(
        "Received diff-blob request",
        extra={"repo": request.repo_path, "pairs": len(request.lines)},
    )

    try:
        return diff_service.process_request(
            repo_path=request.repo_path,
            lines=request.lines,
            reverse=request.reverse,
            prefix=request.prefix,
            output_format=request.output_format,
            context_lines=request.context_lines,
        )

    except Exception as exc:
        logger.exception("Diff-blob request failed", extra={"repo": request.repo_path})
        raise HTTPException(
            status_code=500,
            detail={
                "ok": False,
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": f"Failed to process diff: {str(exc)}",
                    "details": {"exception_type": type(exc).__name__},
                },
            },
        ) from exc
