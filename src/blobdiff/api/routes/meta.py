"""Meta endpoints for blobdiff API."""

import logging
from typing import Optional

from fastapi import APIRouter

from ... import __version__
from ...config import DiffOptions
from ...errors import GitVersionUnsupportedError
from ...vcs import GitRepository
from ..models import HealthResponse, VersionResponse

router = APIRouter(tags=["meta"])

logger = logging.getLogger(__name__)


def _supported_git_version() -> Optional[str]:
    """Return the git version, or None when git is missing or too old."""
    try:
        return GitRepository(DiffOptions()).validate_git_version()
    except GitVersionUnsupportedError as exc:
        logger.warning("Git is not usable", extra={"details": exc.details})
        return None


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    git_version = _supported_git_version()
    logger.info("Health check", extra={"git_version": git_version})
    return HealthResponse(
        status="healthy",
        version=__version__,
        git_available=git_version is not None,
        git_version=git_version,
    )


@router.get("/version", response_model=VersionResponse)
def version_info() -> VersionResponse:
    return VersionResponse(
        version=__version__,
        api_version="v1",
        git_version=_supported_git_version(),
    )


@router.get("/", include_in_schema=False)
def root() -> dict:
    return {
        "name": "blobdiff API",
        "version": __version__,
        "endpoints": {
            "diff-blob": "POST /diff-blob",
            "health": "GET /health",
            "version": "GET /version",
        },
    }
