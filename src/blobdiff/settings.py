"""Application-wide settings and environment loading."""

import logging
import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()
logger.debug("Environment variables loaded from .env if present")


@lru_cache(maxsize=1)
def get_default_repo() -> Optional[str]:
    """Return the repository used when ``--repo`` is not given."""
    repo = os.getenv("BLOBDIFF_REPO")
    if repo:
        logger.debug("Default repository configured", extra={"repo": repo})
        return repo

    logger.debug("No default repository configured")
    return None


@lru_cache(maxsize=1)
def get_git_binary() -> str:
    """Return the git executable to run."""
    return os.getenv("BLOBDIFF_GIT", "git")
