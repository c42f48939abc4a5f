"""HTTP API for blobdiff."""

from .. import __version__

__all__ = ["__version__"]
