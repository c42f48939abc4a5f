"""Service layer for the blobdiff API."""

from .diff import BlobDiffService

__all__ = ["BlobDiffService"]
