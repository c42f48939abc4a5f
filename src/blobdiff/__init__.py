"""blobdiff.

Compare pairs of Git blobs, either a single explicit pair or a stream of
pairs read from standard input, and render the result the way ``git diff``
does.
"""

__version__ = "1.0.0"
__author__ = "blobdiff developers"

__all__ = ["__version__"]
