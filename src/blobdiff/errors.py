"""Error definitions and handling for blobdiff."""

from typing import Any, Dict, Optional

EXIT_FATAL = 128
EXIT_USAGE = 129


class BlobDiffError(Exception):
    """Base exception for blobdiff errors."""

    exit_code = EXIT_FATAL

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize error with code, message, and optional details."""
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        result = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class ResolutionError(BlobDiffError):
    """A token does not name exactly one existing object."""

    def __init__(self, name: str, reason: Optional[str] = None):
        details = {"name": name}
        if reason:
            details["reason"] = reason
        super().__init__(
            code="INVALID_OBJECT",
            message=f"invalid object {name} given",
            details=details,
        )


class NotABlobError(BlobDiffError):
    """A resolved object is not a blob."""

    def __init__(self, name: str, object_type: str):
        super().__init__(
            code="OBJECT_NOT_BLOB",
            message=f"object {name} is not a blob",
            details={"name": name, "object_type": object_type},
        )


class BatchFormatError(BlobDiffError):
    """A batch line does not hold exactly two tokens."""

    def __init__(self, line: str, line_number: int, token_count: int):
        super().__init__(
            code="TWO_BLOBS_NOT_PROVIDED",
            message="two blobs not provided",
            details={
                "line": line,
                "line_number": line_number,
                "token_count": token_count,
            },
        )


class UsageError(BlobDiffError):
    """Invalid combination of positional objects and --stdin."""

    exit_code = EXIT_USAGE

    def __init__(self, reason: str):
        super().__init__(
            code="USAGE",
            message=reason,
            details={"reason": reason},
        )


class GitCommandError(BlobDiffError):
    """A git subprocess failed unexpectedly."""

    def __init__(self, args: list, returncode: int, stderr: str):
        super().__init__(
            code="GIT_COMMAND_FAILED",
            message=f"git {' '.join(args)} failed: {stderr.strip() or returncode}",
            details={"args": args, "returncode": returncode, "stderr": stderr},
        )


class GitVersionUnsupportedError(BlobDiffError):
    """Git version is not supported."""

    def __init__(self, detected_version: str, required_version: str = "2.30"):
        super().__init__(
            code="GIT_VERSION_UNSUPPORTED",
            message=f"Git version {detected_version} is not supported. "
            f"Minimum required: {required_version}",
            details={
                "detected_version": detected_version,
                "required_version": required_version,
            },
        )
