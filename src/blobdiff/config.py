"""Configuration management for blobdiff."""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

OUTPUT_FORMATS = ("patch", "raw", "name-only", "name-status", "stat", "no-patch")


@dataclass(frozen=True)
class DiffOptions:
    """Options for one invocation, shared read-only by every pair."""

    # Pair normalization
    reverse: bool = False
    prefix: Optional[str] = None

    # Rendering
    output_format: str = "patch"
    context_lines: int = 3
    abbrev: int = 7
    full_index: bool = False

    # Repository location, None means the current directory
    repo_path: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"output_format must be one of {', '.join(OUTPUT_FORMATS)}"
            )
        if self.context_lines < 0:
            raise ValueError("context_lines cannot be negative")
        if not (4 <= self.abbrev <= 40):
            raise ValueError("abbrev must be between 4 and 40")

    @property
    def index_abbrev(self) -> int:
        """Number of hex digits shown on the patch ``index`` line."""
        return 40 if self.full_index else self.abbrev

    @property
    def git_env(self) -> Dict[str, str]:
        """Get Git environment variables for deterministic output."""
        env = os.environ.copy()

        null_device = "NUL" if os.name == "nt" else "/dev/null"

        env.update(
            {
                "LC_ALL": "C",
                "GIT_CONFIG_GLOBAL": null_device,
                "GIT_CONFIG_SYSTEM": null_device,
                "GIT_TERMINAL_PROMPT": "0",
                "GIT_ASKPASS": "echo",
                "SSH_ASKPASS": "echo",
            }
        )
        return env

    def to_dict(self) -> Dict[str, Any]:
        """Convert options to a dictionary for logging and API responses."""
        return {
            "reverse": self.reverse,
            "prefix": self.prefix,
            "output_format": self.output_format,
            "context_lines": self.context_lines,
            "abbrev": self.index_abbrev,
        }
