"""Pydantic models for blobdiff API requests and responses."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class BlobDiffRequest(BaseModel):
    """Request model for the diff-blob endpoint."""

    repo_path: str = Field(
        ...,
        description="Absolute path of a local repository",
        examples=["/srv/git/project"],
    )
    lines: List[str] = Field(
        ...,
        description="Blob pairs, one '<old> <new>' pair per entry, as read by --stdin",
        examples=[["HEAD~1:README.md HEAD:README.md"]],
        min_length=1,
    )
    reverse: bool = Field(False, description="Swap the two sides of every pair")
    prefix: Optional[str] = Field(
        None,
        description="Only diff pairs whose paths both start with this prefix",
        examples=["src/"],
    )
    output_format: Literal["patch", "raw", "name-only", "name-status", "stat", "no-patch"] = Field(
        "patch",
        description="Rendering of each changed pair",
    )
    context_lines: int = Field(
        3,
        description="Number of context lines in patches",
        ge=0,
        le=100,
    )

    @field_validator("repo_path")
    @classmethod
    def repo_path_must_be_absolute(cls, v):
        """Only absolute local paths are accepted."""
        v = v.strip()
        if not v:
            raise ValueError("repo_path cannot be empty")
        if not (v.startswith("/") or (len(v) > 2 and v[1] == ":")):
            raise ValueError("repo_path must be an absolute path")
        return v


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str = Field(..., examples=["healthy"])
    version: str = Field(..., examples=["1.0.0"])
    git_available: bool = Field(..., examples=[True])
    git_version: Optional[str] = Field(None, examples=["2.43.0"])


class VersionResponse(BaseModel):
    """Response model for version endpoint."""

    version: str = Field(..., examples=["1.0.0"])
    api_version: str = Field(..., examples=["v1"])
    git_version: Optional[str] = Field(None, examples=["2.43.0"])
    supported_formats: list = Field(
        default_factory=lambda: [
            "patch",
            "raw",
            "name-only",
            "name-status",
            "stat",
            "no-patch",
        ]
    )
