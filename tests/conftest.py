"""Pytest configuration and fixtures for blobdiff tests."""

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Dict, Generator, List, Optional

import pytest

from blobdiff.errors import ResolutionError
from blobdiff.models import ContentRef


def make_ref(
    name: str,
    oid: Optional[str],
    mode: Optional[int] = None,
    path: Optional[str] = None,
    object_type: str = "blob",
) -> ContentRef:
    """Build a resolved reference for tests."""
    return ContentRef(name=name, oid=oid, mode=mode, recorded_path=path, object_type=object_type)


class FakeResolver:
    """Resolver backed by a dictionary, recording lookups in order."""

    def __init__(self, refs: Dict[str, ContentRef]):
        self.refs = refs
        self.calls: List[str] = []

    def resolve(self, name: str) -> ContentRef:
        self.calls.append(name)
        if name not in self.refs:
            raise ResolutionError(name)
        return self.refs[name]


class RecordingEngine:
    """Engine double that records every queue and flush call."""

    def __init__(self):
        self.events: List[tuple] = []
        self.flushed: List = []
        self._queued = None

    def queue(self, request) -> None:
        self.events.append(("queue", request))
        self._queued = request

    def compute_and_flush(self) -> bool:
        self.events.append(("flush", self._queued))
        self.flushed.append(self._queued)
        self._queued = None
        return True

    def result_code(self) -> int:
        return 1 if self.flushed else 0


@pytest.fixture
def fake_resolver() -> FakeResolver:
    """Resolver knowing blobs A-D, two names for one blob, and a tree."""
    return FakeResolver(
        {
            "A": make_ref("A", "a" * 40),
            "B": make_ref("B", "b" * 40),
            "C": make_ref("C", "c" * 40),
            "D": make_ref("D", "d" * 40),
            "SAME1": make_ref("SAME1", "e" * 40, path="one.txt"),
            "SAME2": make_ref("SAME2", "e" * 40, path="two.txt"),
            "TREE": make_ref("TREE", "f" * 40, object_type="tree"),
        }
    )


@pytest.fixture
def recording_engine() -> RecordingEngine:
    """Engine double for normalizer and driver tests."""
    return RecordingEngine()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp(prefix="blobdiff_test_"))
    try:
        yield temp_path
    finally:
        if temp_path.exists():
            shutil.rmtree(temp_path, ignore_errors=True)


class GitRepoHelper:
    """Helper class for git repository operations in tests."""

    def __init__(self, repo_path: Path):
        self.repo_path = repo_path
        self.env = os.environ.copy()
        self.env.update({
            "GIT_AUTHOR_NAME": "Test User",
            "GIT_AUTHOR_EMAIL": "test@example.com",
            "GIT_COMMITTER_NAME": "Test User",
            "GIT_COMMITTER_EMAIL": "test@example.com",
        })

    def run_git(self, args: list, input: Optional[bytes] = None) -> subprocess.CompletedProcess:
        """Run git command in the repository."""
        return subprocess.run(
            ["git"] + args,
            cwd=self.repo_path,
            env=self.env,
            check=True,
            capture_output=True,
            input=input,
        )

    def create_file(self, path: str, content: str, executable: bool = False) -> None:
        """Create a file with content."""
        file_path = self.repo_path / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)
        if executable:
            file_path.chmod(0o755)

    def add_and_commit(self, message: str) -> str:
        """Stage everything and commit, return commit SHA."""
        self.run_git(["add", "-A"])
        self.run_git(["commit", "-m", message])
        return self.rev_parse("HEAD")

    def rev_parse(self, name: str) -> str:
        """Return the object id ``name`` resolves to."""
        return self.run_git(["rev-parse", name]).stdout.decode().strip()

    def hash_blob(self, content: bytes) -> str:
        """Write a loose blob and return its id."""
        result = self.run_git(["hash-object", "-w", "--stdin"], input=content)
        return result.stdout.decode().strip()


@pytest.fixture
def git_repo(temp_dir: Path) -> Generator[Path, None, None]:
    """Create a temporary git repository for testing."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    helper = GitRepoHelper(repo_path)
    helper.run_git(["init"])
    helper.run_git(["config", "user.name", "Test User"])
    helper.run_git(["config", "user.email", "test@example.com"])
    helper.run_git(["config", "core.filemode", "true"])

    # Create initial commit
    helper.create_file("README.md", "# Test Repository\n")
    helper.add_and_commit("Initial commit")

    yield repo_path


@pytest.fixture
def git_helper(git_repo: Path) -> GitRepoHelper:
    """Create a git repository helper."""
    return GitRepoHelper(git_repo)
