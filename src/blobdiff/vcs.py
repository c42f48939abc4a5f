"""Version control system operations for blobdiff."""

import logging
import posixpath
import re
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple

from .config import DiffOptions
from .errors import GitCommandError, GitVersionUnsupportedError, ResolutionError
from .models import ContentRef
from .settings import get_git_binary

logger = logging.getLogger(__name__)

# ":<path>" or ":<stage>:<path>" names an index entry; ":/<text>" is a commit search.
_INDEX_PATH_PATTERN = re.compile(r"^:(?:([0-3]):)?(?!/)(.+)$")


class GitRepository:
    """Object lookups against a local Git repository."""

    def __init__(self, options: DiffOptions, git: Optional[str] = None):
        """Initialize with the invocation options."""
        self.options = options
        self.workdir: Optional[Path] = Path(options.repo_path) if options.repo_path else None
        self.git = git or get_git_binary()
        self._git_version: Optional[str] = None

    def _run_git(
        self,
        args: List[str],
        timeout: int = 60,
        check: bool = True,
        text: bool = True,
    ) -> subprocess.CompletedProcess:
        """Run git command with proper environment and error handling."""
        # Enforce deterministic git behavior across platforms
        cmd = [
            self.git,
            "-c",
            "core.autocrlf=false",
            "-c",
            "color.ui=false",
        ] + args
        logger.debug("Running git", extra={"git_args": args})
        try:
            return subprocess.run(
                cmd,
                cwd=self.workdir,
                env=self.options.git_env,
                timeout=timeout,
                check=check,
                capture_output=True,
                text=text,
            )
        except subprocess.TimeoutExpired as e:
            raise GitCommandError(args, -1, f"timed out after {timeout}s") from e
        except FileNotFoundError as e:
            raise GitCommandError(args, 127, f"{self.git}: executable not found") from e

    def validate_git_version(self) -> str:
        """Validate Git version meets minimum requirements."""
        if self._git_version:
            return self._git_version

        try:
            result = self._run_git(["--version"], timeout=10)
        except (subprocess.CalledProcessError, GitCommandError) as e:
            raise GitVersionUnsupportedError("unavailable", "2.30") from e

        # Extract version number from "git version 2.34.1"
        match = re.search(r"git version (\d+\.\d+(?:\.\d+)?)", result.stdout.strip())
        if not match:
            raise GitVersionUnsupportedError("unknown", "2.30")

        version_str = match.group(1)
        major, minor = (int(x) for x in version_str.split(".")[:2])
        if major < 2 or (major == 2 and minor < 30):
            raise GitVersionUnsupportedError(version_str, "2.30")

        self._git_version = version_str
        return version_str

    def resolve(self, name: str) -> ContentRef:
        """Resolve an object name, recording the path and mode it was found at."""
        if not name or name.startswith("-"):
            raise ResolutionError(name)

        try:
            result = self._run_git(["rev-parse", "--verify", "--quiet", name])
        except subprocess.CalledProcessError as e:
            raise ResolutionError(name, (e.stderr or "").strip() or None) from e
        oid = result.stdout.strip()

        object_type = self.object_type(oid)
        recorded_path, mode = self._object_context(name, oid)

        ref = ContentRef(
            name=name,
            oid=oid,
            mode=mode,
            recorded_path=recorded_path,
            object_type=object_type,
        )
        logger.debug(
            "Resolved object",
            extra={"object_name": name, "oid": oid, "type": object_type, "path": recorded_path},
        )
        return ref

    def object_type(self, oid: str) -> str:
        """Return the type of an existing object."""
        try:
            result = self._run_git(["cat-file", "-t", oid])
        except subprocess.CalledProcessError as e:
            raise ResolutionError(oid, (e.stderr or "").strip() or None) from e
        return result.stdout.strip()

    def read_blob(self, oid: Optional[str]) -> bytes:
        """Return the contents of a blob; a missing side reads as empty."""
        if oid is None:
            return b""
        try:
            result = self._run_git(["cat-file", "blob", oid], text=False)
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode("utf-8", errors="replace") if e.stderr else ""
            raise GitCommandError(["cat-file", "blob", oid], e.returncode, stderr) from e
        return result.stdout

    def _object_context(self, name: str, oid: str) -> Tuple[Optional[str], Optional[int]]:
        """Return the (path, mode) an object name records, if any."""
        index_match = _INDEX_PATH_PATTERN.match(name)
        if index_match:
            stage = int(index_match.group(1) or 0)
            path = self._top_level_path(index_match.group(2))
            return path, self._index_mode(path, stage, oid)

        if ":" in name and not name.startswith(":"):
            treeish, path = name.split(":", 1)
            if not path:
                return None, None
            path = self._top_level_path(path)
            return path, self._tree_mode(treeish, path, oid)

        return None, None

    def _top_level_path(self, path: str) -> str:
        """Return ``path`` relative to the top level.

        Paths starting with ``./`` or ``../`` are relative to the working
        directory; all others already start at the top level.
        """
        if path not in (".", "..") and not path.startswith(("./", "../")):
            return path
        full_path = posixpath.normpath(posixpath.join(self.current_prefix() or "", path))
        return "" if full_path == "." else full_path

    def _tree_mode(self, treeish: str, path: str, oid: str) -> Optional[int]:
        """Look up the mode of ``path`` inside ``treeish``."""
        try:
            result = self._run_git(["ls-tree", "-z", "--full-tree", treeish, "--", path])
        except subprocess.CalledProcessError:
            logger.debug("ls-tree lookup failed", extra={"treeish": treeish, "path": path})
            return None

        # Entries look like "<mode> <type> <oid>\t<path>"
        for entry in result.stdout.split("\0"):
            meta, _, entry_path = entry.partition("\t")
            parts = meta.split()
            if len(parts) == 3 and parts[2] == oid and entry_path == path.rstrip("/"):
                return int(parts[0], 8)
        return None

    def _index_mode(self, path: str, stage: int, oid: str) -> Optional[int]:
        """Look up the mode of ``path`` at ``stage`` in the index."""
        try:
            result = self._run_git(
                ["ls-files", "-s", "-z", "--full-name", "--", f":(top,literal){path}"]
            )
        except subprocess.CalledProcessError:
            logger.debug("ls-files lookup failed", extra={"path": path})
            return None

        # Entries look like "<mode> <oid> <stage>\t<path>"
        for entry in result.stdout.split("\0"):
            meta, _, entry_path = entry.partition("\t")
            parts = meta.split()
            if (
                len(parts) == 3
                and parts[1] == oid
                and int(parts[2]) == stage
                and entry_path == path
            ):
                return int(parts[0], 8)
        return None

    def current_prefix(self) -> Optional[str]:
        """Return the working directory's path relative to the top level."""
        try:
            result = self._run_git(["rev-parse", "--show-prefix"])
        except subprocess.CalledProcessError as e:
            raise GitCommandError(["rev-parse", "--show-prefix"], e.returncode, e.stderr or "") from e
        return result.stdout.strip() or None
