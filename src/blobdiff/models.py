"""Value types passed between the resolver, the normalizer and the engine."""

from dataclasses import dataclass
from typing import Optional

REGULAR_FILE_MODE = 0o100644
EXECUTABLE_FILE_MODE = 0o100755
SYMLINK_MODE = 0o120000

NULL_OID = "0" * 40

_FORMAT_MASK = 0o170000


def object_format(mode: int) -> int:
    """Return the file-type bits of a mode."""
    return mode & _FORMAT_MASK


@dataclass(frozen=True)
class ContentRef:
    """An object name resolved by the repository.

    ``oid`` is None when there is no object on this side and ``mode`` is None
    when resolution did not record one.
    """

    name: str
    oid: Optional[str]
    mode: Optional[int] = None
    recorded_path: Optional[str] = None
    object_type: str = "blob"

    @property
    def is_blob(self) -> bool:
        return self.object_type == "blob"


@dataclass(frozen=True)
class FileSide:
    """One side of a pair: the (oid, mode, path) triple."""

    oid: Optional[str]
    mode: int
    path: str

    @property
    def exists(self) -> bool:
        return self.oid is not None

    @classmethod
    def from_ref(cls, ref: ContentRef) -> "FileSide":
        """Fill in the default mode and path for a resolved reference."""
        mode = ref.mode if ref.mode is not None else REGULAR_FILE_MODE
        path = ref.recorded_path if ref.recorded_path is not None else ref.name
        return cls(oid=ref.oid, mode=mode, path=path)


@dataclass(frozen=True)
class DiffPairRequest:
    """A normalized old/new pair ready for the engine."""

    old: FileSide
    new: FileSide

    def swapped(self) -> "DiffPairRequest":
        return DiffPairRequest(old=self.new, new=self.old)

    @property
    def status(self) -> str:
        """Single-letter status as used by ``--name-status`` and ``--raw``."""
        if not self.old.exists:
            return "A"
        if not self.new.exists:
            return "D"
        if object_format(self.old.mode) != object_format(self.new.mode):
            return "T"
        return "M"
