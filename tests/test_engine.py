"""Tests for diff rendering."""

import io

import pytest

from blobdiff.config import DiffOptions
from blobdiff.engine import DiffEngine
from blobdiff.models import (
    EXECUTABLE_FILE_MODE,
    REGULAR_FILE_MODE,
    SYMLINK_MODE,
    DiffPairRequest,
    FileSide,
)

OLD_OID = "1" * 40
NEW_OID = "2" * 40


class FakeBlobStore:
    """Blob reader backed by a dictionary."""

    def __init__(self, blobs):
        self.blobs = blobs
        self.reads = []

    def read_blob(self, oid):
        self.reads.append(oid)
        if oid is None:
            return b""
        return self.blobs[oid]


def render(request, old=b"", new=b"", **option_kwargs):
    store = FakeBlobStore({OLD_OID: old, NEW_OID: new})
    stream = io.BytesIO()
    engine = DiffEngine(store, DiffOptions(**option_kwargs), stream)
    engine.queue(request)
    changed = engine.compute_and_flush()
    return changed, stream.getvalue().decode("utf-8", errors="surrogateescape"), engine


def pair(old_oid=OLD_OID, new_oid=NEW_OID, old_mode=REGULAR_FILE_MODE,
         new_mode=REGULAR_FILE_MODE, old_path="file.txt", new_path="file.txt"):
    return DiffPairRequest(
        old=FileSide(old_oid, old_mode, old_path),
        new=FileSide(new_oid, new_mode, new_path),
    )


class TestQueue:
    """Queue discipline."""

    def test_second_queue_without_flush_is_rejected(self):
        engine = DiffEngine(FakeBlobStore({}), DiffOptions(), io.BytesIO())
        engine.queue(pair())

        with pytest.raises(RuntimeError):
            engine.queue(pair())

    def test_flush_without_queue_is_a_no_op(self):
        engine = DiffEngine(FakeBlobStore({}), DiffOptions(), io.BytesIO())

        assert engine.compute_and_flush() is False
        assert engine.result_code() == 0

    def test_flush_clears_queue(self):
        _, _, engine = render(pair(), b"a\n", b"b\n")

        engine.queue(pair())
        assert engine.compute_and_flush() is True
        assert engine.flushed_pairs == 2

    def test_unchanged_pair_renders_nothing(self):
        changed, output, engine = render(pair(new_oid=OLD_OID), b"a\n", b"a\n")

        assert changed is False
        assert output == ""
        assert engine.result_code() == 0


class TestPatch:
    """Patch format."""

    def test_modified_file(self):
        changed, output, engine = render(pair(), b"a\nb\nc\n", b"a\nB\nc\n")

        assert changed is True
        assert engine.result_code() == 1
        assert output == (
            "diff --git a/file.txt b/file.txt\n"
            "index 1111111..2222222 100644\n"
            "--- a/file.txt\n"
            "+++ b/file.txt\n"
            "@@ -1,3 +1,3 @@\n"
            " a\n"
            "-b\n"
            "+B\n"
            " c\n"
        )

    def test_context_lines(self):
        old = b"".join(b"%d\n" % i for i in range(10))
        new = old.replace(b"5\n", b"five\n")

        _, output, _ = render(pair(), old, new, context_lines=1)

        assert "@@ -5,3 +5,3 @@\n 4\n-5\n+five\n 6\n" in output

    def test_missing_newline_marker(self):
        _, output, _ = render(pair(), b"a", b"b")

        assert output.endswith(
            "@@ -1 +1 @@\n"
            "-a\n"
            "\\ No newline at end of file\n"
            "+b\n"
            "\\ No newline at end of file\n"
        )

    def test_added_file(self):
        _, output, _ = render(pair(old_oid=None), b"", b"hello\n")

        assert output == (
            "diff --git a/file.txt b/file.txt\n"
            "new file mode 100644\n"
            "index 0000000..2222222\n"
            "--- /dev/null\n"
            "+++ b/file.txt\n"
            "@@ -0,0 +1 @@\n"
            "+hello\n"
        )

    def test_deleted_file(self):
        _, output, _ = render(pair(new_oid=None), b"bye\n", b"")

        assert "deleted file mode 100644\n" in output
        assert "index 1111111..0000000\n" in output
        assert "+++ /dev/null\n" in output
        assert "-bye\n" in output

    def test_mode_change_only(self):
        request = pair(new_oid=OLD_OID, new_mode=EXECUTABLE_FILE_MODE)

        _, output, engine = render(request, b"x\n", b"x\n")

        assert output == (
            "diff --git a/file.txt b/file.txt\n"
            "old mode 100644\n"
            "new mode 100755\n"
        )
        assert engine.has_differences is True

    def test_mode_and_content_change(self):
        _, output, _ = render(pair(new_mode=EXECUTABLE_FILE_MODE), b"a\n", b"b\n")

        assert "old mode 100644\nnew mode 100755\nindex 1111111..2222222\n" in output

    def test_different_paths(self):
        _, output, _ = render(pair(old_path="a.txt", new_path="b.txt"), b"a\n", b"b\n")

        assert output.startswith("diff --git a/a.txt b/b.txt\n")
        assert "--- a/a.txt\n+++ b/b.txt\n" in output

    def test_binary_content(self):
        _, output, _ = render(pair(), b"\0\1\2", b"\0\1\3")

        assert output.endswith("Binary files a/file.txt and b/file.txt differ\n")
        assert "@@" not in output

    def test_full_index(self):
        _, output, _ = render(pair(), b"a\n", b"b\n", full_index=True)

        assert f"index {OLD_OID}..{NEW_OID} 100644\n" in output

    def test_prefix_stripped_from_paths(self):
        request = pair(old_path="src/a.py", new_path="src/a.py")

        _, output, _ = render(request, b"a\n", b"b\n", prefix="src/")

        assert output.startswith("diff --git a/a.py b/a.py\n")

    def test_form_feed_does_not_split_lines(self):
        _, output, _ = render(pair(), b"x\x0cy\nold\n", b"x\x0cy\nnew\n")

        assert output.endswith("@@ -1,2 +1,2 @@\n x\x0cy\n-old\n+new\n")
        assert "No newline" not in output

    def test_carriage_returns_kept_in_lines(self):
        _, output, _ = render(pair(), b"a\rb\r\nkeep\n", b"a\rc\r\nkeep\n")

        assert output.endswith("@@ -1,2 +1,2 @@\n-a\rb\r\n+a\rc\r\n keep\n")

    def test_non_utf8_content_written_unchanged(self):
        stream = io.BytesIO()
        store = FakeBlobStore({OLD_OID: b"caf\xe9\n", NEW_OID: b"cafe\n"})
        engine = DiffEngine(store, DiffOptions(), stream)

        engine.queue(pair())
        engine.compute_and_flush()

        assert stream.getvalue().endswith(b"@@ -1 +1 @@\n-caf\xe9\n+cafe\n")


class TestOtherFormats:
    """Raw, name and stat formats."""

    def test_raw(self):
        _, output, _ = render(pair(), b"a\n", b"b\n", output_format="raw")

        assert output == f":100644 100644 {OLD_OID} {NEW_OID} M\tfile.txt\n"

    def test_raw_added(self):
        _, output, _ = render(pair(old_oid=None), b"", b"b\n", output_format="raw")

        assert output == f":000000 100644 {'0' * 40} {NEW_OID} A\tfile.txt\n"

    def test_name_only(self):
        _, output, _ = render(pair(new_path="new.txt"), b"a\n", b"b\n", output_format="name-only")

        assert output == "new.txt\n"

    @pytest.mark.parametrize(
        "request_kwargs,status",
        [
            ({}, "M"),
            ({"old_oid": None}, "A"),
            ({"new_oid": None}, "D"),
            ({"new_mode": SYMLINK_MODE}, "T"),
            ({"new_mode": EXECUTABLE_FILE_MODE}, "M"),
        ],
    )
    def test_name_status(self, request_kwargs, status):
        _, output, _ = render(pair(**request_kwargs), b"a\n", b"b\n", output_format="name-status")

        assert output == f"{status}\tfile.txt\n"

    def test_stat(self):
        _, output, _ = render(pair(), b"a\nb\nc\n", b"a\nB\nc\nd\n", output_format="stat")

        assert output == (
            " file.txt | 3 ++-\n"
            " 1 file changed, 2 insertions(+), 1 deletion(-)\n"
        )

    def test_stat_counts_lines_split_on_newline_only(self):
        _, output, _ = render(pair(), b"a\x0cb\rc\n", b"A\x0cB\rC\n", output_format="stat")

        assert output == (
            " file.txt | 2 +-\n"
            " 1 file changed, 1 insertion(+), 1 deletion(-)\n"
        )

    def test_stat_binary(self):
        _, output, _ = render(pair(), b"\0ab", b"\0abcd", output_format="stat")

        assert output.startswith(" file.txt | Bin 3 -> 5 bytes\n")

    def test_no_patch_still_tracks_result(self):
        changed, output, engine = render(pair(), b"a\n", b"b\n", output_format="no-patch")

        assert changed is True
        assert output == ""
        assert engine.result_code() == 1
