"""Tests for services.ingest_dump.sources entry enumeration."""

from pathlib import Path

import pytest

from freedb.errors import IngestErrorCode, SourceError
from services.ingest_dump.sources import iter_archive_entries, iter_directory_entries, iter_entries
from dump_builders import SAMPLE_DUMP, write_dump_archive, write_dump_tree


class TestDirectoryEntries:
    """Tests for extracted dump trees."""

    def test_lexical_order_and_content(self, dump_tree):
        entries = list(iter_directory_entries(dump_tree))
        names = [Path(e.path).relative_to(dump_tree).as_posix() for e in entries]
        assert names == [
            "COPYING",
            "README",
            "jazz/11223344",
            "rock/0a0b0c0d",
            "soundtrack/decafbad",
        ]
        assert not any(e.is_dir for e in entries)
        assert entries[-1].read() == SAMPLE_DUMP.encode("utf-8")
        assert entries[-1].size == len(SAMPLE_DUMP.encode("utf-8"))

    def test_empty_file_size(self, tmp_path):
        write_dump_tree(tmp_path, {"rock/00000000": b""})
        (entry,) = iter_directory_entries(tmp_path)
        assert entry.size == 0


class TestArchiveEntries:
    """Tests for tar archives."""

    @pytest.mark.parametrize("mode", ["w:bz2", "w:gz", "w:xz", "w"])
    def test_compression_detected(self, tmp_path, mode):
        archive = write_dump_archive(
            tmp_path / "freedb.tar", {"soundtrack/decafbad": SAMPLE_DUMP}, mode=mode
        )
        entries = list(iter_archive_entries(archive))
        assert [(e.path, e.is_dir) for e in entries] == [
            ("soundtrack", True),
            ("soundtrack/decafbad", False),
        ]

    def test_members_streamed_in_order(self, tmp_path):
        archive = write_dump_archive(
            tmp_path / "freedb.tar.bz2",
            {"rock/0a0b0c0d": "first\n", "rock/11223344": "second\n"},
        )
        contents = [e.read() for e in iter_archive_entries(archive) if not e.is_dir]
        assert contents == [b"first\n", b"second\n"]

    def test_corrupt_archive_raises(self, tmp_path):
        archive = tmp_path / "broken.tar.bz2"
        archive.write_bytes(b"this is not a tarball")
        with pytest.raises(SourceError) as exc_info:
            list(iter_archive_entries(archive))
        assert exc_info.value.error_code == IngestErrorCode.SOURCE_FAILED


class TestIterEntries:
    """Tests for source selection."""

    def test_directory(self, dump_tree):
        assert len(list(iter_entries(dump_tree))) == 5

    def test_archive(self, tmp_path):
        archive = write_dump_archive(tmp_path / "a.tar.bz2", {"rock/0a0b0c0d": "x"})
        assert len(list(iter_entries(str(archive)))) == 2

    def test_missing_path_raises(self, tmp_path):
        with pytest.raises(SourceError, match="not a directory or archive file"):
            iter_entries(tmp_path / "nope")
