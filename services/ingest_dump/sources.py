"""freedb ingest - Dump entry sources.

Two layouts carry the same <shard>/<checksum> structure:
- a directory tree already extracted to disk
- a (compressed) tar archive, read sequentially without extracting

Entries are yielded in a deterministic order. An entry's bytes must be
read before the iterator is advanced (archive members are streamed).
"""

from __future__ import annotations

import logging
import os
import tarfile
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

from freedb.errors import SourceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DumpEntry:
    """One candidate dump inside a source."""

    path: str
    size: int
    is_dir: bool
    read: Callable[[], bytes]


def _file_reader(path: Path) -> Callable[[], bytes]:
    def read() -> bytes:
        return path.read_bytes()

    return read


def iter_directory_entries(root: Path) -> Iterator[DumpEntry]:
    """Yield every regular file below root in lexical order.

    Args:
        root: Directory containing shard subdirectories.

    Yields:
        DumpEntry per file. Directories are traversed, not yielded.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        # Sort in place so os.walk descends in lexical order too
        dirnames.sort()
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            try:
                size = path.stat().st_size
            except OSError as e:
                raise SourceError(str(path), str(e)) from e
            yield DumpEntry(path=str(path), size=size, is_dir=False, read=_file_reader(path))


def iter_archive_entries(archive_path: Path) -> Iterator[DumpEntry]:
    """Yield the members of a tar archive in archive order.

    Compression (bzip2, gzip, xz) is detected transparently. The archive
    is read as a stream, so each entry must be consumed before the next
    one is requested.

    Args:
        archive_path: Path to a .tar, .tar.bz2, .tar.gz or .tar.xz file.

    Yields:
        DumpEntry per file or directory member.

    Raises:
        SourceError: If the archive cannot be opened or is corrupt.
    """
    try:
        with tarfile.open(archive_path, mode="r|*") as tar:
            for member in tar:
                if member.isdir():
                    yield DumpEntry(
                        path=member.name, size=0, is_dir=True, read=lambda: b""
                    )
                    continue
                if not member.isfile():
                    logger.debug("Ignoring non-regular archive member: %s", member.name)
                    continue
                yield DumpEntry(
                    path=member.name,
                    size=member.size,
                    is_dir=False,
                    read=_member_reader(tar, member),
                )
    except (tarfile.TarError, OSError, EOFError) as e:
        raise SourceError(str(archive_path), str(e)) from e


def _member_reader(tar: tarfile.TarFile, member: tarfile.TarInfo) -> Callable[[], bytes]:
    def read() -> bytes:
        try:
            fileobj = tar.extractfile(member)
            if fileobj is None:
                return b""
            with fileobj:
                return fileobj.read()
        except (tarfile.TarError, EOFError) as e:
            raise SourceError(member.name, str(e)) from e

    return read


def iter_entries(root: str | Path) -> Iterator[DumpEntry]:
    """Yield dump entries from a directory tree or tar archive.

    Raises:
        SourceError: If root does not exist or is neither a directory nor a file.
    """
    root = Path(root)
    if root.is_dir():
        logger.info("Reading dumps from directory %s", root)
        return iter_directory_entries(root)
    if root.is_file():
        logger.info("Reading dumps from archive %s", root)
        return iter_archive_entries(root)
    raise SourceError(str(root), "not a directory or archive file")
