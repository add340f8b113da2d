"""freedb ingest - Dump path utilities.

freedb archives lay dumps out as <shard-name>/<hex-checksum>, possibly
below one or more leading directories. These helpers work on both
filesystem paths and archive member names. They do NOT touch the
filesystem.
"""

from pathlib import PurePosixPath, PurePath

from freedb.config import IGNORE_FILES
from freedb.utils.hexid import decode_checksum, is_checksum_hex


def _as_pure_path(path: str | PurePath) -> PurePath:
    if isinstance(path, PurePath):
        return path
    # Archive member names always use forward slashes
    return PurePosixPath(path)


def shard_name_from_path(path: str | PurePath) -> str:
    """Get the shard name a dump was filed under.

    Args:
        path: Dump path or archive member name.

    Returns:
        Name of the entry's parent directory ("" if it has none).
    """
    return _as_pure_path(path).parent.name


def checksum_hint_from_path(path: str | PurePath) -> bytes | None:
    """Get the checksum a dump's filename claims for it.

    Args:
        path: Dump path or archive member name.

    Returns:
        4 raw checksum bytes, or None if the filename is not a checksum.
    """
    name = _as_pure_path(path).name.lower()
    if not is_checksum_hex(name):
        return None
    return decode_checksum(name)


def is_ignored_file(path: str | PurePath) -> bool:
    """Return True if the entry is a known non-dump file (license/readme)."""
    return _as_pure_path(path).name in IGNORE_FILES
