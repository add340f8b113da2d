"""freedb ingest - Disc identity resolution.

The legacy freedb disc ID is a 4-byte rolling checksum with a high
collision rate across unrelated discs. The archive files each dump under
one of 11 genre-named directories ("shards"). The genre meaning is not
reliable, but the shard name disambiguates colliding checksums, so a
usable storage key is checksum bytes + one shard byte.
"""

from __future__ import annotations

from enum import IntEnum

from freedb.config import CHECKSUM_BYTE_LENGTH
from freedb.errors import IngestError, IngestErrorCode


class Shard(IntEnum):
    """Fixed, ordered freedb partition names. Values are stored in identities."""

    BLUES = 0
    CLASSICAL = 1
    COUNTRY = 2
    DATA = 3
    FOLK = 4
    JAZZ = 5
    MISC = 6
    NEWAGE = 7
    REGGAE = 8
    ROCK = 9
    SOUNDTRACK = 10

    @property
    def dirname(self) -> str:
        """Directory name this shard uses inside freedb archives."""
        return self.name.lower()


# On-disk directory name -> shard
SHARDS_BY_NAME: dict[str, Shard] = {shard.dirname: shard for shard in Shard}


class UnknownShardError(IngestError):
    """Partition name is not one of the known freedb shards."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(IngestErrorCode.UNKNOWN_SHARD, f"Unknown shard name: {name!r}")


def resolve_shard(name: str) -> Shard:
    """Look up a shard by its directory name.

    Args:
        name: Partition directory name (case-sensitive, e.g. "rock").

    Returns:
        The matching Shard.

    Raises:
        UnknownShardError: If name is not a known shard.
    """
    try:
        return SHARDS_BY_NAME[name]
    except KeyError:
        raise UnknownShardError(name) from None


def compose_identity(checksum: bytes, shard: int) -> bytes:
    """Build the composite disc identity.

    Args:
        checksum: 4 raw checksum bytes.
        shard: Shard index (0-255; in practice a Shard).

    Returns:
        5 bytes: checksum followed by the shard index byte.

    Raises:
        ValueError: If checksum has the wrong width or shard is out of byte range.
    """
    if len(checksum) != CHECKSUM_BYTE_LENGTH:
        raise ValueError(
            f"checksum must be {CHECKSUM_BYTE_LENGTH} bytes, got {len(checksum)}"
        )
    if not 0 <= shard <= 0xFF:
        raise ValueError(f"shard index out of range: {shard}")
    return bytes(checksum) + bytes((int(shard),))
