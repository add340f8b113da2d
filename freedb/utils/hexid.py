"""freedb ingest - Hex checksum utilities.

Legacy freedb disc IDs are 8 lowercase hex characters (4 raw bytes).
Encoding always returns lowercase hex with no prefix.
"""

import binascii
import re

from freedb.config import CHECKSUM_HEX_LENGTH

_HEX_CHECKSUM_RE = re.compile(rf"[0-9A-Fa-f]{{{CHECKSUM_HEX_LENGTH}}}")


def decode_checksum(token: str) -> bytes:
    """Decode a legacy checksum token to raw bytes.

    Only the first 8 hex characters are significant; anything after them
    is ignored, matching the legacy checksum width.

    Args:
        token: Hex string of at least 8 characters.

    Returns:
        4 raw checksum bytes.

    Raises:
        ValueError: If the token is shorter than 8 characters or is not hex.
    """
    token = token.strip()
    if len(token) < CHECKSUM_HEX_LENGTH:
        raise ValueError(f"disc ID too short: {token!r}")
    if not _HEX_CHECKSUM_RE.fullmatch(token[:CHECKSUM_HEX_LENGTH]):
        raise ValueError(f"disc ID {token!r} is not hexadecimal")
    return bytes.fromhex(token[:CHECKSUM_HEX_LENGTH])


def encode_checksum(checksum: bytes) -> str:
    """Encode raw checksum bytes as lowercase hex.

    Args:
        checksum: Raw checksum bytes.

    Returns:
        Hex digest string (2 characters per byte, no prefix).
    """
    return binascii.hexlify(checksum).decode("ascii")


def is_checksum_hex(value: str) -> bool:
    """Return True if value is exactly one legacy checksum in hex form."""
    return _HEX_CHECKSUM_RE.fullmatch(value) is not None
