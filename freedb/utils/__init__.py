"""freedb ingest - Utility modules."""

from freedb.utils.hexid import decode_checksum, encode_checksum, is_checksum_hex
from freedb.utils.paths import checksum_hint_from_path, is_ignored_file, shard_name_from_path
from freedb.utils.text import decode_dump, to_valid_text

__all__ = [
    # hexid
    "decode_checksum",
    "encode_checksum",
    "is_checksum_hex",
    # paths
    "shard_name_from_path",
    "checksum_hint_from_path",
    "is_ignored_file",
    # text
    "decode_dump",
    "to_valid_text",
]
