"""freedb ingest - Configuration constants.

No external config libraries. Environment variables override defaults;
command-line flags override the environment.
"""

import os
from pathlib import Path

# Repository root (parent of freedb/)
REPO_ROOT = Path(__file__).parent.parent.resolve()

# Data directory
DATA_DIR = REPO_ROOT / "data"


def _get_db_path() -> Path:
    """Get SQLite database path from environment or use default.

    Environment variable FREEDB_DB_PATH allows override.

    Returns:
        Path to the SQLite database file.
    """
    env_val = os.environ.get("FREEDB_DB_PATH")
    if env_val:
        return Path(env_val)
    return DATA_DIR / "freedb.db"


def _get_optional(name: str) -> str | None:
    """Read an optional string setting, treating blank values as unset."""
    env_val = os.environ.get(name, "").strip()
    return env_val or None


def _get_log_level() -> str:
    """Get log level name from environment or use INFO.

    Unknown level names fall back to INFO.
    """
    env_val = os.environ.get("FREEDB_LOG_LEVEL", "").strip().upper()
    if env_val in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        return env_val
    return "INFO"


# Database path (SQLite default backend)
DB_PATH = _get_db_path()

# Full SQLAlchemy URL; takes precedence over DB_PATH when set
DATABASE_URL = _get_optional("FREEDB_DATABASE_URL")

# Codec for dumps that are not valid UTF-8. None drops invalid bytes instead.
FALLBACK_ENCODING = _get_optional("FREEDB_FALLBACK_ENCODING")

LOG_LEVEL = _get_log_level()

# Known non-dump files shipped at the top of every freedb archive
IGNORE_FILES = ("COPYING", "README")

# Legacy checksum width: 8 hex characters, 4 raw bytes
CHECKSUM_HEX_LENGTH = 8
CHECKSUM_BYTE_LENGTH = CHECKSUM_HEX_LENGTH // 2

# Composite identity: checksum bytes + one shard byte
IDENTITY_BYTE_LENGTH = CHECKSUM_BYTE_LENGTH + 1

# Unsigned field widths
MAX_UINT16 = 0xFFFF
MAX_UINT32 = 0xFFFFFFFF

# Ceiling on TTITLE/EXTT positions; a CD holds at most 99 tracks
MAX_TRACKS = 255
