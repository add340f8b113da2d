"""freedb ingest - Error codes and exceptions.

Two families:
- ParseErrorCode: diagnostics recorded on a DiscRecord; never raised.
- IngestErrorCode / IngestError: pipeline-level skip reasons and fatal errors.
"""

from enum import StrEnum


class ParseErrorCode(StrEnum):
    """Codes for per-dump parse diagnostics."""

    NOT_XMCD = "NOT_XMCD"
    BAD_OFFSET = "BAD_OFFSET"
    BAD_DURATION = "BAD_DURATION"
    BAD_DISC_ID = "BAD_DISC_ID"
    NO_POSITION = "NO_POSITION"
    TRACK_POSITION_GAP = "TRACK_POSITION_GAP"
    POSITION_OUT_OF_RANGE = "POSITION_OUT_OF_RANGE"


class IngestErrorCode(StrEnum):
    """Codes for pipeline-level outcomes."""

    EMPTY_FILE = "EMPTY_FILE"
    UNUSABLE_DUMP = "UNUSABLE_DUMP"
    UNKNOWN_SHARD = "UNKNOWN_SHARD"
    INSERT_FAILED = "INSERT_FAILED"
    SOURCE_FAILED = "SOURCE_FAILED"


class IngestError(Exception):
    """Base exception for ingest errors."""

    def __init__(self, error_code: str, message: str):
        self.error_code = error_code
        self.message = message
        super().__init__(f"{error_code}: {message}")


class SinkError(IngestError):
    """A database insert failed; the batch must be rolled back."""

    def __init__(self, reason: str):
        super().__init__(IngestErrorCode.INSERT_FAILED, f"Insert failed: {reason}")


class SourceError(IngestError):
    """The input directory or archive could not be read."""

    def __init__(self, path: str, reason: str):
        super().__init__(IngestErrorCode.SOURCE_FAILED, f"Cannot read {path}: {reason}")
