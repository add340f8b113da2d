"""freedb ingest - Parsed disc record types.

DiscBuilder is the mutable accumulator the parser drives line by line.
build() freezes it into a DiscRecord, which is what callers receive.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from freedb.errors import ParseErrorCode


@dataclass(frozen=True)
class ParseIssue:
    """A non-fatal diagnostic recorded while parsing one dump."""

    code: ParseErrorCode
    message: str
    line_number: int | None = None
    line: str | None = None

    def __str__(self) -> str:
        if self.line_number is None:
            return f"{self.code}: {self.message}"
        return f"{self.code} (line {self.line_number}): {self.message}"


@dataclass(frozen=True)
class DiscRecord:
    """Structured result of parsing one xmcd dump.

    checksum_ids is empty only when the dump is unusable: the format
    marker was missing or no DISCID token decoded.
    """

    checksum_ids: tuple[bytes, ...] = ()
    shard: int | None = None
    title: str = ""
    genre: str | None = None
    year: int | None = None
    offsets: tuple[int, ...] = ()
    duration: int | None = None
    tracks: tuple[str, ...] = ()
    extended_data: str | None = None
    track_extended: tuple[str, ...] = ()
    parse_errors: tuple[ParseIssue, ...] = ()

    @property
    def is_usable(self) -> bool:
        return bool(self.checksum_ids)


def merge_positional(entries: list[str], value: str, position: int) -> int | None:
    """Merge a positional text value into entries in place.

    - position < len(entries): continuation, value is concatenated onto it
    - position == len(entries): new entry appended
    - position > len(entries): missing slots are padded with "" first

    Args:
        entries: Existing entries, indexed by position.
        value: Text to merge.
        position: Zero-based logical position from the line key.

    Returns:
        The first missing position when padding was needed, else None.

    Raises:
        ValueError: If position is negative.
    """
    if position < 0:
        raise ValueError(f"negative position: {position}")
    if position < len(entries):
        entries[position] += value
        return None
    gap_start = None
    if position > len(entries):
        gap_start = len(entries)
        entries.extend([""] * (position - len(entries)))
    entries.append(value)
    return gap_start


@dataclass
class DiscBuilder:
    """Mutable accumulator for a DiscRecord under construction."""

    shard: int | None = None
    checksum_ids: list[bytes] = field(default_factory=list)
    title: str = ""
    genre: str = ""
    year: int | None = None
    offsets: list[int] = field(default_factory=list)
    duration: int | None = None
    tracks: list[str] = field(default_factory=list)
    extended_data: str = ""
    track_extended: list[str] = field(default_factory=list)
    parse_errors: list[ParseIssue] = field(default_factory=list)

    def append_error(
        self,
        code: ParseErrorCode,
        message: str,
        line_number: int | None = None,
        line: str | None = None,
    ) -> int:
        """Record a diagnostic and return the number collected so far."""
        self.parse_errors.append(ParseIssue(code, message, line_number, line))
        return len(self.parse_errors)

    def append_title(self, value: str) -> None:
        self.title += value

    def append_genre(self, value: str) -> None:
        self.genre += value

    def append_extended(self, value: str) -> None:
        self.extended_data += value

    def append_track(self, value: str, position: int) -> int | None:
        """Merge a TTITLE value. Returns the first missing position if padded."""
        return merge_positional(self.tracks, value, position)

    def append_track_extended(self, value: str, position: int) -> int | None:
        """Merge an EXTT value. Returns the first missing position if padded."""
        return merge_positional(self.track_extended, value, position)

    def build(self) -> DiscRecord:
        return DiscRecord(
            checksum_ids=tuple(self.checksum_ids),
            shard=self.shard,
            title=self.title,
            genre=self.genre or None,
            year=self.year,
            offsets=tuple(self.offsets),
            duration=self.duration,
            tracks=tuple(self.tracks),
            extended_data=self.extended_data or None,
            track_extended=tuple(self.track_extended),
            parse_errors=tuple(self.parse_errors),
        )
