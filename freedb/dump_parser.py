"""freedb ingest - xmcd dump parser.

Single forward pass over the decoded lines of one dump:
1. Skip leading blank lines
2. Require the "# xmcd" format marker (else: unusable record, stop)
3. Classify every remaining line and merge it into a DiscBuilder

Field-level problems become ParseIssue diagnostics on the record and
never abort the pass. A record with no decodable DISCID token is
unusable and must not be written.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import BinaryIO

from freedb.config import FALLBACK_ENCODING, MAX_TRACKS, MAX_UINT16, MAX_UINT32
from freedb.disc import DiscBuilder, DiscRecord
from freedb.errors import ParseErrorCode
from freedb.fields import (
    FieldMatch,
    LineKind,
    extract_position,
    first_number,
    is_format_marker,
    match_line,
)
from freedb.utils.hexid import decode_checksum
from freedb.utils.text import decode_dump, to_valid_text

logger = logging.getLogger(__name__)

Handler = Callable[[DiscBuilder, FieldMatch, int, str], None]


def _collect_offset(builder: DiscBuilder, match: FieldMatch, line_number: int, line: str) -> None:
    offset = int(match.value)
    if offset > MAX_UINT32:
        builder.append_error(
            ParseErrorCode.BAD_OFFSET,
            f"offset {match.value} does not fit in 32 bits",
            line_number,
            line,
        )
        return
    builder.offsets.append(offset)


def _collect_duration(builder: DiscBuilder, match: FieldMatch, line_number: int, line: str) -> None:
    duration = int(match.value)
    if duration > MAX_UINT16:
        builder.append_error(
            ParseErrorCode.BAD_DURATION,
            f"disc length {match.value} does not fit in 16 bits",
            line_number,
            line,
        )
        return
    builder.duration = duration


def _collect_disc_ids(builder: DiscBuilder, match: FieldMatch, line_number: int, line: str) -> None:
    # A dump may list several comma-separated checksums for the same disc
    for token in match.value.split(","):
        try:
            builder.checksum_ids.append(decode_checksum(token))
        except ValueError as e:
            builder.append_error(ParseErrorCode.BAD_DISC_ID, str(e), line_number, line)


def _collect_title(builder: DiscBuilder, match: FieldMatch, line_number: int, line: str) -> None:
    builder.append_title(to_valid_text(match.value))


def _collect_year(builder: DiscBuilder, match: FieldMatch, line_number: int, line: str) -> None:
    # Legacy dumps routinely leave DYEAR empty; that is not an error
    year = first_number(match.value)
    if year is None or year > MAX_UINT16:
        return
    builder.year = year


def _collect_genre(builder: DiscBuilder, match: FieldMatch, line_number: int, line: str) -> None:
    builder.append_genre(to_valid_text(match.value))


def _collect_extended(builder: DiscBuilder, match: FieldMatch, line_number: int, line: str) -> None:
    builder.append_extended(to_valid_text(match.value))


def _position_or_error(
    builder: DiscBuilder, match: FieldMatch, line_number: int, line: str
) -> int | None:
    try:
        position = extract_position(match.key)
    except ValueError as e:
        builder.append_error(ParseErrorCode.NO_POSITION, str(e), line_number, line)
        return None
    if position >= MAX_TRACKS:
        builder.append_error(
            ParseErrorCode.POSITION_OUT_OF_RANGE,
            f"position {position} exceeds the {MAX_TRACKS}-track limit; not appended",
            line_number,
            line,
        )
        return None
    return position


def _record_gap(
    builder: DiscBuilder, gap_start: int | None, position: int, line_number: int, line: str
) -> None:
    if gap_start is None:
        return
    builder.append_error(
        ParseErrorCode.TRACK_POSITION_GAP,
        f"position {position} skips from {gap_start}; padded with empty entries",
        line_number,
        line,
    )


def _collect_track(builder: DiscBuilder, match: FieldMatch, line_number: int, line: str) -> None:
    position = _position_or_error(builder, match, line_number, line)
    if position is None:
        return
    gap_start = builder.append_track(to_valid_text(match.value), position)
    _record_gap(builder, gap_start, position, line_number, line)


def _collect_track_extended(
    builder: DiscBuilder, match: FieldMatch, line_number: int, line: str
) -> None:
    position = _position_or_error(builder, match, line_number, line)
    if position is None:
        return
    gap_start = builder.append_track_extended(to_valid_text(match.value), position)
    _record_gap(builder, gap_start, position, line_number, line)


HANDLERS: dict[LineKind, Handler] = {
    LineKind.OFFSET: _collect_offset,
    LineKind.DISC_LENGTH: _collect_duration,
    LineKind.DISC_ID: _collect_disc_ids,
    LineKind.DISC_TITLE: _collect_title,
    LineKind.DISC_YEAR: _collect_year,
    LineKind.DISC_GENRE: _collect_genre,
    LineKind.TRACK_TITLE: _collect_track,
    LineKind.EXTENDED_DATA: _collect_extended,
    LineKind.TRACK_EXTENDED: _collect_track_extended,
}


def _split_lines(text: str) -> list[str]:
    # Only \n and \r\n end a line; other Unicode separators belong to values
    return [line.removesuffix("\r") for line in text.split("\n")]


def parse_lines(lines: list[str], shard: int | None = None) -> DiscRecord:
    """Parse already-decoded dump lines.

    Args:
        lines: Dump lines without line terminators.
        shard: Shard index the dump was filed under, if known.

    Returns:
        The parsed DiscRecord (possibly unusable).
    """
    builder = DiscBuilder(shard=shard)

    start = next((i for i, line in enumerate(lines) if line.strip()), None)
    if start is None or not is_format_marker(lines[start]):
        first = lines[start] if start is not None else None
        builder.append_error(
            ParseErrorCode.NOT_XMCD,
            "not an xmcd format dump",
            None if start is None else start + 1,
            first,
        )
        return builder.build()

    # line numbers are 1-based; the marker itself is line start + 1
    for line_number, line in enumerate(lines[start + 1 :], start=start + 2):
        match = match_line(line)
        if match is None:
            continue
        HANDLERS[match.kind](builder, match, line_number, line)

    return builder.build()


def parse_dump(
    dump: bytes | BinaryIO,
    shard: int | None = None,
    fallback_encoding: str | None = FALLBACK_ENCODING,
) -> tuple[DiscRecord, bool]:
    """Parse one xmcd dump.

    Never raises for malformed content: problems are reported through
    DiscRecord.parse_errors and the usable flag.

    Args:
        dump: Raw dump bytes or a binary stream positioned at its start.
        shard: Shard index the dump was filed under, if known.
        fallback_encoding: Codec for dumps that are not valid UTF-8.

    Returns:
        Tuple of (record, usable). usable is False when the record has no
        checksum IDs and must be skipped.
    """
    data = dump if isinstance(dump, bytes) else dump.read()
    text = decode_dump(data, fallback_encoding)
    record = parse_lines(_split_lines(text), shard=shard)
    if not record.is_usable:
        logger.debug("Dump is unusable: %d parse issue(s)", len(record.parse_errors))
    return record, record.is_usable
