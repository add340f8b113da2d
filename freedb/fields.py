"""freedb ingest - xmcd line classification.

Each dump line belongs to at most one LineKind. Patterns are anchored at
the start of the line and mutually exclusive, so the first match wins.
Lines matching nothing (comments, PLAYORDER, unknown extensions) are
ignored by the parser.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum


class LineKind(StrEnum):
    """Line kinds the parser acts on."""

    OFFSET = "offset"
    DISC_LENGTH = "disc_length"
    DISC_ID = "DISCID"
    DISC_TITLE = "DTITLE"
    DISC_YEAR = "DYEAR"
    DISC_GENRE = "DGENRE"
    TRACK_TITLE = "TTITLE"
    EXTENDED_DATA = "EXTD"
    TRACK_EXTENDED = "EXTT"


FORMAT_MARKER_RE = re.compile(r"^#\sxmcd")
NUMBER_RE = re.compile(r"[0-9]+")
TRAILING_NUMBER_RE = re.compile(r"[0-9]+$")

# Order only matters for readability; the patterns never overlap.
LINE_PATTERNS: tuple[tuple[LineKind, re.Pattern[str]], ...] = (
    (LineKind.OFFSET, re.compile(r"^#\s+[0-9]+$")),
    (LineKind.DISC_LENGTH, re.compile(r"^#\sDisc\slength:\s[0-9]+\sseconds$")),
    (LineKind.DISC_ID, re.compile(r"^DISCID=")),
    (LineKind.DISC_TITLE, re.compile(r"^DTITLE=")),
    (LineKind.DISC_YEAR, re.compile(r"^DYEAR=")),
    (LineKind.DISC_GENRE, re.compile(r"^DGENRE=")),
    (LineKind.TRACK_TITLE, re.compile(r"^TTITLE[0-9]+=")),
    (LineKind.EXTENDED_DATA, re.compile(r"^EXTD=")),
    (LineKind.TRACK_EXTENDED, re.compile(r"^EXTT[0-9]+=")),
)

# Kinds whose payload is a "#" comment with a number instead of KEY=VALUE
COMMENT_KINDS = frozenset({LineKind.OFFSET, LineKind.DISC_LENGTH})


@dataclass(frozen=True)
class FieldMatch:
    """A classified line and its payload.

    For KEY=VALUE kinds, key and value are the two halves of the line.
    For comment kinds, key is empty and value is the numeral.
    """

    kind: LineKind
    key: str
    value: str


def is_format_marker(line: str) -> bool:
    """Return True if line is the leading "# xmcd" marker."""
    return FORMAT_MARKER_RE.match(line) is not None


def parse_pair(line: str) -> tuple[str, str]:
    """Split a KEY=VALUE line on the first "=" only.

    Raises:
        ValueError: If the line has no "=".
    """
    key, sep, value = line.partition("=")
    if not sep:
        raise ValueError(f"{line!r} is not a key-value pair")
    return key, value


def extract_position(key: str) -> int:
    """Get the track position embedded in a key such as "TTITLE7".

    The position is the first run of decimal digits.

    Raises:
        ValueError: If the key contains no digits.
    """
    found = NUMBER_RE.search(key)
    if found is None:
        raise ValueError(f"key {key!r} has no position number")
    return int(found.group())


def first_number(value: str) -> int | None:
    """Return the first run of digits in value as an int, or None."""
    found = NUMBER_RE.search(value)
    if found is None:
        return None
    return int(found.group())


def classify(line: str) -> LineKind | None:
    """Return the kind of line, or None if the parser ignores it."""
    for kind, pattern in LINE_PATTERNS:
        if pattern.match(line):
            return kind
    return None


def match_line(line: str) -> FieldMatch | None:
    """Classify a line and extract its payload.

    Args:
        line: One dump line without its line terminator.

    Returns:
        FieldMatch, or None if the line is not a recognized kind.
    """
    kind = classify(line)
    if kind is None:
        return None
    if kind is LineKind.OFFSET:
        return FieldMatch(kind, "", TRAILING_NUMBER_RE.search(line).group())
    if kind is LineKind.DISC_LENGTH:
        return FieldMatch(kind, "", NUMBER_RE.search(line).group())
    key, value = parse_pair(line)
    return FieldMatch(kind, key, value)
