"""freedb ingest - Dump ingestion pipeline.

Reads every dump under a root (directory tree or tar archive) and writes
one disc row plus one row per track for each usable dump.

Transaction model:
- One session, one transaction for the whole run
- Per-entry problems (empty file, unusable dump, unknown shard) are
  logged and the entry is skipped; the batch continues
- Any insert failure rolls back the entire batch; nothing is committed

Error codes:
- EMPTY_FILE: zero-byte entry
- UNUSABLE_DUMP: missing "# xmcd" marker or no decodable DISCID
- UNKNOWN_SHARD: parent directory is not a known shard name
- INSERT_FAILED: database rejected an insert (fatal)
- SOURCE_FAILED: root or archive could not be read (fatal)
"""

from __future__ import annotations

import argparse
import codecs
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from freedb.config import FALLBACK_ENCODING, LOG_LEVEL
from freedb.db import init_db, insert_disc, insert_track
from freedb.disc import DiscRecord
from freedb.dump_parser import parse_dump
from freedb.errors import IngestError, IngestErrorCode, SinkError, SourceError
from freedb.shards import UnknownShardError, compose_identity, resolve_shard
from freedb.utils.hexid import encode_checksum
from freedb.utils.paths import checksum_hint_from_path, is_ignored_file, shard_name_from_path
from services.ingest_dump.sources import DumpEntry, iter_entries

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


# --- Result Types ---


@dataclass
class SkippedEntry:
    """An entry that was not written, and why."""

    path: str
    error_code: str
    message: str


@dataclass
class IngestSummary:
    """Outcome of one ingest run."""

    discs_inserted: int = 0
    tracks_inserted: int = 0
    ignored: int = 0
    skipped: list[SkippedEntry] = field(default_factory=list)

    def skip(self, path: str, error_code: str, message: str) -> None:
        logger.warning("Skipping %s: %s - %s", path, error_code, message)
        self.skipped.append(SkippedEntry(path, error_code, message))


# --- Identity ---


def select_checksum(record: DiscRecord, hint: bytes | None, path: str) -> bytes:
    """Pick the checksum used for a record's identity.

    The DISCID line is authoritative. The filename hint only selects among
    the parsed IDs; a hint that matches none of them is logged, not fatal.

    Args:
        record: Usable parsed record (at least one checksum ID).
        hint: Checksum claimed by the entry's filename, if any.
        path: Entry path for log context.

    Returns:
        4 raw checksum bytes.
    """
    if hint is not None:
        if hint in record.checksum_ids:
            return hint
        logger.warning(
            "Filename checksum %s of %s not among DISCID values %s; using %s",
            encode_checksum(hint),
            path,
            ",".join(encode_checksum(c) for c in record.checksum_ids),
            encode_checksum(record.checksum_ids[0]),
        )
    return record.checksum_ids[0]


# --- Per-Entry Ingest ---


def _write_record(session: Session, identity: bytes, record: DiscRecord) -> int:
    """Insert a disc and its tracks. Returns the number of tracks written."""
    disc_id = insert_disc(session, identity, record)
    for position, title in enumerate(record.tracks):
        start_offset = record.offsets[position] if position < len(record.offsets) else None
        extended = (
            record.track_extended[position] if position < len(record.track_extended) else None
        )
        insert_track(session, disc_id, position, title, start_offset, extended)
    return len(record.tracks)


def ingest_entry(
    session: Session,
    entry: DumpEntry,
    summary: IngestSummary,
    fallback_encoding: str | None = FALLBACK_ENCODING,
) -> bool:
    """Ingest one source entry into the open transaction.

    Args:
        session: Session holding the batch transaction.
        entry: Entry to ingest.
        summary: Run summary, updated in place.
        fallback_encoding: Codec for dumps that are not valid UTF-8.

    Returns:
        True if a disc row was written, False if the entry was skipped.

    Raises:
        SinkError: If an insert fails. The caller must roll back.
        SourceError: If the entry cannot be read.
    """
    if entry.is_dir:
        return False
    if is_ignored_file(entry.path):
        logger.info("Ignoring known non-dump file: %s", entry.path)
        summary.ignored += 1
        return False
    if entry.size < 1:
        summary.skip(entry.path, IngestErrorCode.EMPTY_FILE, "empty file")
        return False

    shard_name = shard_name_from_path(entry.path)
    hint = checksum_hint_from_path(entry.path)

    try:
        shard = resolve_shard(shard_name)
    except UnknownShardError as e:
        summary.skip(entry.path, e.error_code, e.message)
        return False

    try:
        data = entry.read()
    except OSError as e:
        raise SourceError(entry.path, str(e)) from e

    record, usable = parse_dump(data, shard=shard, fallback_encoding=fallback_encoding)
    for issue in record.parse_errors:
        logger.debug("%s: %s", entry.path, issue)
    if not usable:
        reason = "; ".join(str(issue) for issue in record.parse_errors) or "no disc ID"
        summary.skip(entry.path, IngestErrorCode.UNUSABLE_DUMP, reason)
        return False

    checksum = select_checksum(record, hint, entry.path)
    identity = compose_identity(checksum, shard)

    try:
        tracks_written = _write_record(session, identity, record)
    except SQLAlchemyError as e:
        logger.error(
            "Insert failed for %s (identity %s, title %r): %s",
            entry.path,
            identity.hex(),
            record.title,
            e,
        )
        raise SinkError(f"{entry.path}: {e}") from e

    summary.discs_inserted += 1
    summary.tracks_inserted += tracks_written
    return True


def ingest_entries(
    session: Session,
    entries: Iterable[DumpEntry],
    fallback_encoding: str | None = FALLBACK_ENCODING,
) -> IngestSummary:
    """Ingest entries sequentially without committing.

    Returns:
        IngestSummary for the entries processed.
    """
    summary = IngestSummary()
    for entry in entries:
        ingest_entry(session, entry, summary, fallback_encoding)
    return summary


def ingest_path(
    session: Session,
    root: str | Path,
    fallback_encoding: str | None = FALLBACK_ENCODING,
) -> IngestSummary:
    """Ingest everything under root as one atomic batch.

    Commits once on success. On any failure the whole batch is rolled
    back and the error is re-raised.

    Args:
        session: Fresh session; its transaction is owned by this call.
        root: Directory tree or tar archive.
        fallback_encoding: Codec for dumps that are not valid UTF-8.

    Returns:
        IngestSummary for the committed batch.

    Raises:
        SinkError: If an insert or the commit fails.
        SourceError: If root cannot be read.
    """
    try:
        summary = ingest_entries(session, iter_entries(root), fallback_encoding)
        try:
            session.commit()
        except SQLAlchemyError as e:
            raise SinkError(f"commit failed: {e}") from e
    except Exception:
        session.rollback()
        logger.error("Batch for %s rolled back; nothing committed", root)
        raise

    logger.info(
        "Committed %d disc(s), %d track(s) from %s; %d skipped, %d ignored",
        summary.discs_inserted,
        summary.tracks_inserted,
        root,
        len(summary.skipped),
        summary.ignored,
    )
    return summary


# --- Standalone Execution ---


def run_ingest(
    root: str | Path,
    db_path: str | None = None,
    database_url: str | None = None,
    echo: bool = False,
    fallback_encoding: str | None = FALLBACK_ENCODING,
) -> IngestSummary:
    """Initialize the database and ingest root in one transaction.

    Args:
        root: Directory tree or tar archive.
        db_path: Optional SQLite path override.
        database_url: Optional full SQLAlchemy URL override.
        echo: If True, log all SQL statements.
        fallback_encoding: Codec for dumps that are not valid UTF-8.

    Returns:
        IngestSummary for the committed batch.
    """
    engine, SessionFactory = init_db(db_path, echo=echo, database_url=database_url)
    session = SessionFactory()

    try:
        return ingest_path(session, root, fallback_encoding)
    finally:
        session.close()
        engine.dispose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="freedb-ingest",
        description="Load a freedb dump (directory or tar archive) into a database",
    )
    parser.add_argument("dump", type=Path, help="Path to an extracted dump tree or tar archive")
    parser.add_argument("--db", dest="db_path", default=None, help="SQLite database path")
    parser.add_argument(
        "--database-url",
        default=None,
        help="Full SQLAlchemy database URL (overrides --db)",
    )
    parser.add_argument("--echo", action="store_true", help="Log all SQL statements")
    parser.add_argument(
        "--fallback-encoding",
        default=FALLBACK_ENCODING,
        help="Codec for dumps that are not valid UTF-8 (e.g. iso-8859-1)",
    )
    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        help=f"Logging level (default: {LOG_LEVEL})",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.fallback_encoding is not None:
        try:
            codecs.lookup(args.fallback_encoding)
        except LookupError:
            parser.error(f"unknown encoding: {args.fallback_encoding}")

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        summary = run_ingest(
            args.dump,
            db_path=args.db_path,
            database_url=args.database_url,
            echo=args.echo,
            fallback_encoding=args.fallback_encoding,
        )
    except IngestError as e:
        logger.error("Ingest failed: %s", e)
        return 1
    except SQLAlchemyError as e:
        logger.error("Database error: %s", e)
        return 1
    except Exception:
        logger.exception("Ingest failed unexpectedly")
        return 1

    print(
        f"Ingested {summary.discs_inserted} discs, {summary.tracks_inserted} tracks "
        f"({len(summary.skipped)} skipped)"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
