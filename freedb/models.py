"""freedb ingest - SQLAlchemy ORM models.

Database tables:
1. discs
2. tracks
"""

from datetime import UTC, datetime

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    Integer,
    LargeBinary,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from freedb.config import IDENTITY_BYTE_LENGTH


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


class Disc(Base):
    """One ingested freedb dump."""

    __tablename__ = "discs"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Composite identity: 4 checksum bytes + 1 shard byte
    freedb_id: Mapped[bytes] = mapped_column(
        LargeBinary(IDENTITY_BYTE_LENGTH), unique=True, nullable=False, index=True
    )
    shard: Mapped[int] = mapped_column(Integer, nullable=False)

    # Combined artist and release name (DTITLE)
    title: Mapped[str] = mapped_column(Text, nullable=False)

    # Optional metadata (absent in many legacy dumps)
    genre: Mapped[str | None] = mapped_column(Text, nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    extended_data: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )


class Track(Base):
    """One track title of an ingested disc."""

    __tablename__ = "tracks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    disc_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("discs.id"), nullable=False, index=True
    )

    # Zero-based track position from the TTITLE<n> key
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)

    # Frame offset where the track starts, when the dump lists one
    start_offset: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    extended_data: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (UniqueConstraint("disc_id", "position", name="uq_track_position"),)
