"""freedb ingest - Database engine, session management, and sink primitives.

SQLAlchemy sync engine/session factory. SQLite by default; any SQLAlchemy
URL may be supplied instead.
"""

from __future__ import annotations

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from freedb.config import DATABASE_URL, DB_PATH
from freedb.disc import DiscRecord
from freedb.models import Base, Disc, Track


def get_database_url(db_path: str | None = None, database_url: str | None = None) -> str:
    """Get the database URL.

    Args:
        db_path: Optional SQLite path override. Defaults to config.DB_PATH.
        database_url: Optional full URL. Wins over db_path and DB_PATH.

    Returns:
        SQLAlchemy connection URL string.
    """
    if database_url is not None:
        return database_url
    if db_path is None and DATABASE_URL is not None:
        return DATABASE_URL
    path = db_path if db_path is not None else DB_PATH
    return f"sqlite:///{path}"


def create_db_engine(
    db_path: str | None = None,
    echo: bool = False,
    database_url: str | None = None,
) -> Engine:
    """Create SQLAlchemy engine.

    Args:
        db_path: Optional path override for the SQLite database file.
        echo: If True, log all SQL statements.
        database_url: Optional full URL override.

    Returns:
        SQLAlchemy Engine instance.
    """
    url = get_database_url(db_path, database_url)
    return create_engine(url, echo=echo)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to the given engine.

    Args:
        engine: SQLAlchemy Engine instance.

    Returns:
        Configured sessionmaker.
    """
    # autoflush=False: inserts flush explicitly so a failure points at
    # the entry that caused it
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(
    db_path: str | None = None,
    echo: bool = False,
    database_url: str | None = None,
) -> tuple[Engine, sessionmaker]:
    """Initialize the database: create engine, session factory, and all tables.

    This is idempotent - safe to call multiple times.

    Args:
        db_path: Optional path override for the SQLite database file.
        echo: If True, log all SQL statements.
        database_url: Optional full URL override.

    Returns:
        Tuple of (engine, SessionFactory).
    """
    engine = create_db_engine(db_path, echo=echo, database_url=database_url)
    SessionFactory = create_session_factory(engine)

    # Create all tables (idempotent via checkfirst=True default)
    Base.metadata.create_all(engine)

    return engine, SessionFactory


# --- Sink Primitives ---


def insert_disc(session: Session, identity: bytes, record: DiscRecord) -> int:
    """Insert a disc row.

    Note:
        This function does NOT commit the transaction. It calls session.flush()
        so constraint violations surface here, and leaves commit responsibility
        to the caller.

    Args:
        session: Active database session.
        identity: Composite identity from compose_identity().
        record: Parsed dump supplying title and optional metadata.

    Returns:
        The new disc row id.
    """
    disc = Disc(
        freedb_id=identity,
        shard=int(record.shard) if record.shard is not None else identity[-1],
        title=record.title,
        genre=record.genre,
        year=record.year,
        duration=record.duration,
        extended_data=record.extended_data,
    )
    session.add(disc)
    session.flush()
    return disc.id


def insert_track(
    session: Session,
    disc_id: int,
    position: int,
    title: str,
    start_offset: int | None = None,
    extended_data: str | None = None,
) -> int:
    """Insert a track row referencing a disc.

    Note:
        Flushes but does NOT commit.

    Returns:
        The new track row id.
    """
    track = Track(
        disc_id=disc_id,
        position=position,
        title=title,
        start_offset=start_offset,
        extended_data=extended_data or None,
    )
    session.add(track)
    session.flush()
    return track.id
