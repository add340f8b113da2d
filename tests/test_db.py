"""Tests for freedb.db module and sink primitives."""

import pytest
from sqlalchemy import inspect, select
from sqlalchemy.exc import IntegrityError

from freedb.db import get_database_url, init_db, insert_disc, insert_track
from freedb.disc import DiscRecord
from freedb.models import Disc, Track
from freedb.shards import Shard, compose_identity


def _record(**overrides) -> DiscRecord:
    fields = {
        "checksum_ids": (bytes.fromhex("decafbad"),),
        "shard": int(Shard.SOUNDTRACK),
        "title": "Artist / Title",
        "genre": "Math Rock",
        "year": 2005,
        "duration": 2000,
    }
    fields.update(overrides)
    return DiscRecord(**fields)


class TestGetDatabaseUrl:
    """Tests for URL selection."""

    def test_sqlite_path(self):
        assert get_database_url("/tmp/x.db") == "sqlite:////tmp/x.db"

    def test_full_url_wins(self):
        url = "postgresql+psycopg://u:p@localhost/freedb"
        assert get_database_url("/tmp/x.db", url) == url


class TestInitDb:
    """Tests for database initialization."""

    def test_creates_database_file(self, temp_db):
        """init_db should create the database file."""
        db_path, _, _ = temp_db
        assert db_path.exists()

    def test_creates_all_tables(self, temp_db):
        """init_db should create all defined tables."""
        _, engine, _ = temp_db
        tables = inspect(engine).get_table_names()
        assert "discs" in tables
        assert "tracks" in tables

    def test_idempotent(self, temp_db):
        """init_db should be safe to call multiple times."""
        db_path, _, _ = temp_db
        engine2, _ = init_db(str(db_path))
        assert "discs" in inspect(engine2).get_table_names()
        engine2.dispose()


class TestInsertDisc:
    """Tests for the disc insert primitive."""

    def test_inserts_row(self, temp_db):
        _, _, SessionFactory = temp_db
        session = SessionFactory()
        try:
            record = _record()
            identity = compose_identity(record.checksum_ids[0], Shard.SOUNDTRACK)
            disc_id = insert_disc(session, identity, record)
            session.commit()

            disc = session.execute(select(Disc).where(Disc.id == disc_id)).scalar_one()
            assert disc.freedb_id == bytes.fromhex("decafbad0a")
            assert disc.shard == 10
            assert disc.title == "Artist / Title"
            assert disc.genre == "Math Rock"
            assert disc.year == 2005
            assert disc.duration == 2000
            assert disc.extended_data is None
        finally:
            session.close()

    def test_does_not_commit(self, temp_db):
        """Insert primitives flush only; rollback discards them."""
        _, _, SessionFactory = temp_db
        session = SessionFactory()
        try:
            insert_disc(session, bytes.fromhex("decafbad0a"), _record())
            session.rollback()
            assert session.execute(select(Disc)).first() is None
        finally:
            session.close()

    def test_duplicate_identity_fails_at_insert(self, temp_db):
        _, _, SessionFactory = temp_db
        session = SessionFactory()
        try:
            identity = bytes.fromhex("decafbad0a")
            insert_disc(session, identity, _record())
            with pytest.raises(IntegrityError):
                insert_disc(session, identity, _record(title="Other"))
            session.rollback()
        finally:
            session.close()

    def test_same_checksum_different_shard(self, temp_db):
        """Colliding checksums in different shards both insert."""
        _, _, SessionFactory = temp_db
        session = SessionFactory()
        try:
            checksum = bytes.fromhex("decafbad")
            insert_disc(session, compose_identity(checksum, Shard.ROCK), _record(shard=9))
            insert_disc(session, compose_identity(checksum, Shard.JAZZ), _record(shard=5))
            session.commit()
            assert len(session.execute(select(Disc)).all()) == 2
        finally:
            session.close()


class TestInsertTrack:
    """Tests for the track insert primitive."""

    def test_inserts_tracks_for_disc(self, temp_db):
        _, _, SessionFactory = temp_db
        session = SessionFactory()
        try:
            disc_id = insert_disc(session, bytes.fromhex("decafbad0a"), _record())
            insert_track(session, disc_id, 0, "Introduction", start_offset=150)
            insert_track(session, disc_id, 1, "Outro", extended_data="")
            session.commit()

            tracks = session.execute(select(Track).order_by(Track.position)).scalars().all()
            assert [t.title for t in tracks] == ["Introduction", "Outro"]
            assert tracks[0].start_offset == 150
            assert tracks[1].start_offset is None
            assert tracks[1].extended_data is None
            assert all(t.disc_id == disc_id for t in tracks)
        finally:
            session.close()

    def test_duplicate_position_rejected(self, temp_db):
        _, _, SessionFactory = temp_db
        session = SessionFactory()
        try:
            disc_id = insert_disc(session, bytes.fromhex("decafbad0a"), _record())
            insert_track(session, disc_id, 0, "One")
            with pytest.raises(IntegrityError):
                insert_track(session, disc_id, 0, "Again")
            session.rollback()
        finally:
            session.close()


def test_database_url_from_environment(monkeypatch):
    """FREEDB_DATABASE_URL is used when no path is given."""
    import freedb.db

    url = "postgresql+psycopg://freedb@localhost/freedb"
    monkeypatch.setattr(freedb.db, "DATABASE_URL", url)
    assert get_database_url() == url
    assert get_database_url("/explicit.db") == "sqlite:////explicit.db"
