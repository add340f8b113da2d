"""Tests for freedb.shards identity resolution."""

import itertools

import pytest

from freedb.errors import IngestError, IngestErrorCode
from freedb.shards import Shard, UnknownShardError, compose_identity, resolve_shard

ALL_NAMES = [
    "blues",
    "classical",
    "country",
    "data",
    "folk",
    "jazz",
    "misc",
    "newage",
    "reggae",
    "rock",
    "soundtrack",
]


class TestResolveShard:
    """Tests for shard name lookup."""

    def test_eleven_shards_in_fixed_order(self):
        assert [shard.dirname for shard in Shard] == ALL_NAMES
        assert [int(shard) for shard in Shard] == list(range(11))

    @pytest.mark.parametrize("index,name", list(enumerate(ALL_NAMES)))
    def test_known_names(self, index, name):
        assert resolve_shard(name) == index

    def test_soundtrack_is_ten(self):
        assert resolve_shard("soundtrack") is Shard.SOUNDTRACK
        assert Shard.SOUNDTRACK == 10

    @pytest.mark.parametrize("name", ["", "Rock", "ROCK", "electronic", "freedb"])
    def test_unknown_names_raise(self, name):
        with pytest.raises(UnknownShardError) as exc_info:
            resolve_shard(name)
        assert exc_info.value.name == name
        assert exc_info.value.error_code == IngestErrorCode.UNKNOWN_SHARD

    def test_unknown_shard_is_ingest_error(self):
        with pytest.raises(IngestError, match="electronic"):
            resolve_shard("electronic")


class TestComposeIdentity:
    """Tests for composite identity construction."""

    def test_appends_shard_byte(self):
        identity = compose_identity(bytes.fromhex("decafbad"), Shard.SOUNDTRACK)
        assert identity == bytes.fromhex("decafbad0a")
        assert len(identity) == 5

    def test_deterministic(self):
        checksum = bytes.fromhex("0a0b0c0d")
        assert compose_identity(checksum, Shard.ROCK) == compose_identity(checksum, Shard.ROCK)

    def test_injective_over_shards(self):
        """Same checksum in different shards never collides."""
        checksums = [bytes.fromhex(h) for h in ("decafbad", "00000000", "ffffffff")]
        identities = {
            compose_identity(checksum, shard)
            for checksum, shard in itertools.product(checksums, Shard)
        }
        assert len(identities) == len(checksums) * len(Shard)

    def test_wrong_checksum_width_raises(self):
        with pytest.raises(ValueError, match="4 bytes"):
            compose_identity(b"\x01\x02\x03", Shard.ROCK)

    def test_shard_out_of_range_raises(self):
        with pytest.raises(ValueError, match="out of range"):
            compose_identity(bytes(4), 256)
