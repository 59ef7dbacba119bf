"""
Tests for roost.identifiers — canonical message ids.
"""

import dataclasses

import pytest

from roost.errors import InvalidIdentifier
from roost.identifiers import IdentifierCanonicalizer, MessageId, digest_name


@pytest.fixture
def ids():
    return IdentifierCanonicalizer()


class TestCanonicalize:
    def test_equal_names_give_equal_ids(self, ids):
        assert ids.canonicalize("window_resized") == ids.canonicalize("window_resized")

    def test_result_is_cached(self, ids):
        first = ids.canonicalize("exit")
        assert ids.canonicalize("exit") is first
        assert ids.cache_size() == 1

    def test_distinct_names_differ(self, ids):
        assert ids("exit") != ids("reboot")

    def test_canonical_id_passes_through(self, ids):
        message_id = MessageId.of("exit")
        assert ids.canonicalize(message_id) is message_id
        assert ids.cache_size() == 0

    def test_equal_across_canonicalizers(self, ids):
        assert ids("exit") == IdentifierCanonicalizer()("exit")
        assert hash(ids("exit")) == hash(MessageId.of("exit"))

    def test_call_and_index_shorthands(self, ids):
        assert ids("exit") is ids["exit"]

    def test_value_is_name_digest(self, ids):
        assert ids("exit").value == digest_name("exit")

    @pytest.mark.parametrize("bad", [None, 1, 1.5, b"exit", ["exit"]])
    def test_rejects_non_identifiers(self, ids, bad):
        with pytest.raises(InvalidIdentifier) as exc_info:
            ids.canonicalize(bad)
        assert exc_info.value.code == "INVALID_IDENTIFIER"


class TestMessageId:
    def test_name_not_part_of_equality(self):
        assert MessageId(value=7, name="a") == MessageId(value=7, name="b")

    def test_str_uses_name(self):
        assert str(MessageId.of("exit")) == "exit"

    def test_str_without_name_shows_hash(self):
        assert str(MessageId(value=255)) == "hash:00000000000000ff"

    def test_is_immutable(self):
        message_id = MessageId.of("exit")
        with pytest.raises(dataclasses.FrozenInstanceError):
            message_id.value = 1
