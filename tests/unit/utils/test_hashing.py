"""Tests for fingerprint and new_id."""

import re

from lexpatch.utils.hashing import fingerprint, new_id, to_base36


class TestFingerprint:
    def test_empty_string(self):
        assert fingerprint("") == "0"

    def test_single_character(self):
        # 97 == 2 * 36 + 25
        assert fingerprint("a") == "2p"

    def test_two_characters(self):
        # 97 * 31 + 98 == 3105
        assert fingerprint("ab") == "2e9"

    def test_deterministic(self):
        text = "The Licensee shall indemnify the Licensor."
        assert fingerprint(text) == fingerprint(text)

    def test_different_inputs_usually_differ(self):
        assert fingerprint("Clause 1") != fingerprint("Clause 2")

    def test_astral_characters_count_as_two_code_units(self):
        # U+1F600 -> 0xD83D 0xDE00; 0xD83D * 31 + 0xDE00 == 1772899
        assert fingerprint("\U0001F600") == "11zz7"

    def test_output_is_lowercase_base36(self):
        value = fingerprint("Lorem ipsum dolor sit amet " * 50)
        assert re.fullmatch(r"[0-9a-z]+", value)

    def test_long_input_stays_within_32_bits(self):
        value = fingerprint("x" * 10_000)
        assert int(value, 36) <= 2 ** 31


class TestToBase36:
    def test_zero(self):
        assert to_base36(0) == "0"

    def test_round_trip_through_int(self):
        for n in (1, 35, 36, 1295, 2 ** 31):
            assert int(to_base36(n), 36) == n


class TestNewId:
    def test_unique(self):
        ids = {new_id() for _ in range(200)}
        assert len(ids) == 200

    def test_is_uuid_shaped(self):
        assert re.fullmatch(r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[0-9a-f]{4}-[0-9a-f]{12}", new_id())
