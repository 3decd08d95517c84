"""Tests for the LCG PRNG and seed derivation."""

from datetime import date, datetime

import pytest

from py_planet.core.lcg_prng import MODULUS, LcgPRNG, lcg_next
from py_planet.core.seeds import (
    APARTMENT_SEED_OFFSET,
    PARK_SEED_OFFSET,
    PATHWAY_SEED_OFFSET,
    date_to_seed,
    derive_seed,
    string_to_seed,
)


def _reference_hash(text: str) -> int:
    """Multiply-by-31 formulation of the same hash, ASCII only."""
    h = 0
    for ch in text:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


class TestLcgNext:
    """Test the pure recurrence."""

    def test_first_step_from_zero(self):
        """Test the recurrence constants."""
        value, state = lcg_next(0)
        assert state == 49297
        assert value == 49297 / 233280

    def test_state_stays_in_range(self):
        """Test that the state never leaves [0, modulus)."""
        state = 2**31
        for _ in range(1000):
            value, state = lcg_next(state)
            assert 0 <= state < MODULUS
            assert 0.0 <= value < 1.0


class TestLcgPRNG:
    """Test the stateful generator."""

    def test_deterministic(self):
        """Test that equal seeds give equal streams."""
        a = LcgPRNG(96354)
        b = LcgPRNG(96354)
        assert [a.random() for _ in range(50)] == [b.random() for _ in range(50)]

    def test_matches_pure_function(self):
        """Test that the class threads state exactly like lcg_next."""
        rng = LcgPRNG(42)
        state = 42
        for _ in range(20):
            expected, state = lcg_next(state)
            assert rng.random() == expected
        assert rng.state == state
        assert rng.call_count == 20

    def test_randrange_bounds(self):
        """Test that randrange stays inside [0, n)."""
        rng = LcgPRNG(7)
        values = [rng.randrange(6) for _ in range(500)]
        assert min(values) >= 0
        assert max(values) <= 5

    def test_choice_empty_raises(self):
        """Test that choosing from nothing is an error."""
        with pytest.raises(IndexError):
            LcgPRNG(1).choice([])

    def test_negative_seed_rejected(self):
        """Test that negative seeds are refused."""
        with pytest.raises(ValueError):
            LcgPRNG(-1)


class TestSeedDerivation:
    """Test identifier hashing."""

    def test_known_value(self):
        """Test the documented walk for 'abc'."""
        assert string_to_seed("a") == 97
        assert string_to_seed("ab") == 3105
        assert string_to_seed("abc") == 96354

    def test_empty_string(self):
        """Test that the empty identifier hashes to zero."""
        assert string_to_seed("") == 0

    @pytest.mark.parametrize(
        "identifier",
        ["village-12", "cm3x9f0k20000abcdefghijkl", "The quick brown fox jumps over the lazy dog"],
    )
    def test_wraps_to_32_bits(self, identifier):
        """Test long identifiers against an independent formulation."""
        seed = string_to_seed(identifier)
        assert seed == _reference_hash(identifier)
        assert 0 <= seed <= 2**31

    def test_utf16_code_units(self):
        """Test that astral characters hash as two surrogate units."""
        # U+1F600 is D83D DE00 in UTF-16
        assert string_to_seed("\U0001F600") == 0xD83D * 31 + 0xDE00

    def test_non_string_rejected(self):
        """Test that non-string identifiers are a caller error."""
        with pytest.raises(TypeError):
            string_to_seed(12345)

    def test_date_seed(self):
        """Test that dates hash through their ISO form."""
        day = date(2024, 3, 15)
        assert date_to_seed(day) == string_to_seed("2024-03-15")
        assert date_to_seed(datetime(2024, 3, 15, 23, 59)) == date_to_seed(day)

    def test_offsets(self):
        """Test the sub-generator offsets."""
        base = string_to_seed("abc")
        assert derive_seed(base, PATHWAY_SEED_OFFSET) == 96354 + 12345
        assert derive_seed(base, PARK_SEED_OFFSET) == 96354 + 67890
        assert derive_seed(base, APARTMENT_SEED_OFFSET) == 96354 + 54321
