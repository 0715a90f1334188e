"""
Unit tests for license key generation.
"""
import re

import pytest

from core.domain.exceptions import KeyGenerationError
from licenses.domain.license_key import (
    KEY_ALPHABET,
    MIN_ENTROPY_BITS,
    KeyGenerator,
    mask_key,
)

KEY_PATTERN = re.compile(r"^[0-9A-HJKMNP-TV-Z]{5}(-[0-9A-HJKMNP-TV-Z]{5}){5}$")


class BrokenRandom:
    """Random source whose entropy pool is gone."""

    def choice(self, seq):
        raise OSError("getrandom failed")


class TestKeyGenerator:
    """Tests for KeyGenerator."""

    def test_default_format(self):
        """Test default keys are six groups of five Crockford characters."""
        key = KeyGenerator().generate()
        assert KEY_PATTERN.match(key)

    def test_default_entropy(self):
        """Test default shape carries 150 bits."""
        generator = KeyGenerator()
        assert generator.entropy_bits == pytest.approx(150.0)
        assert generator.entropy_bits >= MIN_ENTROPY_BITS

    def test_alphabet_excludes_ambiguous_characters(self):
        """Test I, L, O and U never appear."""
        assert len(KEY_ALPHABET) == 32
        for char in "ILOU":
            assert char not in KEY_ALPHABET

    def test_prefix(self):
        """Test product prefix is prepended and uppercased."""
        key = KeyGenerator(prefix="acme").generate()
        assert key.startswith("ACME-")
        assert KEY_PATTERN.match(key[len("ACME-"):])

    def test_invalid_prefix(self):
        """Test prefix must be alphanumeric."""
        with pytest.raises(ValueError, match="Invalid key prefix"):
            KeyGenerator(prefix="ac-me")

    def test_too_few_characters_rejected(self):
        """Test shapes shorter than 16 characters are rejected."""
        with pytest.raises(ValueError, match="random characters"):
            KeyGenerator(groups=3, group_size=5)

    def test_too_little_entropy_rejected(self):
        """Test 25 characters (125 bits) fall below the entropy floor."""
        with pytest.raises(ValueError, match="entropy"):
            KeyGenerator(groups=5, group_size=5)

    def test_keys_are_unique(self):
        """Test a batch of keys has no duplicates."""
        generator = KeyGenerator()
        keys = {generator.generate() for _ in range(1000)}
        assert len(keys) == 1000

    def test_entropy_failure(self):
        """Test an entropy source failure surfaces as KeyGenerationError."""
        generator = KeyGenerator(random_source=BrokenRandom())
        with pytest.raises(KeyGenerationError):
            generator.generate()


class TestMaskKey:
    """Tests for mask_key."""

    def test_mask_keeps_tail_of_last_group(self):
        """Test only the last four characters remain visible."""
        assert mask_key("ABCDE-FGHJK-MNPQR-STVWX-YZ012-34567") == "****-4567"

    def test_mask_empty(self):
        """Test masking an empty key."""
        assert mask_key("") == ""
