"""
License key generation.

Keys are opaque: every character is drawn from a cryptographically
secure source and nothing about the owner or the tier can be decoded
from them.
"""

import math
import secrets
from typing import Optional

from core.domain.exceptions import KeyGenerationError

# Crockford base32: no I, L, O or U so keys survive being read aloud.
KEY_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"

MIN_ENTROPY_BITS = 128
MIN_VISIBLE_CHARS = 16


def mask_key(key: str) -> str:
    """
    Mask a license key for logging.

    Args:
        key: Raw license key

    Returns:
        Key with everything but the last group hidden
    """
    if not key:
        return ""
    tail = key.rsplit("-", 1)[-1]
    return f"****-{tail[-4:]}"


class KeyGenerator:
    """
    Produces license keys in format: [PREFIX-]XXXXX-XXXXX-XXXXX-XXXXX-XXXXX-XXXXX.

    The prefix identifies the issuing product, never the customer.
    """

    def __init__(
        self,
        prefix: str = "",
        groups: int = 6,
        group_size: int = 5,
        random_source: Optional[secrets.SystemRandom] = None,
    ):
        """
        Initialize generator.

        Args:
            prefix: Optional product prefix
            groups: Number of character groups
            group_size: Characters per group
            random_source: Secure random source (SystemRandom by default)

        Raises:
            ValueError: If the shape provides too little entropy
        """
        if prefix and not prefix.isalnum():
            raise ValueError(f"Invalid key prefix: {prefix}")
        if groups < 1 or group_size < 1:
            raise ValueError("Key must have at least one group of one character")
        if groups * group_size < MIN_VISIBLE_CHARS:
            raise ValueError(
                f"Key must have at least {MIN_VISIBLE_CHARS} random characters"
            )
        if self.entropy_bits_for(groups, group_size) < MIN_ENTROPY_BITS:
            raise ValueError(
                f"Key must carry at least {MIN_ENTROPY_BITS} bits of entropy"
            )

        self.prefix = prefix.upper()
        self.groups = groups
        self.group_size = group_size
        self._random = random_source or secrets.SystemRandom()

    @staticmethod
    def entropy_bits_for(groups: int, group_size: int) -> float:
        """Entropy in bits of a key with the given shape."""
        return groups * group_size * math.log2(len(KEY_ALPHABET))

    @property
    def entropy_bits(self) -> float:
        return self.entropy_bits_for(self.groups, self.group_size)

    def generate(self) -> str:
        """
        Generate a license key.

        Returns:
            Generated license key string

        Raises:
            KeyGenerationError: If the entropy source fails
        """
        try:
            parts = [
                "".join(self._random.choice(KEY_ALPHABET) for _ in range(self.group_size))
                for _ in range(self.groups)
            ]
        except (OSError, NotImplementedError) as e:
            raise KeyGenerationError(f"Entropy source failure: {e}") from e

        body = "-".join(parts)
        return f"{self.prefix}-{body}" if self.prefix else body
