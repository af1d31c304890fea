"""
XOR obfuscation of RText label and value payloads.

Every string restarts at key byte 0. A payload longer than the key cannot be
recovered, so both directions refuse it instead of wrapping around.
"""

from .config import DEFAULT_KEY
from .errors import KeyTooShort


class XorCipher:
    """Symmetric XOR cipher bound to one key buffer."""

    def __init__(self, key: bytes = DEFAULT_KEY):
        if not key:
            raise ValueError("XOR key must not be empty.")
        self.key = bytes(key)

    def _apply(self, data: bytes) -> bytes:
        if len(data) > len(self.key):
            raise KeyTooShort(len(data), len(self.key))
        key = self.key
        size = len(key)
        return bytes(b ^ key[i % size] for i, b in enumerate(data))

    def decrypt(self, cipher_bytes: bytes) -> bytes:
        """Recover plain bytes, raising KeyTooShort when the key does not cover them."""
        return self._apply(cipher_bytes)

    def encrypt(self, plain_bytes: bytes) -> bytes:
        """Obfuscate plain bytes; the inverse of decrypt for the same key."""
        return self._apply(plain_bytes)


def decrypt(cipher_bytes: bytes, key: bytes) -> bytes:
    return XorCipher(key).decrypt(cipher_bytes)


def encrypt(plain_bytes: bytes, key: bytes) -> bytes:
    return XorCipher(key).encrypt(plain_bytes)
