"""
Configuration: RText format constants and runtime defaults in one place.

Supports:
  - RT03 files (legacy layout, records numbered by position)
  - RT04 files (current layout, records carry a numeric id)
"""

import hashlib

# =============================================================================
# BINARY LAYOUT
# =============================================================================
BYTE_ORDER = ">"  # PS2/PS3 era titles, big-endian throughout

SIGNATURE = b"RT"
VERSION_TAG_LEGACY = b"03"
VERSION_TAG_CURRENT = b"04"

HEADER_SIZE = 0x20
PAGE_ENTRY_SIZE = 0x10
LEGACY_RECORD_SIZE = 0x08
CURRENT_RECORD_SIZE = 0x10

STRING_ALIGNMENT = 4
STRING_ENCODING = "utf-8"

# =============================================================================
# CIPHER
# =============================================================================
KEY_SEED = b"GT.RText"
KEY_LENGTH = 0x400


def build_default_key(seed: bytes = KEY_SEED, length: int = KEY_LENGTH) -> bytes:
    """Expand the seed into a key of the requested length with a SHA-256 chain."""
    key = b""
    block = seed
    while len(key) < length:
        block = hashlib.sha256(block).digest()
        key += block
    return key[:length]


DEFAULT_KEY = build_default_key()

# =============================================================================
# PROJECT FOLDERS
# =============================================================================
RTEXT_EXTENSION = ".rt2"
PAYLOAD_FILE_NAME = "rtext" + RTEXT_EXTENSION

# Locale files are tiny, threads mostly wait on disk
DEFAULT_WORKERS = 4

# =============================================================================
# LOGGING
# =============================================================================
LOG_FILE_FORMAT = "%(asctime)s;%(levelname)-8s;%(name)s:%(lineno)d;%(message)s"
LOG_FILE_MAX_BYTES = 1024 * 1024
LOG_FILE_BACKUPS = 3
