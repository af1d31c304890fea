"""Exceptions raised by the RText codec, document model and bundle resolver."""


class RTextError(Exception):
    """Base class for every error raised by this package."""


class MalformedHeader(RTextError, ValueError):
    """The fixed header is truncated, unsigned or points outside the file."""


class UnsupportedVersion(RTextError, ValueError):
    """The header carries a version tag no known layout uses."""

    def __init__(self, tag: bytes):
        super().__init__(f"Unsupported RText version tag: {tag!r}")
        self.tag = tag


class MalformedPageTable(RTextError, ValueError):
    """A page table record points outside the buffer or cannot be keyed."""


class StringResolutionError(RTextError, ValueError):
    """A string offset does not land on a valid string in the string region."""

    def __init__(self, offset: int, reason: str):
        super().__init__(f"Invalid string at 0x{offset:X}: {reason}")
        self.offset = offset
        self.reason = reason


class KeyTooShort(RTextError, ValueError):
    """The XOR key does not cover the whole payload."""

    def __init__(self, payload_length: int, key_length: int):
        super().__init__(
            f"XOR key too short: payload is {payload_length} bytes, "
            f"key is {key_length} bytes"
        )
        self.payload_length = payload_length
        self.key_length = key_length


class DuplicateLabel(RTextError, ValueError):
    """A row with this label already exists in the page."""

    def __init__(self, page: str, label: str):
        super().__init__(f"Label '{label}' already exists in page '{page}'")
        self.page = page
        self.label = label


class DuplicatePage(RTextError, ValueError):
    """A page with this name already exists in the document."""


class NotFound(RTextError, LookupError):
    """The requested page or row does not exist."""


class CSVImportError(RTextError, ValueError):
    """A CSV file could not be turned into rows."""
