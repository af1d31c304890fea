"""Codec and project tools for RText localized string tables."""

from .bundle import (
    LocaleBundle,
    LocaleOutcome,
    ProjectLayout,
    detect_layout,
    load_bundle,
    save_bundle,
)
from .cipher import XorCipher, decrypt, encrypt
from .codec import RText, decode, encode, load, save
from .config import DEFAULT_KEY
from .document import CurrentEntry, LegacyEntry, Page, PairUnit, RTextDocument
from .errors import (
    CSVImportError,
    DuplicateLabel,
    DuplicatePage,
    KeyTooShort,
    MalformedHeader,
    MalformedPageTable,
    NotFound,
    RTextError,
    StringResolutionError,
    UnsupportedVersion,
)
from .header import Variant
from .locales import LOCALES

__all__ = [
    "CSVImportError",
    "CurrentEntry",
    "DEFAULT_KEY",
    "DuplicateLabel",
    "DuplicatePage",
    "KeyTooShort",
    "LOCALES",
    "LegacyEntry",
    "LocaleBundle",
    "LocaleOutcome",
    "MalformedHeader",
    "MalformedPageTable",
    "NotFound",
    "Page",
    "PairUnit",
    "ProjectLayout",
    "RText",
    "RTextDocument",
    "RTextError",
    "StringResolutionError",
    "UnsupportedVersion",
    "Variant",
    "XorCipher",
    "decode",
    "decrypt",
    "detect_layout",
    "encode",
    "encrypt",
    "load",
    "load_bundle",
    "save",
    "save_bundle",
]
