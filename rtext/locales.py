"""Locale codes used by RText project folders and their display names."""

from types import MappingProxyType
from typing import Optional

LOCALES = MappingProxyType(
    {
        "AR": "Arabic",
        "BP": "Portuguese (Brazil)",
        "CN": "Chinese (Simplified)",
        "CZ": "Czech",
        "DE": "German",
        "DK": "Danish",
        "EL": "Greek",
        "ES": "Spanish",
        "FI": "Finnish",
        "FR": "French",
        "GB": "English (British)",
        "HU": "Hungarian",
        "IT": "Italian",
        "JP": "Japanese",
        "KR": "Korean",
        "MS": "Spanish (Latin America)",
        "NL": "Dutch",
        "NO": "Norwegian",
        "PL": "Polish",
        "PT": "Portuguese",
        "RU": "Russian",
        "SE": "Swedish",
        "TR": "Turkish",
        "TW": "Chinese (Traditional)",
        "US": "English (American)",
    }
)


def is_locale_code(code: str) -> bool:
    return code in LOCALES


def locale_name(code: str) -> Optional[str]:
    return LOCALES.get(code)
