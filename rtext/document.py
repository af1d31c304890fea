"""
In-memory RText document: ordered pages of label-keyed pair units.

Both layouts are read through the same label-keyed interface. Only add_row's
id handling and get_last_id look at the variant.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple, Union

from .config import DEFAULT_KEY
from .errors import DuplicateLabel, DuplicatePage, NotFound
from .header import Variant

logger = logging.getLogger(__name__)

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


@dataclass(frozen=True)
class LegacyEntry:
    """RT03 record; its identity is its position within the page."""

    label: str
    value: str


@dataclass(frozen=True)
class CurrentEntry:
    """RT04 record with a caller-assigned numeric id."""

    id: int
    label: str
    value: str


PairUnit = Union[LegacyEntry, CurrentEntry]


@dataclass
class Page:
    name: str
    variant: Variant
    pair_units: Dict[str, PairUnit] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.pair_units)

    def __iter__(self) -> Iterator[PairUnit]:
        return iter(self.pair_units.values())

    def entries(self) -> Iterator[Tuple[int, PairUnit]]:
        """Yield (record number, pair unit) in page order."""
        return enumerate(self.pair_units.values())

    def pair_exists(self, label: str) -> bool:
        return label in self.pair_units

    def get_row(self, label: str) -> PairUnit:
        try:
            return self.pair_units[label]
        except KeyError:
            raise NotFound(f"Label '{label}' not found in page '{self.name}'") from None

    def get_last_id(self) -> int:
        """
        Highest id in the page, 0 when empty. Legacy pages report their record
        count, the one-based position of the last record.
        """
        if not self.variant.has_ids:
            return len(self.pair_units)
        return max((unit.id for unit in self.pair_units.values()), default=0)

    def make_unit(self, id: Optional[int], label: str, value: str) -> PairUnit:
        if not label:
            raise ValueError("Label must not be empty.")
        if not self.variant.has_ids:
            return LegacyEntry(label, value)
        if id is None:
            raise ValueError(f"Page '{self.name}' needs an explicit id for '{label}'.")
        if not INT32_MIN <= id <= INT32_MAX:
            raise ValueError(f"Id {id} does not fit a 32-bit record id.")
        return CurrentEntry(int(id), label, value)

    def add_row(self, id: Optional[int], label: str, value: str) -> str:
        """
        Append a row and return its record key (the label).
        The id is required for current-layout pages and ignored for legacy ones.
        """
        if label in self.pair_units:
            raise DuplicateLabel(self.name, label)
        self.pair_units[label] = self.make_unit(id, label, value)
        return label

    def delete_row(self, label: str) -> PairUnit:
        try:
            return self.pair_units.pop(label)
        except KeyError:
            raise NotFound(f"Label '{label}' not found in page '{self.name}'") from None

    def replace_row(
        self, old_label: str, id: Optional[int], label: str, value: str
    ) -> str:
        """Edit a row as delete-then-add, so a renamed row moves to the end."""
        if old_label not in self.pair_units:
            raise NotFound(f"Label '{old_label}' not found in page '{self.name}'")
        if label != old_label and label in self.pair_units:
            raise DuplicateLabel(self.name, label)
        unit = self.make_unit(id, label, value)
        del self.pair_units[old_label]
        self.pair_units[label] = unit
        return label


@dataclass
class RTextDocument:
    variant: Variant
    pages: Dict[str, Page] = field(default_factory=dict)
    key: bytes = field(default=DEFAULT_KEY, repr=False)
    locale_code: Optional[str] = None

    def get_pages(self) -> Dict[str, Page]:
        return self.pages

    def get_page(self, name: str) -> Page:
        try:
            return self.pages[name]
        except KeyError:
            raise NotFound(f"Page '{name}' not found") from None

    def add_page(self, name: str) -> Page:
        if name in self.pages:
            raise DuplicatePage(f"Page '{name}' already exists")
        page = Page(name, self.variant)
        self.pages[name] = page
        return page

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly form; lists keep page and record order."""
        pages = []
        for page in self.pages.values():
            entries = []
            for unit in page:
                entry: Dict[str, Any] = {}
                if isinstance(unit, CurrentEntry):
                    entry["Id"] = unit.id
                entry["Label"] = unit.label
                entry["Value"] = unit.value
                entries.append(entry)
            pages.append({"Name": page.name, "Entries": entries})
        return {"Variant": self.variant.name, "Pages": pages}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], key: bytes = DEFAULT_KEY) -> "RTextDocument":
        try:
            variant = Variant[data["Variant"]]
        except KeyError:
            raise ValueError(f"Unknown variant: {data.get('Variant')!r}") from None

        document = cls(variant, key=key)
        for page_data in data.get("Pages", []):
            page = document.add_page(page_data["Name"])
            for entry in page_data.get("Entries", []):
                page.add_row(entry.get("Id"), entry["Label"], entry.get("Value", ""))
        logger.debug(f"Built {variant.name} document with {len(document.pages)} pages")
        return document
