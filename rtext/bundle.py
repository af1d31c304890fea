"""
Locale bundles: a project folder holding one RText document per locale.

Two layouts are recognised:
  - FlatPerLocaleFile: <folder>/<LOCALE>.rt2
  - PerLocaleFolder:   <folder>/<LOCALE>/rtext.rt2

Anything else in the folder is ignored. Each locale is decoded and saved on its
own, and a failure is recorded against that locale only.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from . import codec
from .config import DEFAULT_KEY, DEFAULT_WORKERS, PAYLOAD_FILE_NAME, RTEXT_EXTENSION
from .csv_io import CsvRow, apply_csv_rows
from .document import RTextDocument
from .errors import DuplicateLabel, RTextError
from .locales import is_locale_code

logger = logging.getLogger(__name__)


class ProjectLayout(Enum):
    FlatPerLocaleFile = 1
    PerLocaleFolder = 2


@dataclass
class LocaleOutcome:
    """Result of loading or saving one locale."""

    locale_code: str
    path: Path
    document: Optional[RTextDocument] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def discover_locales(folder: Path) -> Tuple[Optional[ProjectLayout], List[Tuple[str, Path]]]:
    """
    Probe the top level of folder and return its layout and (locale, file) pairs,
    sorted by locale code. Flat locale files win over locale subfolders.
    """
    flat = []
    nested = []
    for entry in sorted(folder.iterdir()):
        if entry.is_file():
            if is_locale_code(entry.stem) and entry.suffix.lower() == RTEXT_EXTENSION:
                flat.append((entry.stem, entry))
        elif entry.is_dir() and is_locale_code(entry.name):
            payload = entry / PAYLOAD_FILE_NAME
            if payload.is_file():
                nested.append((entry.name, payload))
            else:
                logger.debug(f"Skipping {entry}: no {PAYLOAD_FILE_NAME}")

    if flat:
        return ProjectLayout.FlatPerLocaleFile, flat
    if nested:
        return ProjectLayout.PerLocaleFolder, nested
    return None, []


def detect_layout(folder: Path) -> Optional[ProjectLayout]:
    return discover_locales(folder)[0]


def locale_path(folder: Path, layout: ProjectLayout, locale_code: str) -> Path:
    if layout is ProjectLayout.FlatPerLocaleFile:
        return folder / f"{locale_code}{RTEXT_EXTENSION}"
    return folder / locale_code / PAYLOAD_FILE_NAME


def _load_locale(locale_code: str, path: Path, key: bytes) -> RTextDocument:
    document = codec.load(path, key)
    document.locale_code = locale_code
    return document


@dataclass
class LocaleBundle:
    folder: Path
    layout: Optional[ProjectLayout]
    outcomes: List[LocaleOutcome] = field(default_factory=list)

    @property
    def documents(self) -> Dict[str, RTextDocument]:
        """Successfully loaded documents keyed by locale code."""
        return {
            outcome.locale_code: outcome.document
            for outcome in self.outcomes
            if outcome.document is not None
        }

    @property
    def failures(self) -> List[LocaleOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    def save(self, folder: Optional[Path] = None) -> List[LocaleOutcome]:
        return save_bundle(self, folder)

    def _pages_named(self, page_name: str):
        for document in self.documents.values():
            page = document.pages.get(page_name)
            if page is not None:
                yield page

    def add_row_all(self, page_name: str, id: Optional[int], label: str, value: str) -> int:
        """
        Add a row to the named page of every locale that has it.
        Nothing is changed if any of those pages already holds the label.
        """
        pages = list(self._pages_named(page_name))
        for page in pages:
            if page.pair_exists(label):
                raise DuplicateLabel(page.name, label)
        for page in pages:
            page.add_row(id, label, value)
        return len(pages)

    def replace_row_all(
        self,
        page_name: str,
        old_label: str,
        id: Optional[int],
        label: str,
        value: str,
    ) -> int:
        """Edit a row in every locale, adding it where the old label is missing."""
        pages = list(self._pages_named(page_name))
        if label != old_label:
            for page in pages:
                if page.pair_exists(label):
                    raise DuplicateLabel(page.name, label)
        for page in pages:
            if page.pair_exists(old_label):
                page.delete_row(old_label)
            page.add_row(id, label, value)
        return len(pages)

    def delete_row_all(self, page_name: str, label: str) -> int:
        count = 0
        for page in self._pages_named(page_name):
            if page.pair_exists(label):
                page.delete_row(label)
                count += 1
        return count

    def apply_csv_rows_all(self, page_name: str, rows: List[CsvRow]) -> int:
        """Apply imported CSV rows to the named page of every locale that has it."""
        pages = list(self._pages_named(page_name))
        for page in pages:
            apply_csv_rows(page, rows)
        return len(pages)


def load_bundle(
    folder: Path,
    key: bytes = DEFAULT_KEY,
    max_workers: int = DEFAULT_WORKERS,
) -> LocaleBundle:
    """
    Decode every recognised locale of folder. Locales load in parallel and a
    failed locale is reported in the outcomes without stopping its siblings.
    """
    layout, located = discover_locales(folder)
    bundle = LocaleBundle(folder, layout)
    if layout is None:
        logger.warning(f"No locale files or folders found in {folder}")
        return bundle

    logger.info(f"{folder}: {layout.name}, {len(located)} locales")
    outcomes: Dict[str, LocaleOutcome] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_locale = {
            executor.submit(_load_locale, code, path, key): (code, path)
            for code, path in located
        }
        for future in as_completed(future_to_locale):
            code, path = future_to_locale[future]
            try:
                outcomes[code] = LocaleOutcome(code, path, document=future.result())
            except Exception as e:
                logger.error(f"Failed to load locale {code} from {path}: {e}")
                outcomes[code] = LocaleOutcome(code, path, error=e)

    # as_completed order is arbitrary, keep discovery order
    bundle.outcomes = [outcomes[code] for code, _ in located]
    return bundle


def save_bundle(bundle: LocaleBundle, folder: Optional[Path] = None) -> List[LocaleOutcome]:
    """
    Save every loaded locale using the bundle's layout, into folder or back into
    the folder it was loaded from. Returns the locales that failed to save.
    Text that cannot be encoded (lone surrogates) or a string over the length
    limit fails only its own locale.
    """
    if bundle.layout is None:
        raise ValueError(f"{bundle.folder} has no recognised locale layout to save.")
    target = folder or bundle.folder

    failures: List[LocaleOutcome] = []
    for code, document in bundle.documents.items():
        path = locale_path(target, bundle.layout, code)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            codec.save(document, path)
            logger.debug(f"Saved locale {code} to {path}")
        except (RTextError, ValueError, OSError) as e:
            logger.error(f"Failed to save locale {code} to {path}: {e}")
            failures.append(LocaleOutcome(code, path, document=document, error=e))
    return failures
