"""Static station directory and free-text matching.

The directory is built once from the station table shipped with the
package and is read-only afterwards. Every name and alias is
canonicalized (accents stripped, case folded, punctuation collapsed)
both when the directory is built and when a query comes in, so that
"Den Haag C", "den haag c" and "Dén-Haag C" all address the same form.
"""

from __future__ import annotations

import csv
import re
import unicodedata
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from rapidfuzz import fuzz, process

from ..domain.errors import ConfigurationError
from ..domain.models import (
    Ambiguous,
    NoMatch,
    SingleMatch,
    StationLookup,
    StationRecord,
)

ALIAS_SEPARATOR = "|"

# Minimum similarity score (0-100) for a name to be suggested
MIN_SUGGESTION_SCORE = 60


def canonicalize(text: str) -> str:
    """Normalize text for matching (remove accents/punctuation, fold case)."""
    normalized = unicodedata.normalize("NFD", text)
    normalized = "".join(ch for ch in normalized if unicodedata.category(ch) != "Mn")
    normalized = normalized.casefold()
    normalized = re.sub(r"[\W_]+", " ", normalized)
    return normalized.strip()


@dataclass(frozen=True)
class StationDirectory:
    """Immutable, ordered collection of stations with an alias index.

    Attributes:
        records: Stations in directory order
    """

    records: tuple[StationRecord, ...]

    _forms: tuple[frozenset[str], ...] = field(init=False, repr=False, compare=False)
    _index: Mapping[str, tuple[int, ...]] = field(init=False, repr=False, compare=False)
    _by_uic: Mapping[int, StationRecord] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_uic: dict[int, StationRecord] = {}
        forms: list[frozenset[str]] = []
        index: dict[str, list[int]] = {}

        for record in self.records:
            if record.uic_code in by_uic:
                raise ValueError(f"Duplicate UIC code in directory: {record.uic_code}")
            by_uic[record.uic_code] = record

            keys = {canonicalize(text) for text in (record.name, *record.aliases)}
            keys.discard("")
            forms.append(frozenset(keys))
            for key in keys:
                index.setdefault(key, []).append(record.uic_code)

        object.__setattr__(self, "_forms", tuple(forms))
        object.__setattr__(
            self,
            "_index",
            MappingProxyType({key: tuple(codes) for key, codes in index.items()}),
        )
        object.__setattr__(self, "_by_uic", MappingProxyType(by_uic))

    @classmethod
    def from_records(cls, records: Iterable[StationRecord]) -> StationDirectory:
        """Build a directory, keeping the iteration order of ``records``."""
        return cls(records=tuple(records))

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[StationRecord]:
        return iter(self.records)

    def get(self, uic_code: int) -> Optional[StationRecord]:
        """Return the station with the given UIC code, if any."""
        return self._by_uic.get(uic_code)

    def lookup(self, query: str) -> StationLookup:
        """Match a free-text query against every name and alias.

        A station matches when the canonical query equals, or is a
        substring of, one of its canonical forms. Exact matches on any
        form take precedence over substring matches. Candidates are
        returned in directory order.

        Args:
            query: The station name as typed by the user.

        Returns:
            NoMatch, SingleMatch or Ambiguous.
        """
        needle = canonicalize(query)
        if not needle:
            return NoMatch(query=query)

        exact = self._index.get(needle)
        if exact:
            return to_lookup(query, tuple(self._by_uic[code] for code in exact))

        partial = tuple(
            record
            for record, forms in zip(self.records, self._forms)
            if any(needle in form for form in forms)
        )
        return to_lookup(query, partial)

    def suggest(self, query: str, limit: int = 5) -> tuple[str, ...]:
        """Return station names that look like ``query``.

        Uses rapidfuzz to rank canonical station names by similarity;
        intended for "did you mean" hints after a NoMatch.

        Args:
            query: The station name as typed by the user.
            limit: Maximum number of names to return.

        Returns:
            Display names, best match first.
        """
        needle = canonicalize(query)
        if not needle or limit <= 0:
            return ()

        choices = {position: canonicalize(r.name) for position, r in enumerate(self.records)}
        results = process.extract(
            needle,
            choices,
            scorer=fuzz.WRatio,
            limit=limit,
            score_cutoff=MIN_SUGGESTION_SCORE,
        )
        return tuple(self.records[position].name for _, _, position in results)


def to_lookup(query: str, candidates: tuple[StationRecord, ...]) -> StationLookup:
    """Turn an ordered candidate tuple into a lookup outcome."""
    if not candidates:
        return NoMatch(query=query)
    if len(candidates) == 1:
        return SingleMatch(query=query, record=candidates[0])
    return Ambiguous(query=query, candidates=candidates)


def load_directory(path: Path) -> StationDirectory:
    """Load the station directory from a CSV file.

    The CSV has the columns ``uic_code``, ``name`` and ``aliases``
    (aliases separated by ``|``). Rows without a code or a name are
    skipped.

    Args:
        path: Path to the station table.

    Returns:
        The directory, in file order.

    Raises:
        ConfigurationError: If the file cannot be read or is invalid.
    """
    records: list[StationRecord] = []
    try:
        with path.open(encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            for row in reader:
                code = (row.get("uic_code") or "").strip()
                name = (row.get("name") or "").strip()
                if not code or not name:
                    continue

                raw_aliases = (row.get("aliases") or "").split(ALIAS_SEPARATOR)
                aliases = frozenset(a.strip() for a in raw_aliases if a.strip())
                records.append(
                    StationRecord(name=name, uic_code=int(code), aliases=aliases)
                )
        return StationDirectory.from_records(records)
    except (OSError, ValueError) as e:
        raise ConfigurationError(
            f"Failed to load station table {path}",
            setting_name="stations.data_path",
            cause=e,
        )


def write_directory(records: Iterable[StationRecord], path: Path) -> int:
    """Write stations to a CSV file readable by ``load_directory``.

    Args:
        records: Stations to write, in the desired directory order.
        path: Destination file.

    Returns:
        Number of stations written.
    """
    count = 0
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerow(["uic_code", "name", "aliases"])
        for record in records:
            writer.writerow(
                [
                    record.uic_code,
                    record.name,
                    ALIAS_SEPARATOR.join(sorted(record.aliases)),
                ]
            )
            count += 1
    return count
