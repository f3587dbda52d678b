"""
beymeta/parts.py
================
Reference catalog of known blades, ratchets and bits.

The catalog is keyed by the short identifier that appears inside combo
strings: the blade name, the ratchet code, and the bit *shortcut*.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from beymeta.thresholds import PART_TYPES

LOGGER = logging.getLogger(__name__)

# Column names in the hosted reference tables
BLADE_KEY_COLUMN = 'Blades'
BLADE_LINE_COLUMN = 'Line'
RATCHET_KEY_COLUMN = 'Ratchet'
BIT_NAME_COLUMN = 'Bit'
BIT_KEY_COLUMN = 'Shortcut'


@dataclass(frozen=True)
class Part:
    """One catalog entry. ``name`` is always the key used in combo strings."""
    name: str
    full_name: str = ''
    line: str = ''


def _frozen(mapping: dict) -> Mapping[str, Part]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class PartCatalog:
    blade: Mapping[str, Part] = field(default_factory=lambda: _frozen({}))
    ratchet: Mapping[str, Part] = field(default_factory=lambda: _frozen({}))
    bit: Mapping[str, Part] = field(default_factory=lambda: _frozen({}))

    def of_type(self, part_type: str) -> Mapping[str, Part]:
        if part_type not in PART_TYPES:
            raise ValueError(f"Unknown part type '{part_type}' (expected one of {', '.join(PART_TYPES)})")
        return getattr(self, part_type)

    @property
    def bit_keys(self) -> list[str]:
        return list(self.bit.keys())

    def __len__(self) -> int:
        return len(self.blade) + len(self.ratchet) + len(self.bit)

    @classmethod
    def from_mappings(
        cls,
        blade: Iterable[str] | Mapping[str, Any] = (),
        ratchet: Iterable[str] | Mapping[str, Any] = (),
        bit: Iterable[str] | Mapping[str, Any] = (),
    ) -> 'PartCatalog':
        """Build a catalog from plain key collections, mostly for scripts and tests."""

        def _entries(source: Iterable[str] | Mapping[str, Any], part_type: str) -> dict:
            entries = {}
            for key in source:
                detail = source[key] if isinstance(source, Mapping) else None
                if isinstance(detail, Part):
                    entries[key] = detail
                    continue
                detail = detail if isinstance(detail, Mapping) else {}
                entries[key] = Part(
                    name=key,
                    full_name=str(detail.get('full_name') or (key if part_type != 'bit' else '')),
                    line=str(detail.get('line') or ''),
                )
            return entries

        return cls(
            blade=_frozen(_entries(blade, 'blade')),
            ratchet=_frozen(_entries(ratchet, 'ratchet')),
            bit=_frozen(_entries(bit, 'bit')),
        )


def _clean(value: Any) -> str:
    return str(value).strip() if value is not None else ''


def catalog_from_rows(
    blade_rows: Iterable[Mapping[str, Any]],
    ratchet_rows: Iterable[Mapping[str, Any]],
    bit_rows: Iterable[Mapping[str, Any]],
) -> PartCatalog:
    """
    Build a catalog from hosted reference-table rows.

    Args:
        blade_rows: Rows with ``Blades`` and ``Line`` columns
        ratchet_rows: Rows with a ``Ratchet`` column
        bit_rows: Rows with ``Bit`` (full name) and ``Shortcut`` columns

    Returns:
        PartCatalog; rows with an empty key are skipped, duplicates keep the last row
    """
    blades: dict[str, Part] = {}
    for row in blade_rows or []:
        key = _clean(row.get(BLADE_KEY_COLUMN))
        if not key:
            LOGGER.warning("Skipping blade row without a name: %s", dict(row))
            continue
        blades[key] = Part(name=key, full_name=key, line=_clean(row.get(BLADE_LINE_COLUMN)))

    ratchets: dict[str, Part] = {}
    for row in ratchet_rows or []:
        key = _clean(row.get(RATCHET_KEY_COLUMN))
        if not key:
            LOGGER.warning("Skipping ratchet row without a code: %s", dict(row))
            continue
        ratchets[key] = Part(name=key, full_name=key)

    bits: dict[str, Part] = {}
    for row in bit_rows or []:
        key = _clean(row.get(BIT_KEY_COLUMN))
        if not key:
            LOGGER.warning("Skipping bit row without a shortcut: %s", dict(row))
            continue
        bits[key] = Part(name=key, full_name=_clean(row.get(BIT_NAME_COLUMN)))

    LOGGER.debug("Catalog loaded: %s blades, %s ratchets, %s bits", len(blades), len(ratchets), len(bits))
    return PartCatalog(blade=_frozen(blades), ratchet=_frozen(ratchets), bit=_frozen(bits))


def _csv_rows(text: str) -> list[list[str]]:
    reader = csv.reader(io.StringIO((text or '').strip()))
    return [row for row in reader if any(cell.strip() for cell in row)]


def catalog_from_csv(blade_csv: str, ratchet_csv: str, bit_csv: str) -> PartCatalog:
    """
    Build a catalog from the legacy published-sheet exports.

    Blade sheet: ``name,line``. Ratchet sheet: ``name``.
    Bit sheet: ``full_name,shortcut[,line]``. The first row is a header.
    """

    def _cell(row: list[str], index: int) -> str:
        return row[index].strip() if index < len(row) else ''

    blade_rows = [
        {BLADE_KEY_COLUMN: _cell(row, 0), BLADE_LINE_COLUMN: _cell(row, 1)}
        for row in _csv_rows(blade_csv)[1:]
    ]
    ratchet_rows = [{RATCHET_KEY_COLUMN: _cell(row, 0)} for row in _csv_rows(ratchet_csv)[1:]]
    bit_rows = [
        {BIT_NAME_COLUMN: _cell(row, 0), BIT_KEY_COLUMN: _cell(row, 1)}
        for row in _csv_rows(bit_csv)[1:]
    ]
    return catalog_from_rows(blade_rows, ratchet_rows, bit_rows)
