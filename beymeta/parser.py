# beymeta/parser.py

import csv
import io
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from beymeta.thresholds import UNKNOWN_FINISH

LOGGER = logging.getLogger(__name__)


class ParsedBuild(NamedTuple):
    blade: str
    ratchet: str
    bit: str

    @property
    def is_known(self) -> bool:
        return bool(self.bit)

    @property
    def build_string(self) -> str:
        """Canonical ``"<blade> <ratchet><bit>"`` form; not guaranteed to match the source combo byte for byte."""
        return f"{self.blade} {self.ratchet}{self.bit}"

    def key_for(self, part_type: str) -> str:
        return getattr(self, part_type)


UNPARSEABLE = ParsedBuild('', '', '')


@dataclass(frozen=True)
class MatchRecord:
    player1: str
    player2: str
    bey1: str
    bey2: str
    winner: str
    finish: str = UNKNOWN_FINISH

    def sides(self):
        """Yield ``(player, bey, opponent, opponent_bey)`` for both sides."""
        yield self.player1, self.bey1, self.player2, self.bey2
        yield self.player2, self.bey2, self.player1, self.bey1


class BuildParser:
    """
    Split combo strings such as ``"Dran Sword 3-60F"`` into blade, ratchet and bit.

    There is no delimiter between ratchet and bit, so the bit is found by
    suffix match against the known bit shortcuts, longest first. Only the
    last space before the bit separates blade from ratchet, which keeps
    multi-word blade names intact.
    """

    def __init__(self, bit_keys: Iterable[str]):
        keys = [key for key in bit_keys if key]
        # sorted() is stable, so equal lengths keep catalog order
        self.bit_keys = sorted(keys, key=len, reverse=True)

    def parse(self, combo: Optional[str]) -> ParsedBuild:
        """
        Parse one combo string.

        Args:
            combo: Raw combo text, e.g. "Wizard Rod 9-60B"

        Returns:
            ParsedBuild; UNPARSEABLE when no known bit ends the combo or
            blade and ratchet cannot be separated
        """
        if not isinstance(combo, str):
            return UNPARSEABLE

        for bit in self.bit_keys:
            if not combo.endswith(bit):
                continue
            without_bit = combo[:len(combo) - len(bit)].strip()
            last_space = without_bit.rfind(' ')
            if last_space == -1:
                return UNPARSEABLE
            blade = without_bit[:last_space].strip()
            ratchet = without_bit[last_space + 1:].strip()
            return ParsedBuild(blade, ratchet, bit)

        return UNPARSEABLE


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ''


def match_from_row(row: Dict[str, Any]) -> MatchRecord:
    """Convert one hosted ``match_results`` row."""
    return MatchRecord(
        player1=_text(row.get('player1_name')),
        player2=_text(row.get('player2_name')),
        bey1=_text(row.get('player1_beyblade')),
        bey2=_text(row.get('player2_beyblade')),
        winner=_text(row.get('winner_name')),
        finish=_text(row.get('outcome')) or UNKNOWN_FINISH,
    )


def matches_from_rows(rows: Iterable[Dict[str, Any]]) -> List[MatchRecord]:
    return [match_from_row(row) for row in rows or []]


class MatchSheetParser:
    """Parse the legacy published match sheet (CSV with a header row)."""

    COLUMNS = {
        'player1': 'PLAYER 1',
        'player2': 'PLAYER 2',
        'bey1': 'BEY 1',
        'bey2': 'BEY 2',
        'winner': 'WINNER',
        'finish': 'OUTCOME',
    }
    REQUIRED = ('player1', 'player2', 'bey1', 'bey2', 'winner')

    def parse(self, csv_text: str) -> List[MatchRecord]:
        """
        Parse match sheet text into records.

        Raises:
            ValueError: If a required column is missing from the header
        """
        rows = [row for row in csv.reader(io.StringIO((csv_text or '').strip())) if row]
        if not rows:
            return []

        header = [cell.strip() for cell in rows[0]]
        index = {field: header.index(name) for field, name in self.COLUMNS.items() if name in header}
        missing = [self.COLUMNS[field] for field in self.REQUIRED if field not in index]
        if missing:
            raise ValueError(f"Match sheet is missing columns: {', '.join(missing)}")

        def _cell(row: List[str], field: str) -> str:
            i = index.get(field)
            if i is None or i >= len(row):
                return ''
            return row[i].strip()

        matches = []
        for line_no, row in enumerate(rows[1:], start=2):
            if len(row) < len(header):
                LOGGER.warning("Match sheet line %s has %s cells, expected %s", line_no, len(row), len(header))
            matches.append(MatchRecord(
                player1=_cell(row, 'player1'),
                player2=_cell(row, 'player2'),
                bey1=_cell(row, 'bey1'),
                bey2=_cell(row, 'bey2'),
                winner=_cell(row, 'winner'),
                finish=_cell(row, 'finish') or UNKNOWN_FINISH,
            ))
        return matches


def parse_build(combo: Optional[str], bit_keys: Iterable[str]) -> ParsedBuild:
    """One-off parse; build a BuildParser instead when parsing many combos."""
    return BuildParser(bit_keys).parse(combo)
